"""Buyer's, Additional Buyer's and Seller's Stamp Duty."""

import logging
from dataclasses import dataclass, field

from property_calc_sg.lookup import MatchStage, resolve
from property_calc_sg.params import StampDutyInput
from property_calc_sg.regulatory import (
    ABSDRate,
    BSDTier,
    PropertyType,
    RegulatoryConfig,
    ResidencyStatus,
    SSDTier,
)
from property_calc_sg.tax import TierCharge, progressive_tax

logger = logging.getLogger(__name__)

ENTITY_ABSD_RATE = 0.65  # trusts, companies and other entities

# Higher = more restrictive ABSD position
_RESIDENCY_RANK = {
    ResidencyStatus.SINGAPOREAN: 0,
    ResidencyStatus.PR: 1,
    ResidencyStatus.FOREIGNER: 2,
}


@dataclass(frozen=True)
class BSDResult:
    amount: float
    breakdown: list[TierCharge] = field(default_factory=list)


@dataclass(frozen=True)
class ABSDResult:
    rate: float
    amount: float
    rationale: str
    was_fallback: bool = False


@dataclass(frozen=True)
class SSDResult:
    amount: float
    rate: float
    is_exempt: bool


@dataclass(frozen=True)
class StampDutyBreakdown:
    bsd_tiers: list[TierCharge]
    absd_rate: float
    ssd_rate: float
    effective_residency: ResidencyStatus


@dataclass(frozen=True)
class StampDutyResult:
    bsd: float
    absd: ABSDResult
    ssd: float
    total_stamp_duty: float
    breakdown: StampDutyBreakdown

    @property
    def buyer_duties(self) -> float:
        """BSD + ABSD (duties payable by the buyer at purchase)."""
        return self.bsd + self.absd.amount


def effective_residency(
    buyer: ResidencyStatus, co_buyer: ResidencyStatus | None = None,
) -> ResidencyStatus:
    """Residency used for ABSD: the more restrictive of the co-owners."""
    if co_buyer is None:
        return buyer
    return max(buyer, co_buyer, key=_RESIDENCY_RANK.__getitem__)


def calculate_bsd(purchase_price: float, tiers: tuple[BSDTier, ...]) -> BSDResult:
    """Progressive BSD. Non-positive prices return zero."""
    if purchase_price <= 0:
        return BSDResult(amount=0.0)
    total, breakdown = progressive_tax(
        purchase_price,
        [(t.min_value, t.max_value, t.rate, t.label) for t in tiers],
    )
    return BSDResult(amount=total, breakdown=breakdown)


def calculate_absd(
    purchase_price: float,
    residency_status: ResidencyStatus,
    property_type: PropertyType,
    existing_properties: int,
    absd_rates: tuple[ABSDRate, ...],
    is_entity: bool = False,
) -> ABSDResult:
    """ABSD by exact (residency, type, count) match with a residency-only fallback.

    The fallback takes the highest tabulated property count for the
    residency, assuming rates never fall as the count rises.
    """
    price = max(0.0, purchase_price)
    if is_entity:
        return ABSDResult(
            rate=ENTITY_ABSD_RATE,
            amount=price * ENTITY_ABSD_RATE,
            rationale=f"Entity purchases (trust, company) face {ENTITY_ABSD_RATE:.0%} ABSD",
        )

    lookup = resolve(absd_rates, [
        MatchStage(
            "exact",
            lambda r: (
                r.residency_status == residency_status
                and r.property_type == property_type
                and r.existing_properties == existing_properties
            ),
        ),
        MatchStage(
            "residency",
            lambda r: r.residency_status == residency_status,
            rank=lambda r: r.existing_properties,
        ),
    ])
    if not lookup.found:
        logger.debug("No ABSD entry for %s; applying 0%%", residency_status.value)
        return ABSDResult(
            rate=0.0,
            amount=0.0,
            rationale=f"No ABSD rate found for {residency_status.value} buyers",
            was_fallback=True,
        )
    entry = lookup.entry
    rationale = entry.rationale
    if lookup.was_fallback:
        rationale = f"{entry.rationale} (fallback for {existing_properties}+ properties)"
        logger.debug(
            "ABSD fallback: %s/%s/%d resolved to %.0f%%",
            residency_status.value, property_type.value, existing_properties, entry.rate * 100,
        )
    return ABSDResult(
        rate=entry.rate,
        amount=price * entry.rate,
        rationale=rationale,
        was_fallback=lookup.was_fallback,
    )


def calculate_ssd(
    sale_price: float,
    holding_period_months: int,
    ssd_tiers: tuple[SSDTier, ...],
    exemption_threshold_months: int,
) -> SSDResult:
    """SSD on a sale after ``holding_period_months``."""
    if holding_period_months >= exemption_threshold_months:
        return SSDResult(amount=0.0, rate=0.0, is_exempt=True)
    for tier in ssd_tiers:
        if holding_period_months >= tier.min_months and (
            tier.max_months is None or holding_period_months < tier.max_months
        ):
            return SSDResult(amount=max(0.0, sale_price) * tier.rate, rate=tier.rate, is_exempt=False)
    logger.debug("No SSD band covers %d months; treating as exempt", holding_period_months)
    return SSDResult(amount=0.0, rate=0.0, is_exempt=True)


def calculate_stamp_duty(inp: StampDutyInput, config: RegulatoryConfig) -> StampDutyResult:
    """BSD + ABSD, plus SSD when a holding period is supplied."""
    residency = effective_residency(inp.residency_status, inp.co_buyer_residency)
    bsd = calculate_bsd(inp.purchase_price, config.bsd_tiers)
    absd = calculate_absd(
        inp.purchase_price,
        residency,
        inp.property_type,
        inp.existing_properties,
        config.absd_rates,
        is_entity=inp.is_entity,
    )
    if inp.holding_period_months is not None:
        ssd = calculate_ssd(
            inp.purchase_price,
            inp.holding_period_months,
            config.ssd_tiers,
            config.ssd_exemption_threshold_months,
        )
    else:
        ssd = SSDResult(amount=0.0, rate=0.0, is_exempt=True)

    return StampDutyResult(
        bsd=bsd.amount,
        absd=absd,
        ssd=ssd.amount,
        total_stamp_duty=bsd.amount + absd.amount + ssd.amount,
        breakdown=StampDutyBreakdown(
            bsd_tiers=bsd.breakdown,
            absd_rate=absd.rate,
            ssd_rate=ssd.rate,
            effective_residency=residency,
        ),
    )
