"""Progressive tier walks and property tax."""

import math
from dataclasses import dataclass

from property_calc_sg.regulatory import PropertyTaxTables


@dataclass(frozen=True)
class TierCharge:
    label: str
    rate: float
    amount: float


def progressive_tax(
    base_amount: float,
    tiers: list[tuple[float, float | None, float, str]],
) -> tuple[float, list[TierCharge]]:
    """Sum a progressive tax over ordered (min, max|None, rate, label) tiers.

    Each tier taxes min(remaining, max - min) at its rate; the walk stops
    once the base is used up. None as max is an open-ended top tier.
    """
    remaining = base_amount
    total = 0.0
    breakdown: list[TierCharge] = []
    for lo, hi, rate, label in tiers:
        if remaining <= 0:
            break
        width = (hi if hi is not None else math.inf) - lo
        applicable = min(remaining, width)
        charge = applicable * rate
        total += charge
        breakdown.append(TierCharge(label=label, rate=rate, amount=charge))
        remaining -= applicable
    return total, breakdown


def estimate_annual_value(purchase_price: float, proxy_pct: float) -> float:
    """Annual Value proxy used in place of the IRAS-assessed AV (estimate only)."""
    return max(0.0, purchase_price) * proxy_pct


def calc_property_tax(
    annual_value: float,
    is_owner_occupied: bool,
    tables: PropertyTaxTables,
) -> tuple[float, list[TierCharge]]:
    """Annual property tax (SGD) on ``annual_value``.

    Owner-occupied and non-owner-occupied homes use separate schedules with
    their own band boundaries; ``is_owner_occupied`` picks one.
    """
    if annual_value <= 0:
        return 0.0, []
    tiers = tables.owner_occupied if is_owner_occupied else tables.non_owner_occupied
    rows = [(t.annual_value_min, t.annual_value_max, t.rate, t.label) for t in tiers]
    return progressive_tax(annual_value, rows)
