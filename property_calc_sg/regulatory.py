"""Regulatory configuration: tier tables, rate matrices and limits.

A ``RegulatoryConfig`` is built once through ``RegulatoryConfig.from_dict``
(or ``load_regulatory_config`` for TOML files). The pydantic schema below
validates every section; structural failures surface as ``ConfigError`` with
the dotted location of each offending value. Calculation modules take the
resulting frozen snapshot and never re-check its structure.
"""

import datetime
import tomllib
from enum import Enum
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator


class ConfigError(ValueError):
    """Raised when a regulatory table is missing or malformed."""


class ResidencyStatus(str, Enum):
    SINGAPOREAN = "Singaporean"
    PR = "PR"
    FOREIGNER = "Foreigner"


class PropertyType(str, Enum):
    HDB = "HDB"
    CONDO = "Condo"
    LANDED = "Landed"
    EC = "EC"


class LoanType(str, Enum):
    HDB = "HDB"
    BANK = "bank"


# Strict numbers: TOML booleans must not pass as 0/1.
Amount = Annotated[float, Field(strict=True, ge=0)]
Rate = Annotated[float, Field(strict=True, ge=0, le=1)]  # decimal, e.g. 0.025
Percent = Annotated[float, Field(strict=True, ge=0, le=100)]
Count = Annotated[int, Field(strict=True, ge=0)]


class ImmutableModel(BaseModel):
    """Frozen base model that rejects unknown keys."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class BSDTier(ImmutableModel):
    min_value: Amount
    max_value: Annotated[float, Field(strict=True)] | None = None
    rate: Rate
    label: str = ""

    @model_validator(mode="after")
    def _check_bounds(self) -> "BSDTier":
        if self.max_value is not None and self.max_value <= self.min_value:
            raise ConfigError("max_value must exceed min_value")
        return self


class ABSDRate(ImmutableModel):
    residency_status: ResidencyStatus
    property_type: PropertyType
    existing_properties: Count
    rate: Rate
    rationale: str


class SSDTier(ImmutableModel):
    min_months: Count
    max_months: Count | None = None
    rate: Rate
    label: str = ""

    @model_validator(mode="after")
    def _check_bounds(self) -> "SSDTier":
        if self.max_months is not None and self.max_months <= self.min_months:
            raise ConfigError("max_months must exceed min_months")
        return self


class SSDSchedule(ImmutableModel):
    exemption_threshold_months: Count
    tiers: tuple[SSDTier, ...] = Field(min_length=1)

    @model_validator(mode="after")
    def _check_tiers(self) -> "SSDSchedule":
        _check_contiguous(
            [(t.min_months, t.max_months) for t in self.tiers], "tiers", open_ended=False,
        )
        last = self.tiers[-1]
        if last.max_months is not None and last.max_months < self.exemption_threshold_months:
            raise ConfigError(
                f"tiers: bands end at {last.max_months} months "
                f"but exemption starts at {self.exemption_threshold_months} months"
            )
        return self


class StampDutyTables(ImmutableModel):
    bsd_tiers: tuple[BSDTier, ...] = Field(min_length=1)
    absd_rates: tuple[ABSDRate, ...] = Field(min_length=1)
    ssd: SSDSchedule

    @model_validator(mode="after")
    def _check_tables(self) -> "StampDutyTables":
        _check_contiguous([(t.min_value, t.max_value) for t in self.bsd_tiers], "bsd_tiers")
        seen = set()
        for i, r in enumerate(self.absd_rates):
            key = (r.residency_status, r.property_type, r.existing_properties)
            if key in seen:
                raise ConfigError(
                    f"absd_rates[{i}]: duplicate entry for "
                    f"{r.residency_status.value}/{r.property_type.value}/{r.existing_properties}"
                )
            seen.add(key)
        return self


class LTVRule(ImmutableModel):
    loan_type: LoanType
    property_type: PropertyType
    loan_tenure_years: Count
    existing_loans: Count
    max_ltv_pct: Annotated[float, Field(strict=True, gt=0, le=100)]
    min_cash_down_payment_pct: Percent

    @model_validator(mode="after")
    def _check_down_payment(self) -> "LTVRule":
        if self.min_cash_down_payment_pct > 100 - self.max_ltv_pct:
            raise ConfigError("min_cash_down_payment_pct exceeds the down payment (100 - max_ltv_pct)")
        return self


class TDSRLimits(ImmutableModel):
    limit: Rate
    variable_income_haircut_pct: Percent


class MSRLimits(ImmutableModel):
    limit: Rate
    applicable_property_types: frozenset[PropertyType]


class BorrowingLimits(ImmutableModel):
    tdsr: TDSRLimits
    msr: MSRLimits
    ltv_rules: tuple[LTVRule, ...] = Field(min_length=1)


class CPFRates(ImmutableModel):
    oa_interest_rate: Amount  # decimal, e.g. 0.025
    sa_interest_rate: Amount


class MortgageRates(ImmutableModel):
    hdb_base_interest_rate_pct: Amount
    bank_typical_min_pct: Amount
    bank_typical_max_pct: Amount

    @model_validator(mode="after")
    def _check_bank_range(self) -> "MortgageRates":
        if self.bank_typical_min_pct > self.bank_typical_max_pct:
            raise ConfigError("bank_typical_min_pct exceeds bank_typical_max_pct")
        return self


class PropertyTaxTier(ImmutableModel):
    annual_value_min: Amount
    annual_value_max: Annotated[float, Field(strict=True)] | None = None
    rate: Rate
    label: str = ""

    @model_validator(mode="after")
    def _check_bounds(self) -> "PropertyTaxTier":
        if self.annual_value_max is not None and self.annual_value_max <= self.annual_value_min:
            raise ConfigError("annual_value_max must exceed annual_value_min")
        return self


class PropertyTaxTables(ImmutableModel):
    """Owner-occupied and non-owner-occupied schedules, each with its own bands."""

    annual_value_proxy_pct: Rate
    owner_occupied: tuple[PropertyTaxTier, ...] = Field(min_length=1)
    non_owner_occupied: tuple[PropertyTaxTier, ...] = Field(min_length=1)

    @model_validator(mode="after")
    def _check_tiers(self) -> "PropertyTaxTables":
        for name in ("owner_occupied", "non_owner_occupied"):
            tiers = getattr(self, name)
            _check_contiguous([(t.annual_value_min, t.annual_value_max) for t in tiers], name)
        return self


class MaintenanceFees(ImmutableModel):
    hdb_monthly_min: Amount
    hdb_monthly_max: Amount
    condo_monthly_per_sqft_min: Amount
    condo_monthly_per_sqft_max: Amount
    landed_monthly_estimate: Amount


class MiscFees(ImmutableModel):
    legal_conveyancing_fees_pct: Rate  # decimal share of price, e.g. 0.004
    valuation_fee: Amount
    insurance_annual_min: Amount
    insurance_annual_max: Amount


class RegulatoryConfig(ImmutableModel):
    version: str
    effective_date: str
    last_updated: str

    stamp_duty: StampDutyTables
    borrowing: BorrowingLimits
    mortgage: MortgageRates
    cpf: CPFRates
    property_tax: PropertyTaxTables
    maintenance_fees: MaintenanceFees
    misc: MiscFees

    @field_validator("version", "effective_date", "last_updated", mode="before")
    @classmethod
    def _date_as_text(cls, v):
        # TOML reads unquoted dates as datetime.date
        return v.isoformat() if isinstance(v, datetime.date) else v

    @classmethod
    def from_dict(cls, raw: dict) -> "RegulatoryConfig":
        """Validate a raw mapping (TOML/JSON shaped) and build a frozen config."""
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            raise ConfigError(_describe(e)) from e

    # Flat accessors used by the calculation modules

    @property
    def bsd_tiers(self) -> tuple[BSDTier, ...]:
        return self.stamp_duty.bsd_tiers

    @property
    def absd_rates(self) -> tuple[ABSDRate, ...]:
        return self.stamp_duty.absd_rates

    @property
    def ssd_tiers(self) -> tuple[SSDTier, ...]:
        return self.stamp_duty.ssd.tiers

    @property
    def ssd_exemption_threshold_months(self) -> int:
        return self.stamp_duty.ssd.exemption_threshold_months

    @property
    def tdsr(self) -> TDSRLimits:
        return self.borrowing.tdsr

    @property
    def msr(self) -> MSRLimits:
        return self.borrowing.msr

    @property
    def ltv_rules(self) -> tuple[LTVRule, ...]:
        return self.borrowing.ltv_rules

    @property
    def annual_value_proxy_pct(self) -> float:
        return self.property_tax.annual_value_proxy_pct

    @property
    def maintenance(self) -> MaintenanceFees:
        return self.maintenance_fees


def load_regulatory_config(path: Path) -> RegulatoryConfig:
    """Load and validate a regulatory TOML file. Raises ConfigError."""
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except FileNotFoundError:
        raise ConfigError(f"regulatory config not found: {path}")
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"regulatory config is not valid TOML: {path}: {e}")
    return RegulatoryConfig.from_dict(raw)


def _check_contiguous(bounds: list, where: str, open_ended: bool = True) -> None:
    """``(lower, upper)`` pairs must tile [0, inf) in order, starting at 0.

    Only the last pair may have ``upper=None``; with ``open_ended`` it must.
    """
    expected = 0
    last = len(bounds) - 1
    for i, (lo, hi) in enumerate(bounds):
        if lo != expected:
            raise ConfigError(
                f"{where}[{i}]: lower bound {lo:,.0f} leaves a gap or overlap "
                f"(previous tier ends at {expected:,.0f})"
            )
        if hi is None and i != last:
            raise ConfigError(f"{where}[{i}]: only the last tier may be open-ended")
        if hi is not None and i == last and open_ended:
            raise ConfigError(f"{where}[{i}]: last tier must be open-ended (upper bound missing)")
        if hi is not None:
            expected = hi


def _describe(error: ValidationError) -> str:
    """One ``location: message`` line per failure, joined with '; '."""
    parts = []
    for err in error.errors():
        where = ""
        for item in err["loc"]:
            where += f"[{item}]" if isinstance(item, int) else (f".{item}" if where else str(item))
        if err["type"] == "value_error":
            msg = str(err["ctx"]["error"])
        elif err["type"] in ("missing", "extra_forbidden"):
            msg = err["msg"]
        else:
            msg = f"{err['msg']} (got {_short(err['input'])})"
        parts.append(f"{where}: {msg}" if where else msg)
    return "; ".join(parts)


def _short(value) -> str:
    text = repr(value)
    return text if len(text) <= 60 else text[:57] + "..."


# ── Bundled snapshot (IRAS / MAS / CPF Board rates, 2024) ───────────────────

_S, _P, _F = "Singaporean", "PR", "Foreigner"

SG_2024_RAW: dict = {
    "version": "2024.1",
    "effective_date": "2024-01-01",
    "last_updated": "2024-02-15",
    "stamp_duty": {
        "bsd_tiers": [
            {"min_value": 0, "max_value": 180_000, "rate": 0.01, "label": "First $180,000"},
            {"min_value": 180_000, "max_value": 360_000, "rate": 0.02, "label": "$180,000 to $360,000"},
            {"min_value": 360_000, "max_value": 1_000_000, "rate": 0.03, "label": "$360,000 to $1,000,000"},
            {"min_value": 1_000_000, "max_value": 1_500_000, "rate": 0.04, "label": "$1,000,000 to $1,500,000"},
            {"min_value": 1_500_000, "max_value": 3_000_000, "rate": 0.05, "label": "$1,500,000 to $3,000,000"},
            {"min_value": 3_000_000, "max_value": None, "rate": 0.06, "label": "Above $3,000,000"},
        ],
        "absd_rates": [
            {"residency_status": _S, "property_type": "HDB", "existing_properties": 0, "rate": 0.0,
             "rationale": "First HDB flat for Singaporean Citizens"},
            {"residency_status": _S, "property_type": "Condo", "existing_properties": 0, "rate": 0.0,
             "rationale": "First residential property for Singaporean Citizens"},
            {"residency_status": _S, "property_type": "EC", "existing_properties": 0, "rate": 0.0,
             "rationale": "First EC for Singaporean Citizens"},
            {"residency_status": _S, "property_type": "Landed", "existing_properties": 0, "rate": 0.0,
             "rationale": "First landed property for Singaporean Citizens"},
            {"residency_status": _S, "property_type": "Condo", "existing_properties": 1, "rate": 0.20,
             "rationale": "Second residential property for Singaporean Citizens (20% ABSD)"},
            {"residency_status": _S, "property_type": "Landed", "existing_properties": 1, "rate": 0.20,
             "rationale": "Second residential property for Singaporean Citizens (20% ABSD)"},
            {"residency_status": _S, "property_type": "EC", "existing_properties": 1, "rate": 0.20,
             "rationale": "Second residential property for Singaporean Citizens (20% ABSD)"},
            {"residency_status": _S, "property_type": "Condo", "existing_properties": 2, "rate": 0.30,
             "rationale": "Third and subsequent properties for Singaporean Citizens (30% ABSD)"},
            {"residency_status": _S, "property_type": "Landed", "existing_properties": 2, "rate": 0.30,
             "rationale": "Third and subsequent properties for Singaporean Citizens (30% ABSD)"},
            {"residency_status": _P, "property_type": "HDB", "existing_properties": 0, "rate": 0.05,
             "rationale": "First HDB flat for PRs (5% ABSD)"},
            {"residency_status": _P, "property_type": "Condo", "existing_properties": 0, "rate": 0.05,
             "rationale": "First residential property for PRs (5% ABSD)"},
            {"residency_status": _P, "property_type": "EC", "existing_properties": 0, "rate": 0.05,
             "rationale": "First EC for PRs (5% ABSD)"},
            {"residency_status": _P, "property_type": "Landed", "existing_properties": 0, "rate": 0.05,
             "rationale": "First residential property for PRs (5% ABSD)"},
            {"residency_status": _P, "property_type": "Condo", "existing_properties": 1, "rate": 0.30,
             "rationale": "Second and subsequent properties for PRs (30% ABSD)"},
            {"residency_status": _P, "property_type": "Landed", "existing_properties": 1, "rate": 0.30,
             "rationale": "Second and subsequent properties for PRs (30% ABSD)"},
            {"residency_status": _F, "property_type": "Condo", "existing_properties": 0, "rate": 0.60,
             "rationale": "Any residential property purchase by Foreigners (60% ABSD)"},
            {"residency_status": _F, "property_type": "Landed", "existing_properties": 0, "rate": 0.60,
             "rationale": "Any residential property purchase by Foreigners (60% ABSD)"},
            {"residency_status": _F, "property_type": "EC", "existing_properties": 0, "rate": 0.60,
             "rationale": "Any residential property purchase by Foreigners (60% ABSD)"},
        ],
        "ssd": {
            "exemption_threshold_months": 36,
            "tiers": [
                {"min_months": 0, "max_months": 12, "rate": 0.12, "label": "Sold within 1 year"},
                {"min_months": 12, "max_months": 24, "rate": 0.08, "label": "Sold within 1 to 2 years"},
                {"min_months": 24, "max_months": 36, "rate": 0.04, "label": "Sold within 2 to 3 years"},
            ],
        },
    },
    "borrowing": {
        "tdsr": {"limit": 0.55, "variable_income_haircut_pct": 30},
        "msr": {"limit": 0.30, "applicable_property_types": ["HDB", "EC"]},
        "ltv_rules": [
            {"loan_type": "HDB", "property_type": "HDB", "loan_tenure_years": 25, "existing_loans": 0,
             "max_ltv_pct": 85, "min_cash_down_payment_pct": 5},
            {"loan_type": "HDB", "property_type": "HDB", "loan_tenure_years": 30, "existing_loans": 0,
             "max_ltv_pct": 80, "min_cash_down_payment_pct": 5},
            {"loan_type": "HDB", "property_type": "HDB", "loan_tenure_years": 25, "existing_loans": 1,
             "max_ltv_pct": 45, "min_cash_down_payment_pct": 25},
            {"loan_type": "bank", "property_type": "Condo", "loan_tenure_years": 30, "existing_loans": 0,
             "max_ltv_pct": 75, "min_cash_down_payment_pct": 5},
            {"loan_type": "bank", "property_type": "Landed", "loan_tenure_years": 30, "existing_loans": 0,
             "max_ltv_pct": 75, "min_cash_down_payment_pct": 5},
            {"loan_type": "bank", "property_type": "Condo", "loan_tenure_years": 35, "existing_loans": 0,
             "max_ltv_pct": 55, "min_cash_down_payment_pct": 10},
            {"loan_type": "bank", "property_type": "Landed", "loan_tenure_years": 35, "existing_loans": 0,
             "max_ltv_pct": 55, "min_cash_down_payment_pct": 10},
            {"loan_type": "bank", "property_type": "EC", "loan_tenure_years": 30, "existing_loans": 0,
             "max_ltv_pct": 75, "min_cash_down_payment_pct": 5},
            {"loan_type": "bank", "property_type": "Condo", "loan_tenure_years": 30, "existing_loans": 1,
             "max_ltv_pct": 45, "min_cash_down_payment_pct": 25},
            {"loan_type": "bank", "property_type": "Landed", "loan_tenure_years": 30, "existing_loans": 1,
             "max_ltv_pct": 45, "min_cash_down_payment_pct": 25},
            {"loan_type": "bank", "property_type": "Condo", "loan_tenure_years": 30, "existing_loans": 2,
             "max_ltv_pct": 35, "min_cash_down_payment_pct": 25},
            {"loan_type": "bank", "property_type": "Landed", "loan_tenure_years": 30, "existing_loans": 2,
             "max_ltv_pct": 35, "min_cash_down_payment_pct": 25},
        ],
    },
    "mortgage": {
        "hdb_base_interest_rate_pct": 2.6,
        "bank_typical_min_pct": 3.5,
        "bank_typical_max_pct": 5.0,
    },
    "cpf": {"oa_interest_rate": 0.025, "sa_interest_rate": 0.04},
    "property_tax": {
        "annual_value_proxy_pct": 0.035,  # AV ≈ 3.5% of price (estimate only)
        "owner_occupied": [
            {"annual_value_min": 0, "annual_value_max": 8_000, "rate": 0.0, "label": "First $8,000"},
            {"annual_value_min": 8_000, "annual_value_max": 30_000, "rate": 0.04, "label": "$8,000 to $30,000"},
            {"annual_value_min": 30_000, "annual_value_max": 40_000, "rate": 0.05, "label": "$30,000 to $40,000"},
            {"annual_value_min": 40_000, "annual_value_max": 55_000, "rate": 0.07, "label": "$40,000 to $55,000"},
            {"annual_value_min": 55_000, "annual_value_max": 70_000, "rate": 0.10, "label": "$55,000 to $70,000"},
            {"annual_value_min": 70_000, "annual_value_max": 85_000, "rate": 0.14, "label": "$70,000 to $85,000"},
            {"annual_value_min": 85_000, "annual_value_max": 100_000, "rate": 0.18, "label": "$85,000 to $100,000"},
            {"annual_value_min": 100_000, "annual_value_max": None, "rate": 0.23, "label": "Above $100,000"},
        ],
        "non_owner_occupied": [
            {"annual_value_min": 0, "annual_value_max": 30_000, "rate": 0.10, "label": "First $30,000"},
            {"annual_value_min": 30_000, "annual_value_max": 40_000, "rate": 0.12, "label": "$30,000 to $40,000"},
            {"annual_value_min": 40_000, "annual_value_max": 55_000, "rate": 0.14, "label": "$40,000 to $55,000"},
            {"annual_value_min": 55_000, "annual_value_max": 70_000, "rate": 0.16, "label": "$55,000 to $70,000"},
            {"annual_value_min": 70_000, "annual_value_max": 90_000, "rate": 0.18, "label": "$70,000 to $90,000"},
            {"annual_value_min": 90_000, "annual_value_max": None, "rate": 0.20, "label": "Above $90,000"},
        ],
    },
    # Market estimates, not regulatory figures
    "maintenance_fees": {
        "hdb_monthly_min": 20,
        "hdb_monthly_max": 90,
        "condo_monthly_per_sqft_min": 0.30,
        "condo_monthly_per_sqft_max": 0.60,
        "landed_monthly_estimate": 200,
    },
    "misc": {
        "legal_conveyancing_fees_pct": 0.004,
        "valuation_fee": 500,
        "insurance_annual_min": 500,
        "insurance_annual_max": 1000,
    },
}

SG_2024_CONFIG = RegulatoryConfig.from_dict(SG_2024_RAW)
