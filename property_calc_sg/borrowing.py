"""Borrowing limits: TDSR, MSR and the maximum serviceable loan."""

import math
from dataclasses import dataclass
from typing import Literal

from property_calc_sg.params import MSRInput, TDSRInput, _calc_annuity_principal
from property_calc_sg.regulatory import MSRLimits, PropertyType, TDSRLimits

LimitingFactor = Literal["TDSR", "MSR"]


@dataclass(frozen=True)
class TDSRResult:
    total_monthly_obligations: float
    effective_monthly_income: float
    tdsr_ratio: float
    tdsr_limit: float
    within_limit: bool
    remaining_capacity: float


@dataclass(frozen=True)
class MSRResult:
    msr_ratio: float
    msr_limit: float
    within_limit: bool
    max_allowed_repayment: float


@dataclass(frozen=True)
class MaxLoanResult:
    max_loan: float
    max_monthly_repayment: float
    max_monthly_by_tdsr: float
    max_monthly_by_msr: float  # inf when MSR does not apply
    limiting_factor: LimitingFactor


def effective_income(fixed: float, variable: float, haircut_pct: float) -> float:
    """Fixed income plus variable income after the haircut (%)."""
    return fixed + variable * (1 - haircut_pct / 100)


def _ratio(obligations: float, income: float) -> float:
    if income <= 0:
        return math.inf if obligations > 0 else 0.0
    return obligations / income


def calculate_tdsr(inp: TDSRInput, limits: TDSRLimits) -> TDSRResult:
    haircut = (
        inp.variable_income_haircut_pct
        if inp.variable_income_haircut_pct is not None
        else limits.variable_income_haircut_pct
    )
    income = effective_income(inp.fixed_monthly_income, inp.variable_monthly_income, haircut)
    obligations = inp.existing_monthly_debts + inp.proposed_mortgage_repayment
    ratio = _ratio(obligations, income)
    return TDSRResult(
        total_monthly_obligations=obligations,
        effective_monthly_income=income,
        tdsr_ratio=ratio,
        tdsr_limit=limits.limit,
        within_limit=ratio <= limits.limit,
        remaining_capacity=max(0.0, income * limits.limit - obligations),
    )


def calculate_msr(inp: MSRInput, limits: MSRLimits) -> MSRResult:
    ratio = _ratio(inp.proposed_mortgage_repayment, inp.gross_monthly_income)
    return MSRResult(
        msr_ratio=ratio,
        msr_limit=limits.limit,
        within_limit=ratio <= limits.limit,
        max_allowed_repayment=max(0.0, inp.gross_monthly_income * limits.limit),
    )


def msr_applies(property_type: PropertyType, limits: MSRLimits) -> bool:
    return property_type in limits.applicable_property_types


def calculate_max_loan(
    fixed_monthly_income: float,
    variable_monthly_income: float,
    existing_monthly_debts: float,
    property_type: PropertyType,
    annual_interest_rate_pct: float,
    loan_tenure_years: int,
    tdsr: TDSRLimits,
    msr: MSRLimits,
) -> MaxLoanResult:
    """Largest principal whose repayment fits under TDSR (and MSR for HDB/EC).

    TDSR uses haircut income net of existing debts; MSR uses gross income
    with no haircut and ignores other debts.
    """
    tdsr_income = effective_income(
        fixed_monthly_income, variable_monthly_income, tdsr.variable_income_haircut_pct
    )
    by_tdsr = tdsr_income * tdsr.limit - existing_monthly_debts
    if msr_applies(property_type, msr):
        by_msr = (fixed_monthly_income + variable_monthly_income) * msr.limit
    else:
        by_msr = math.inf

    ceiling = max(0.0, min(by_tdsr, by_msr))
    limiting: LimitingFactor = "MSR" if by_msr < by_tdsr else "TDSR"
    max_loan = _calc_annuity_principal(
        ceiling, annual_interest_rate_pct / 100 / 12, loan_tenure_years * 12
    )
    return MaxLoanResult(
        max_loan=max_loan,
        max_monthly_repayment=ceiling,
        max_monthly_by_tdsr=by_tdsr,
        max_monthly_by_msr=by_msr,
        limiting_factor=limiting,
    )
