"""Maximum affordable price and cash requirement.

Works backwards from income: the TDSR/MSR repayment ceiling gives the
largest loan, the applicable LTV rule turns that loan into a price, and
stamp duty at that price sets the cash needed on completion.
"""

import logging
from dataclasses import dataclass
from typing import Literal

from property_calc_sg.borrowing import MaxLoanResult, calculate_max_loan, calculate_tdsr, msr_applies
from property_calc_sg.lookup import MatchStage, resolve
from property_calc_sg.mortgage import calculate_monthly_repayment
from property_calc_sg.params import AffordabilityInput, StampDutyInput, TDSRInput
from property_calc_sg.regulatory import LTVRule, PropertyType, RegulatoryConfig
from property_calc_sg.stamp_duty import StampDutyResult, calculate_stamp_duty

logger = logging.getLogger(__name__)

# Used only when the table has no rule for the property type at all
DEFAULT_MAX_LTV_PCT = 75.0
DEFAULT_MIN_CASH_DOWN_PAYMENT_PCT = 5.0

# Loan → price → repayment round trips drift by a few ulps at the limit
RATIO_TOLERANCE = 1e-9

BindingConstraint = Literal["TDSR", "MSR", "Cash"]


@dataclass(frozen=True)
class LTVResolution:
    max_ltv_pct: float
    min_cash_down_payment_pct: float
    rule: LTVRule | None
    rationale: str
    was_fallback: bool


@dataclass(frozen=True)
class DownPaymentBreakdown:
    property_price: float
    loan_amount: float
    total_down_payment: float
    min_cash_down_payment: float  # option fee + cash portion required by the LTV rule
    cpf_eligible_down_payment: float  # remainder payable from CPF OA or cash
    cpf_used: float
    cash_for_cpf_eligible: float  # CPF-eligible part the OA balance does not cover


@dataclass(frozen=True)
class ConstraintCheck:
    label: str
    ratio_actual: float
    limit_value: float
    within_limit: bool
    is_binding: bool = False


@dataclass(frozen=True)
class AffordabilityChart:
    cash_amount: float
    cpf_amount: float
    loan_amount: float
    stamp_duties_amount: float
    total_amount: float


@dataclass(frozen=True)
class AffordabilityResult:
    max_affordable_price: float
    max_loan_amount: float
    max_loan: MaxLoanResult
    ltv: LTVResolution
    down_payment: DownPaymentBreakdown
    min_cash_down_payment: float
    cpf_applicable: float
    stamp_duty: StampDutyResult
    total_cash_required: float  # min cash down payment + stamp duty
    total_cash_needed: float  # also covers CPF-eligible amounts the OA cannot fund
    cash_sufficient: bool
    estimated_monthly_repayment: float
    tdsr_at_max_loan: float
    within_tdsr_limit: bool
    binding_constraint: BindingConstraint
    constraints: dict[str, ConstraintCheck]
    chart: AffordabilityChart
    loan_end_age: int


def resolve_ltv_rule(
    rules: tuple[LTVRule, ...],
    property_type: PropertyType,
    tenure_years: int,
    existing_loans: int,
) -> LTVResolution:
    """Pick the LTV rule for a loan, falling back from an exact match.

    1. exact property type, tenure and existing-loan count;
    2. same property type with tenure no longer than requested, preferring
       the highest existing-loan count not above the request, then the
       longest such tenure;
    3. any rule for the property type, with the same existing-loan
       preference as step 2, then the shortest tenure;
    4. built-in defaults.
    """
    lookup = resolve(rules, [
        MatchStage(
            "exact",
            lambda r: (
                r.property_type == property_type
                and r.loan_tenure_years == tenure_years
                and r.existing_loans == existing_loans
            ),
        ),
        MatchStage(
            "tenure",
            lambda r: r.property_type == property_type and r.loan_tenure_years <= tenure_years,
            rank=lambda r: (*_loan_count_rank(r, existing_loans), r.loan_tenure_years),
        ),
        MatchStage(
            "property_type",
            lambda r: r.property_type == property_type,
            rank=lambda r: (*_loan_count_rank(r, existing_loans), -r.loan_tenure_years),
        ),
    ])
    if not lookup.found:
        logger.debug("No LTV rule for %s; using %.0f%% default", property_type.value, DEFAULT_MAX_LTV_PCT)
        return LTVResolution(
            max_ltv_pct=DEFAULT_MAX_LTV_PCT,
            min_cash_down_payment_pct=DEFAULT_MIN_CASH_DOWN_PAYMENT_PCT,
            rule=None,
            rationale=f"No LTV rule for {property_type.value}; default {DEFAULT_MAX_LTV_PCT:.0f}% LTV applied",
            was_fallback=True,
        )
    rule = lookup.entry
    desc = (
        f"{rule.loan_type.value} loan, {rule.property_type.value}, "
        f"{rule.loan_tenure_years}y tenure, {rule.existing_loans} existing loan(s): "
        f"{rule.max_ltv_pct:.0f}% LTV"
    )
    if lookup.was_fallback:
        desc += f" (nearest match for {tenure_years}y / {existing_loans} loan(s))"
        logger.debug("LTV fallback via '%s' stage: %s", lookup.stage, desc)
    return LTVResolution(
        max_ltv_pct=rule.max_ltv_pct,
        min_cash_down_payment_pct=rule.min_cash_down_payment_pct,
        rule=rule,
        rationale=desc,
        was_fallback=lookup.was_fallback,
    )


def _loan_count_rank(rule: LTVRule, existing_loans: int) -> tuple[bool, int]:
    # Counts not above the request beat counts above it; then the nearest count
    not_above = rule.existing_loans <= existing_loans
    nearness = rule.existing_loans if not_above else -rule.existing_loans
    return not_above, nearness


def calculate_down_payment_sources(
    property_price: float,
    max_ltv_pct: float,
    min_cash_down_payment_pct: float,
    cpf_oa_balance: float,
) -> DownPaymentBreakdown:
    """Split the down payment into the cash-only part and the CPF-eligible part."""
    price = max(0.0, property_price)
    loan = price * max_ltv_pct / 100
    total_down = price - loan
    min_cash = min(total_down, price * min_cash_down_payment_pct / 100)
    cpf_eligible = total_down - min_cash
    cpf_used = min(max(0.0, cpf_oa_balance), cpf_eligible)
    return DownPaymentBreakdown(
        property_price=price,
        loan_amount=loan,
        total_down_payment=total_down,
        min_cash_down_payment=min_cash,
        cpf_eligible_down_payment=cpf_eligible,
        cpf_used=cpf_used,
        cash_for_cpf_eligible=cpf_eligible - cpf_used,
    )


def calculate_affordability(inp: AffordabilityInput, config: RegulatoryConfig) -> AffordabilityResult:
    fixed = inp.fixed_monthly_income + inp.joint_fixed_monthly_income
    variable = inp.variable_monthly_income + inp.joint_variable_monthly_income

    # 1. repayment ceiling → max loan
    max_loan = calculate_max_loan(
        fixed, variable, inp.existing_monthly_debts, inp.property_type,
        inp.annual_interest_rate_pct, inp.loan_tenure_years,
        config.tdsr, config.msr,
    )

    # 2. LTV → max price
    ltv = resolve_ltv_rule(config.ltv_rules, inp.property_type, inp.loan_tenure_years, inp.existing_loans)
    max_price = max_loan.max_loan / (ltv.max_ltv_pct / 100)

    # 3. down payment sources
    dp = calculate_down_payment_sources(
        max_price, ltv.max_ltv_pct, ltv.min_cash_down_payment_pct, inp.cpf_oa_balance
    )

    # 4. stamp duty at max price
    stamp = calculate_stamp_duty(
        StampDutyInput(
            purchase_price=max_price,
            residency_status=inp.residency_status,
            property_type=inp.property_type,
            existing_properties=inp.existing_properties,
            co_buyer_residency=inp.co_buyer_residency,
        ),
        config,
    )

    # 5. CPF cannot pay stamp duty or the minimum cash portion
    total_cash_required = dp.min_cash_down_payment + stamp.total_stamp_duty
    total_cash_needed = total_cash_required + dp.cash_for_cpf_eligible
    cash_sufficient = inp.cash_on_hand >= total_cash_needed

    # 6. re-verify TDSR at the derived loan
    repayment = calculate_monthly_repayment(
        max_loan.max_loan, inp.annual_interest_rate_pct, inp.loan_tenure_years
    )
    tdsr_check = calculate_tdsr(
        TDSRInput(
            fixed_monthly_income=fixed,
            variable_monthly_income=variable,
            existing_monthly_debts=inp.existing_monthly_debts,
            proposed_mortgage_repayment=repayment,
        ),
        config.tdsr,
    )

    constraints = _constraint_checks(
        inp, config, repayment, tdsr_check.tdsr_ratio, fixed + variable, dp, ltv,
        total_cash_needed,
    )
    if max_loan.limiting_factor == "MSR":
        binding: BindingConstraint = "MSR"
    elif not cash_sufficient:
        binding = "Cash"
    else:
        binding = "TDSR"
    constraints[binding] = _mark_binding(constraints[binding])
    logger.debug(
        "Affordability: max loan %.0f (%s), LTV %.0f%%, max price %.0f",
        max_loan.max_loan, max_loan.limiting_factor, ltv.max_ltv_pct, max_price,
    )

    return AffordabilityResult(
        max_affordable_price=max_price,
        max_loan_amount=max_loan.max_loan,
        max_loan=max_loan,
        ltv=ltv,
        down_payment=dp,
        min_cash_down_payment=dp.min_cash_down_payment,
        cpf_applicable=dp.cpf_used,
        stamp_duty=stamp,
        total_cash_required=total_cash_required,
        total_cash_needed=total_cash_needed,
        cash_sufficient=cash_sufficient,
        estimated_monthly_repayment=repayment,
        tdsr_at_max_loan=tdsr_check.tdsr_ratio,
        within_tdsr_limit=tdsr_check.tdsr_ratio <= config.tdsr.limit + RATIO_TOLERANCE,
        binding_constraint=binding,
        constraints=constraints,
        chart=AffordabilityChart(
            cash_amount=dp.min_cash_down_payment + dp.cash_for_cpf_eligible,
            cpf_amount=dp.cpf_used,
            loan_amount=max_loan.max_loan,
            stamp_duties_amount=stamp.total_stamp_duty,
            total_amount=max_price + stamp.total_stamp_duty,
        ),
        loan_end_age=inp.buyer_age + inp.loan_tenure_years,
    )


def _mark_binding(check: ConstraintCheck) -> ConstraintCheck:
    return ConstraintCheck(
        label=check.label,
        ratio_actual=check.ratio_actual,
        limit_value=check.limit_value,
        within_limit=check.within_limit,
        is_binding=True,
    )


def _constraint_checks(
    inp: AffordabilityInput,
    config: RegulatoryConfig,
    repayment: float,
    tdsr_ratio: float,
    gross_income: float,
    dp: DownPaymentBreakdown,
    ltv: LTVResolution,
    total_cash_needed: float,
) -> dict[str, ConstraintCheck]:
    checks = {
        "TDSR": ConstraintCheck(
            label="TDSR",
            ratio_actual=tdsr_ratio,
            limit_value=config.tdsr.limit,
            within_limit=tdsr_ratio <= config.tdsr.limit + RATIO_TOLERANCE,
        ),
    }
    if msr_applies(inp.property_type, config.msr):
        msr_ratio = repayment / gross_income if gross_income > 0 else 0.0
        checks["MSR"] = ConstraintCheck(
            label="MSR",
            ratio_actual=msr_ratio,
            limit_value=config.msr.limit,
            within_limit=msr_ratio <= config.msr.limit + RATIO_TOLERANCE,
        )
    ltv_actual = dp.loan_amount / dp.property_price if dp.property_price > 0 else 0.0
    checks["LTV"] = ConstraintCheck(
        label="LTV",
        ratio_actual=ltv_actual,
        limit_value=ltv.max_ltv_pct / 100,
        within_limit=ltv_actual <= ltv.max_ltv_pct / 100 + RATIO_TOLERANCE,
    )
    cash_ratio = inp.cash_on_hand / total_cash_needed if total_cash_needed > 0 else 1.0
    checks["Cash"] = ConstraintCheck(
        label="Cash",
        ratio_actual=cash_ratio,
        limit_value=1.0,
        within_limit=inp.cash_on_hand >= total_cash_needed,
    )
    return checks
