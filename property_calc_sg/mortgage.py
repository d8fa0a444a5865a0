"""Fixed-rate mortgage repayment and amortization schedules."""

from dataclasses import dataclass, field
from datetime import date

from dateutil.relativedelta import relativedelta

from property_calc_sg.params import MortgageInput, _calc_equal_payment
from property_calc_sg.regulatory import LoanType


@dataclass(frozen=True)
class AmortizationEntry:
    month: int
    payment: float
    principal_component: float
    interest_component: float
    remaining_balance: float
    cumulative_interest: float


@dataclass(frozen=True)
class MortgageResult:
    monthly_repayment: float
    total_repayment: float
    total_interest_paid: float
    effective_interest_rate_pct: float  # average interest per year as % of principal
    loan_type: LoanType = LoanType.BANK
    amortization_schedule: list[AmortizationEntry] = field(default_factory=list)


@dataclass(frozen=True)
class DatedEntry:
    payment_date: date
    entry: AmortizationEntry


@dataclass(frozen=True)
class MortgageSummary:
    mortgage: MortgageResult
    start_date: date
    payoff_date: date | None
    interest_pct_of_total_payment: float
    dated_schedule: list[DatedEntry] = field(default_factory=list)


def calculate_monthly_repayment(
    principal: float, annual_interest_rate_pct: float, tenure_years: int,
) -> float:
    """Level monthly repayment; zero for a zero principal or tenure."""
    return _calc_equal_payment(principal, annual_interest_rate_pct / 100 / 12, tenure_years * 12)


def calculate_mortgage(inp: MortgageInput) -> MortgageResult:
    """Monthly repayment plus the full month-by-month schedule."""
    months = inp.loan_tenure_years * 12
    if inp.loan_amount <= 0 or months <= 0:
        return MortgageResult(0.0, 0.0, 0.0, 0.0, loan_type=inp.loan_type)

    r = inp.annual_interest_rate_pct / 100 / 12
    payment = _calc_equal_payment(inp.loan_amount, r, months)

    schedule: list[AmortizationEntry] = []
    balance = inp.loan_amount
    total_interest = 0.0
    for month in range(1, months + 1):
        interest = balance * r
        principal = payment - interest
        balance -= principal
        total_interest += interest
        schedule.append(AmortizationEntry(
            month=month,
            payment=payment,
            principal_component=principal,
            interest_component=interest,
            remaining_balance=max(0.0, balance),  # float drift on the last month
            cumulative_interest=total_interest,
        ))

    return MortgageResult(
        monthly_repayment=payment,
        total_repayment=payment * months,
        total_interest_paid=total_interest,
        effective_interest_rate_pct=total_interest / inp.loan_amount * 100 / inp.loan_tenure_years,
        loan_type=inp.loan_type,
        amortization_schedule=schedule,
    )


def summarize_mortgage(inp: MortgageInput, start_date: date) -> MortgageSummary:
    """Schedule with calendar dates; the first payment falls one month after start."""
    result = calculate_mortgage(inp)
    dated = [
        DatedEntry(payment_date=start_date + relativedelta(months=e.month), entry=e)
        for e in result.amortization_schedule
    ]
    interest_pct = (
        result.total_interest_paid / result.total_repayment * 100
        if result.total_repayment > 0 else 0.0
    )
    return MortgageSummary(
        mortgage=result,
        start_date=start_date,
        payoff_date=dated[-1].payment_date if dated else None,
        interest_pct_of_total_payment=interest_pct,
        dated_schedule=dated,
    )


def interest_over_months(schedule: list[AmortizationEntry], months: int) -> float:
    """Interest paid during the first ``months`` payments of a schedule."""
    if months <= 0 or not schedule:
        return 0.0
    return schedule[min(months, len(schedule)) - 1].cumulative_interest


def yearly_interest(schedule: list[AmortizationEntry], years: int) -> list[float]:
    """Interest paid in each of the first ``years`` loan years (0 after payoff)."""
    totals = []
    for y in range(1, years + 1):
        totals.append(interest_over_months(schedule, y * 12) - interest_over_months(schedule, (y - 1) * 12))
    return totals
