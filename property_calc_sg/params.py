"""Transaction facts and annuity helpers."""

from dataclasses import dataclass

from property_calc_sg.regulatory import LoanType, PropertyType, ResidencyStatus

MIN_BUYER_AGE = 21  # minimum age to purchase private property / apply for a loan
MAX_TENURE_YEARS = 35


@dataclass
class StampDutyInput:
    purchase_price: float
    residency_status: ResidencyStatus
    property_type: PropertyType
    existing_properties: int = 0
    is_entity: bool = False  # trust, company or other legal entity
    # Co-buyer for joint purchases (None = sole purchaser)
    co_buyer_residency: ResidencyStatus | None = None
    # Seller's holding period; SSD is only computed when given
    holding_period_months: int | None = None


@dataclass
class TDSRInput:
    fixed_monthly_income: float
    variable_monthly_income: float = 0.0
    existing_monthly_debts: float = 0.0
    proposed_mortgage_repayment: float = 0.0
    # Overrides the configured haircut (%) when set
    variable_income_haircut_pct: float | None = None


@dataclass
class MSRInput:
    gross_monthly_income: float
    proposed_mortgage_repayment: float


@dataclass
class MortgageInput:
    loan_amount: float
    annual_interest_rate_pct: float
    loan_tenure_years: int
    loan_type: LoanType = LoanType.BANK


@dataclass
class AffordabilityInput:
    fixed_monthly_income: float
    residency_status: ResidencyStatus
    property_type: PropertyType
    annual_interest_rate_pct: float
    loan_tenure_years: int
    variable_monthly_income: float = 0.0
    # Joint applicant (zeros and None for a sole applicant)
    joint_fixed_monthly_income: float = 0.0
    joint_variable_monthly_income: float = 0.0
    co_buyer_residency: ResidencyStatus | None = None
    existing_monthly_debts: float = 0.0
    existing_properties: int = 0
    existing_loans: int = 0
    buyer_age: int = 35
    cpf_oa_balance: float = 0.0
    cash_on_hand: float = 0.0

    @property
    def is_joint(self) -> bool:
        return self.joint_fixed_monthly_income > 0 or self.joint_variable_monthly_income > 0


@dataclass
class CPFOptimizerInput:
    cpf_oa_balance: float
    property_price: float
    loan_amount: float
    annual_interest_rate_pct: float
    loan_tenure_years: int
    current_age: int
    retirement_age: int = 65
    monthly_oa_contribution: float = 0.0
    # Overrides the configured OA rate (decimal) when set
    oa_interest_rate: float | None = None

    @property
    def down_payment(self) -> float:
        return max(0.0, self.property_price - self.loan_amount)


@dataclass
class TCOInput:
    purchase_price: float
    property_type: PropertyType
    residency_status: ResidencyStatus
    loan_amount: float
    annual_interest_rate_pct: float
    loan_tenure_years: int
    holding_period_years: int
    appreciation_pct: float = 0.0  # annual, e.g. 2.0 for 2%
    existing_properties: int = 0
    floor_area_sqft: float = 0.0  # condo / EC maintenance estimate
    owner_occupied: bool = True
    monthly_rental_income: float = 0.0  # investment usage only


def validate_age(current_age: int, retirement_age: int | None = None) -> None:
    """Validate buyer ages. Raises ValueError if out of bounds."""
    if current_age < MIN_BUYER_AGE:
        raise ValueError(f"Age {current_age} is below the minimum buyer age of {MIN_BUYER_AGE}")
    if retirement_age is not None and retirement_age <= current_age:
        raise ValueError(
            f"Retirement age {retirement_age} must be after current age {current_age}"
        )


def validate_tenure(tenure_years: int) -> None:
    """Validate loan tenure. Raises ValueError if out of bounds."""
    if tenure_years < 0 or tenure_years > MAX_TENURE_YEARS:
        raise ValueError(f"Loan tenure {tenure_years} years is outside 0-{MAX_TENURE_YEARS} years")


def _calc_equal_payment(principal: float, monthly_rate: float, months: int) -> float:
    """Calculate monthly payment of a fixed-rate amortizing loan"""
    if months <= 0 or principal <= 0:
        return 0.0
    if monthly_rate == 0:
        return principal / months
    r = monthly_rate
    n = months
    return principal * r * (1 + r) ** n / ((1 + r) ** n - 1)


def _calc_annuity_principal(payment: float, monthly_rate: float, months: int) -> float:
    """Present value of ``months`` level payments: P = M (1 - (1+r)^-n) / r"""
    if months <= 0 or payment <= 0:
        return 0.0
    if monthly_rate == 0:
        return payment * months
    r = monthly_rate
    return payment * (1 - (1 + r) ** -months) / r
