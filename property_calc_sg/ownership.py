"""Total cost of ownership over a holding period."""

from dataclasses import dataclass, field

from property_calc_sg.mortgage import calculate_mortgage, interest_over_months, yearly_interest
from property_calc_sg.params import MortgageInput, StampDutyInput, TCOInput
from property_calc_sg.regulatory import LoanType, MaintenanceFees, PropertyType, RegulatoryConfig
from property_calc_sg.stamp_duty import calculate_stamp_duty
from property_calc_sg.tax import calc_property_tax, estimate_annual_value


@dataclass(frozen=True)
class YearlyCost:
    year: int
    mortgage_interest: float
    property_tax: float
    maintenance_fees: float
    rental_income: float
    cumulative_cost: float


@dataclass(frozen=True)
class TCOResult:
    purchase_price: float
    bsd: float
    absd: float
    total_stamp_duty: float
    legal_fees: float

    annual_property_tax: float
    annual_maintenance_fees: float
    total_property_tax: float
    total_maintenance_fees: float
    total_mortgage_interest: float

    grand_total_cost: float
    projected_sale_price: float
    net_gain_loss: float
    annualized_return_pct: float

    # Reported alongside, not part of the grand total
    valuation_fee: float
    annual_insurance: float
    opportunity_cost_total: float  # down payment compounding at the CPF SA rate

    total_rental_income: float | None = None
    net_cost_after_rental: float | None = None
    gross_rental_yield_pct: float | None = None
    net_rental_yield_pct: float | None = None
    breakeven_sale_price: float | None = None

    yearly_breakdown: list[YearlyCost] = field(default_factory=list)


def annual_maintenance_fees(
    property_type: PropertyType, floor_area_sqft: float, fees: MaintenanceFees,
) -> float:
    """Mid-range yearly maintenance estimate by property type."""
    if property_type == PropertyType.HDB:
        monthly = (fees.hdb_monthly_min + fees.hdb_monthly_max) / 2
    elif property_type in (PropertyType.CONDO, PropertyType.EC):
        per_sqft = (fees.condo_monthly_per_sqft_min + fees.condo_monthly_per_sqft_max) / 2
        monthly = per_sqft * max(0.0, floor_area_sqft)
    else:
        monthly = fees.landed_monthly_estimate
    return monthly * 12


def calculate_total_cost_of_ownership(inp: TCOInput, config: RegulatoryConfig) -> TCOResult:
    years = max(0, inp.holding_period_years)
    price = max(0.0, inp.purchase_price)

    stamp = calculate_stamp_duty(
        StampDutyInput(
            purchase_price=price,
            residency_status=inp.residency_status,
            property_type=inp.property_type,
            existing_properties=inp.existing_properties,
        ),
        config,
    )
    stamp_total = stamp.buyer_duties
    legal_fees = price * config.misc.legal_conveyancing_fees_pct

    # Interest within the holding period, read off the full-tenure schedule
    mortgage = calculate_mortgage(MortgageInput(
        loan_amount=inp.loan_amount,
        annual_interest_rate_pct=inp.annual_interest_rate_pct,
        loan_tenure_years=inp.loan_tenure_years,
        loan_type=LoanType.HDB if inp.property_type == PropertyType.HDB else LoanType.BANK,
    ))
    schedule = mortgage.amortization_schedule
    total_interest = interest_over_months(schedule, years * 12)

    annual_value = estimate_annual_value(price, config.annual_value_proxy_pct)
    annual_tax, _ = calc_property_tax(annual_value, inp.owner_occupied, config.property_tax)
    annual_maint = annual_maintenance_fees(inp.property_type, inp.floor_area_sqft, config.maintenance)

    grand_total = (
        price
        + stamp_total
        + total_interest
        + annual_tax * years
        + annual_maint * years
        + legal_fees
    )

    sale_price = price * (1 + inp.appreciation_pct / 100) ** years
    net_gain = sale_price - grand_total
    if years > 0 and grand_total > 0 and sale_price > 0:
        annualized = ((sale_price / grand_total) ** (1 / years) - 1) * 100
    else:
        annualized = 0.0

    annual_rent = inp.monthly_rental_income * 12 if not inp.owner_occupied else 0.0
    breakdown = []
    cumulative = price + stamp_total + legal_fees
    for year, interest in enumerate(yearly_interest(schedule, years), start=1):
        cumulative += interest + annual_tax + annual_maint - annual_rent
        breakdown.append(YearlyCost(
            year=year,
            mortgage_interest=interest,
            property_tax=annual_tax,
            maintenance_fees=annual_maint,
            rental_income=annual_rent,
            cumulative_cost=cumulative,
        ))

    down_payment = max(0.0, price - inp.loan_amount)
    insurance = (config.misc.insurance_annual_min + config.misc.insurance_annual_max) / 2

    rental = {}
    if annual_rent > 0 and price > 0:
        total_rent = annual_rent * years
        rental = dict(
            total_rental_income=total_rent,
            net_cost_after_rental=grand_total - total_rent,
            gross_rental_yield_pct=annual_rent / price * 100,
            net_rental_yield_pct=(annual_rent - annual_tax - annual_maint - insurance) / price * 100,
            breakeven_sale_price=grand_total - total_rent,
        )

    return TCOResult(
        purchase_price=price,
        bsd=stamp.bsd,
        absd=stamp.absd.amount,
        total_stamp_duty=stamp_total,
        legal_fees=legal_fees,
        annual_property_tax=annual_tax,
        annual_maintenance_fees=annual_maint,
        total_property_tax=annual_tax * years,
        total_maintenance_fees=annual_maint * years,
        total_mortgage_interest=total_interest,
        grand_total_cost=grand_total,
        projected_sale_price=sale_price,
        net_gain_loss=net_gain,
        annualized_return_pct=annualized,
        valuation_fee=config.misc.valuation_fee,
        annual_insurance=insurance,
        opportunity_cost_total=down_payment * ((1 + config.cpf.sa_interest_rate) ** years - 1),
        yearly_breakdown=breakdown,
        **rental,
    )
