"""CLI entry point for total cost of ownership."""

import sys

from property_calc_sg.config import parse_args
from property_calc_sg.ownership import TCOResult, calculate_total_cost_of_ownership
from property_calc_sg.params import TCOInput, validate_tenure


def _print_summary(t: TCOResult, years: int):
    print(f"[Costs over {years} years]")
    print("-" * 64)
    rows = [
        ("Purchase price", t.purchase_price),
        ("BSD", t.bsd),
        ("ABSD", t.absd),
        ("Legal / conveyancing", t.legal_fees),
        ("Mortgage interest", t.total_mortgage_interest),
        (f"Property tax (${t.annual_property_tax:,.0f}/yr)", t.total_property_tax),
        (f"Maintenance (${t.annual_maintenance_fees:,.0f}/yr)", t.total_maintenance_fees),
    ]
    for label, v in rows:
        print(f"  {label:<40} ${v:>15,.0f}")
    print("-" * 64)
    print(f"  {'Grand total':<40} ${t.grand_total_cost:>15,.0f}")
    print(f"  {'Projected sale price':<40} ${t.projected_sale_price:>15,.0f}")
    print(f"  {'Net gain / loss':<40} ${t.net_gain_loss:>15,.0f}")
    print(f"  {'Annualized return':<40} {t.annualized_return_pct:>15.2f}%")
    print()
    print("  Not included above:")
    print(f"    valuation fee ${t.valuation_fee:,.0f}, insurance ~${t.annual_insurance:,.0f}/yr, "
          f"opportunity cost of down payment ${t.opportunity_cost_total:,.0f}")
    if t.total_rental_income is not None:
        print()
        print(f"  {'Rental income':<40} ${t.total_rental_income:>15,.0f}")
        print(f"  {'Net cost after rental':<40} ${t.net_cost_after_rental:>15,.0f}")
        print(f"  {'Gross / net yield':<40} {t.gross_rental_yield_pct:>7.2f}% / {t.net_rental_yield_pct:.2f}%")
        print(f"  {'Breakeven sale price':<40} ${t.breakeven_sale_price:>15,.0f}")
    print()


def _print_yearly(t: TCOResult):
    print(f"  {'Year':>4} {'Interest':>12} {'Tax':>10} {'Maint.':>10} {'Rent':>10} {'Cumulative':>14}")
    for y in t.yearly_breakdown:
        print(f"  {y.year:>4} {y.mortgage_interest:>12,.0f} {y.property_tax:>10,.0f} "
              f"{y.maintenance_fees:>10,.0f} {y.rental_income:>10,.0f} {y.cumulative_cost:>14,.0f}")


def main():
    r, reg, _ = parse_args("Total cost of owning a Singapore property")
    try:
        validate_tenure(r["tenure"])
        if r["holding_years"] < 0:
            raise ValueError(f"Holding period {r['holding_years']} years must not be negative")
    except ValueError as e:
        print(e, file=sys.stderr)
        raise SystemExit(1)

    inp = TCOInput(
        purchase_price=r["price"],
        property_type=r["property_type"],
        residency_status=r["residency"],
        loan_amount=r["loan_amount"],
        annual_interest_rate_pct=r["rate"],
        loan_tenure_years=r["tenure"],
        holding_period_years=r["holding_years"],
        appreciation_pct=r["appreciation"],
        existing_properties=r["existing_properties"],
        floor_area_sqft=r["floor_area"],
        owner_occupied=not r["investment"],
        monthly_rental_income=r["rental_income"],
    )
    result = calculate_total_cost_of_ownership(inp, reg)

    print("=" * 64)
    print(f"{inp.property_type.value} at ${inp.purchase_price:,.0f}, "
          f"{'investment' if not inp.owner_occupied else 'owner-occupied'}, "
          f"{inp.appreciation_pct:.1f}%/yr appreciation")
    print("=" * 64)
    _print_summary(result, inp.holding_period_years)
    _print_yearly(result)


if __name__ == "__main__":
    main()
