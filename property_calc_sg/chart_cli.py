"""CLI entry point for chart generation."""

import argparse
import sys
from pathlib import Path

from property_calc_sg.charts import plot_amortization, plot_cpf_trajectories, plot_tco_breakdown
from property_calc_sg.config import parse_args
from property_calc_sg.cpf import optimize_cpf_usage
from property_calc_sg.mortgage import calculate_mortgage
from property_calc_sg.ownership import calculate_total_cost_of_ownership
from property_calc_sg.params import (
    CPFOptimizerInput,
    MortgageInput,
    TCOInput,
    validate_age,
    validate_tenure,
)
from property_calc_sg.regulatory import LoanType, PropertyType


def _add_args(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--output", type=Path, default=Path("reports/charts"),
        help="output directory (default: reports/charts)",
    )
    parser.add_argument(
        "--name", type=str, default="",
        help="output filename suffix (e.g. a → amortization-a.png)",
    )


def main():
    r, reg, args = parse_args("Singapore property chart generation", _add_args)
    try:
        validate_age(r["age"], r["retirement_age"])
        validate_tenure(r["tenure"])
    except ValueError as e:
        print(e, file=sys.stderr)
        raise SystemExit(1)
    output_dir = args.output
    chart_name = args.name

    print("Amortization...", file=sys.stderr)
    mortgage = calculate_mortgage(MortgageInput(
        loan_amount=r["loan_amount"],
        annual_interest_rate_pct=r["rate"],
        loan_tenure_years=r["tenure"],
        loan_type=LoanType.HDB if r["property_type"] == PropertyType.HDB else LoanType.BANK,
    ))
    if mortgage.amortization_schedule:
        path = plot_amortization(mortgage, output_dir, name=chart_name)
        print(f"  → {path}", file=sys.stderr)
    else:
        print("  no loan: skipped", file=sys.stderr)

    print("CPF scenarios...", file=sys.stderr)
    cpf = optimize_cpf_usage(
        CPFOptimizerInput(
            cpf_oa_balance=r["cpf_oa"],
            property_price=r["price"],
            loan_amount=r["loan_amount"],
            annual_interest_rate_pct=r["rate"],
            loan_tenure_years=r["tenure"],
            current_age=r["age"],
            retirement_age=r["retirement_age"],
            monthly_oa_contribution=r["cpf_contribution"],
        ),
        reg.cpf,
    )
    path = plot_cpf_trajectories(cpf, output_dir, name=chart_name)
    print(f"  → {path}", file=sys.stderr)

    print("Total cost of ownership...", file=sys.stderr)
    tco = calculate_total_cost_of_ownership(
        TCOInput(
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
        ),
        reg,
    )
    path = plot_tco_breakdown(tco, output_dir, name=chart_name)
    print(f"  → {path}", file=sys.stderr)

    print("Done", file=sys.stderr)


if __name__ == "__main__":
    main()
