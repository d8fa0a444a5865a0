"""CLI entry point for affordability and stamp duty."""

import argparse
import sys

from property_calc_sg.affordability import AffordabilityResult, calculate_affordability
from property_calc_sg.borrowing import calculate_tdsr
from property_calc_sg.config import parse_args
from property_calc_sg.mortgage import calculate_monthly_repayment
from property_calc_sg.params import (
    AffordabilityInput,
    StampDutyInput,
    TDSRInput,
    validate_age,
    validate_tenure,
)
from property_calc_sg.regulatory import RegulatoryConfig
from property_calc_sg.stamp_duty import StampDutyResult, calculate_stamp_duty


def _add_args(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--holding-months", type=int, default=None,
        help="months held before resale, to include seller's stamp duty",
    )


def _print_header(r: dict, reg: RegulatoryConfig):
    buyers = r["residency"].value
    if r["co_buyer_residency"] is not None:
        buyers += f" + {r['co_buyer_residency'].value}"
    income = r["fixed_income"] + r["variable_income"] + r["joint_fixed_income"] + r["joint_variable_income"]
    print("=" * 72)
    print(f"Singapore property calculator (rates v{reg.version}, effective {reg.effective_date})")
    print(f"  Buyer(s): {buyers} / owns {r['existing_properties']} property(ies) / age {r['age']}")
    print(f"  Gross income: ${income:,.0f}/month / debts ${r['monthly_debts']:,.0f}/month")
    print(f"  Loan: {r['rate']:.2f}% over {r['tenure']} years / CPF OA ${r['cpf_oa']:,.0f} / cash ${r['cash']:,.0f}")
    print("=" * 72)
    print()


def _print_stamp_duty(price: float, stamp: StampDutyResult):
    print(f"[Stamp duty at ${price:,.0f}]")
    print("-" * 72)
    for t in stamp.breakdown.bsd_tiers:
        print(f"  {t.label:<40} {t.rate * 100:>5.1f}%  ${t.amount:>12,.2f}")
    print(f"  {'Buyer stamp duty (BSD)':<47} ${stamp.bsd:>12,.2f}")
    print(f"  {'Additional BSD (' + f'{stamp.absd.rate * 100:.0f}%)':<47} ${stamp.absd.amount:>12,.2f}")
    print(f"    {stamp.absd.rationale}")
    if stamp.ssd > 0:
        print(f"  {'Seller stamp duty (' + f'{stamp.breakdown.ssd_rate * 100:.0f}%)':<47} ${stamp.ssd:>12,.2f}")
    print(f"  {'Total':<47} ${stamp.total_stamp_duty:>12,.2f}")
    print()


def _print_tdsr(r: dict, reg: RegulatoryConfig):
    loan = r["loan_amount"]
    repayment = calculate_monthly_repayment(loan, r["rate"], r["tenure"])
    tdsr = calculate_tdsr(
        TDSRInput(
            fixed_monthly_income=r["fixed_income"] + r["joint_fixed_income"],
            variable_monthly_income=r["variable_income"] + r["joint_variable_income"],
            existing_monthly_debts=r["monthly_debts"],
            proposed_mortgage_repayment=repayment,
        ),
        reg.tdsr,
    )
    status = "OK" if tdsr.within_limit else "EXCEEDS LIMIT"
    print(f"[TDSR for a ${loan:,.0f} loan]")
    print("-" * 72)
    print(f"  Monthly repayment: ${repayment:,.2f}")
    print(f"  TDSR: {tdsr.tdsr_ratio * 100:.2f}% of ${tdsr.effective_monthly_income:,.0f} "
          f"(limit {tdsr.tdsr_limit * 100:.0f}%) {status}")
    print(f"  Remaining capacity: ${tdsr.remaining_capacity:,.2f}/month")
    print()


def _print_affordability(a: AffordabilityResult):
    print("[Maximum affordable purchase]")
    print("-" * 72)
    print(f"  Max loan: ${a.max_loan_amount:,.0f} ({a.max_loan.limiting_factor}-limited, "
          f"${a.estimated_monthly_repayment:,.2f}/month)")
    print(f"  LTV: {a.ltv.rationale}")
    print(f"  Max price: ${a.max_affordable_price:,.0f}")
    print(f"  Down payment: ${a.down_payment.total_down_payment:,.0f} "
          f"(min cash ${a.min_cash_down_payment:,.0f}, CPF ${a.cpf_applicable:,.0f}, "
          f"cash top-up ${a.down_payment.cash_for_cpf_eligible:,.0f})")
    print(f"  Stamp duty: ${a.stamp_duty.total_stamp_duty:,.0f}")
    print(f"  Cash needed: ${a.total_cash_needed:,.0f} ({'sufficient' if a.cash_sufficient else 'SHORTFALL'})")
    print(f"  Loan ends at age {a.loan_end_age}")
    print()
    print(f"  {'Constraint':<10} {'Actual':>10} {'Limit':>10}  Status")
    for c in a.constraints.values():
        flag = "binding" if c.is_binding else ""
        status = "ok" if c.within_limit else "breach"
        print(f"  {c.label:<10} {c.ratio_actual * 100:>9.2f}% {c.limit_value * 100:>9.0f}%  {status} {flag}")
    print()


def main():
    r, reg, args = parse_args("Singapore property affordability and stamp duty", _add_args)
    try:
        validate_age(r["age"])
        validate_tenure(r["tenure"])
    except ValueError as e:
        print(e, file=sys.stderr)
        raise SystemExit(1)

    _print_header(r, reg)

    stamp = calculate_stamp_duty(
        StampDutyInput(
            purchase_price=r["price"],
            residency_status=r["residency"],
            property_type=r["property_type"],
            existing_properties=r["existing_properties"],
            co_buyer_residency=r["co_buyer_residency"],
            holding_period_months=args.holding_months,
        ),
        reg,
    )
    _print_stamp_duty(r["price"], stamp)
    _print_tdsr(r, reg)

    affordability = calculate_affordability(
        AffordabilityInput(
            fixed_monthly_income=r["fixed_income"],
            variable_monthly_income=r["variable_income"],
            joint_fixed_monthly_income=r["joint_fixed_income"],
            joint_variable_monthly_income=r["joint_variable_income"],
            residency_status=r["residency"],
            co_buyer_residency=r["co_buyer_residency"],
            property_type=r["property_type"],
            annual_interest_rate_pct=r["rate"],
            loan_tenure_years=r["tenure"],
            existing_monthly_debts=r["monthly_debts"],
            existing_properties=r["existing_properties"],
            existing_loans=r["existing_loans"],
            buyer_age=r["age"],
            cpf_oa_balance=r["cpf_oa"],
            cash_on_hand=r["cash"],
        ),
        reg,
    )
    _print_affordability(affordability)


if __name__ == "__main__":
    main()
