"""CLI entry point for the CPF usage comparison (3 scenarios)."""

import sys

from property_calc_sg.config import parse_args
from property_calc_sg.cpf import CPFOptimizerResult, optimize_cpf_usage
from property_calc_sg.params import CPFOptimizerInput, validate_age, validate_tenure


def _print_row(result: CPFOptimizerResult, label: str, key: str, fmt: str = "${:>14,.0f}"):
    print(f"{label:<28} ", end="")
    for s in result.scenarios:
        print(fmt.format(getattr(s, key)) + " ", end="")
    print()


def _print_table(result: CPFOptimizerResult):
    header = f"{'':<28} " + " ".join(f"{s.key + ': ' + s.label:>15}" for s in result.scenarios)
    print(header)
    print("-" * 80)

    pr = lambda label, key, **kw: _print_row(result, label, key, **kw)

    pr("CPF down payment", "cpf_down_payment")
    pr("Cash down payment", "cash_down_payment")
    pr("Monthly repayment", "monthly_repayment", fmt="${:>14,.2f}")
    pr("  from CPF (first month)", "monthly_cpf_installment", fmt="${:>14,.2f}")
    pr("  from cash (first month)", "monthly_cash_outflow", fmt="${:>14,.2f}")
    pr("Total CPF used", "total_cpf_used")
    pr("Total cash used", "total_cash_used")
    pr("Total interest", "total_interest_paid")
    print("-" * 80)
    pr("CPF OA at retirement", "projected_cpf_oa_at_retirement")
    pr("Net wealth at retirement", "net_wealth_at_retirement")
    print("-" * 80)


def main():
    r, reg, _ = parse_args("CPF OA usage comparison for a home purchase")
    try:
        validate_age(r["age"], r["retirement_age"])
        validate_tenure(r["tenure"])
    except ValueError as e:
        print(e, file=sys.stderr)
        raise SystemExit(1)

    inp = CPFOptimizerInput(
        cpf_oa_balance=r["cpf_oa"],
        property_price=r["price"],
        loan_amount=r["loan_amount"],
        annual_interest_rate_pct=r["rate"],
        loan_tenure_years=r["tenure"],
        current_age=r["age"],
        retirement_age=r["retirement_age"],
        monthly_oa_contribution=r["cpf_contribution"],
    )
    print(f"Projecting CPF OA from age {inp.current_age} to {inp.retirement_age}...", file=sys.stderr)
    result = optimize_cpf_usage(inp, reg.cpf)

    print("=" * 80)
    print(f"CPF usage comparison: ${inp.property_price:,.0f} purchase, ${inp.loan_amount:,.0f} loan "
          f"at {inp.annual_interest_rate_pct:.2f}% vs OA {reg.cpf.oa_interest_rate * 100:.2f}%")
    print("=" * 80)
    _print_table(result)
    print()
    print(f"Recommended: {result.recommended} ({result.recommended_scenario.label})")
    print(f"  {result.recommendation}")


if __name__ == "__main__":
    main()
