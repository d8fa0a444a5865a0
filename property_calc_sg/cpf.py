"""CPF Ordinary Account usage strategies for a home purchase.

Three strategies are evaluated for the same loan:

- A (Maximum CPF): OA funds the down payment first, then every monthly
  installment until the OA balance runs out; cash covers the rest.
- B (Full Cash): the OA is never touched and compounds freely.
- C (Optimized Split): when the loan rate is above the OA rate the OA pays
  the down payment only; otherwise C is the same as B.

Each OA balance is projected monthly to retirement age, and the strategy
with the highest net wealth (OA balance + property price) is recommended.
"""

import logging
from dataclasses import dataclass, field
from typing import Literal

from property_calc_sg.mortgage import calculate_monthly_repayment
from property_calc_sg.params import CPFOptimizerInput
from property_calc_sg.regulatory import CPFRates

logger = logging.getLogger(__name__)

ScenarioKey = Literal["A", "B", "C"]

SCENARIO_LABELS: dict[str, str] = {
    "A": "Maximum CPF",
    "B": "Full Cash",
    "C": "Optimized Split",
}


@dataclass
class CPFScenario:
    key: ScenarioKey
    label: str
    cpf_down_payment: float
    cash_down_payment: float
    monthly_repayment: float
    # First-month split of the installment
    monthly_cpf_installment: float
    monthly_cash_outflow: float
    total_cpf_used: float
    total_cash_used: float
    total_interest_paid: float
    projected_cpf_oa_at_retirement: float
    net_wealth_at_retirement: float
    # (age, OA balance) at each birthday from current age to retirement
    balance_history: list[tuple[int, float]] = field(default_factory=list)


@dataclass
class CPFOptimizerResult:
    scenario_a: CPFScenario
    scenario_b: CPFScenario
    scenario_c: CPFScenario
    recommended: ScenarioKey
    interest_saved_vs_max_cpf: float
    cpf_reduced_vs_full_cash: float
    recommendation: str

    @property
    def scenarios(self) -> list[CPFScenario]:
        return [self.scenario_a, self.scenario_b, self.scenario_c]

    @property
    def recommended_scenario(self) -> CPFScenario:
        return {s.key: s for s in self.scenarios}[self.recommended]


def project_cpf_balance(
    current_balance: float,
    monthly_contribution: float,
    years: float,
    annual_rate: float,
) -> float:
    """Future OA balance with monthly compounding and end-of-month contributions.

    FV = PV(1+r)^n + PMT((1+r)^n - 1)/r, with r = annual_rate / 12.
    """
    months = round(years * 12)
    if months <= 0:
        return current_balance
    r = annual_rate / 12
    growth = (1 + r) ** months
    if r == 0:
        return current_balance + monthly_contribution * months
    return current_balance * growth + monthly_contribution * (growth - 1) / r


def _simulate(
    key: ScenarioKey,
    inp: CPFOptimizerInput,
    oa_rate: float,
    monthly_repayment: float,
    total_interest: float,
    use_cpf_for_down_payment: bool,
    use_cpf_for_installments: bool,
) -> CPFScenario:
    down_payment = inp.down_payment
    balance = max(0.0, inp.cpf_oa_balance)
    cpf_dp = min(balance, down_payment) if use_cpf_for_down_payment else 0.0
    balance -= cpf_dp

    r = oa_rate / 12
    loan_months = max(0, inp.loan_tenure_years * 12) if inp.loan_amount > 0 else 0
    total_months = max(0, (inp.retirement_age - inp.current_age) * 12)

    history = [(inp.current_age, balance)]
    total_cpf = cpf_dp
    total_cash = down_payment - cpf_dp
    first_cpf_installment = None

    for month in range(1, total_months + 1):
        balance = balance * (1 + r) + inp.monthly_oa_contribution
        if month <= loan_months:
            cpf_part = min(monthly_repayment, balance) if use_cpf_for_installments else 0.0
            balance -= cpf_part
            total_cpf += cpf_part
            total_cash += monthly_repayment - cpf_part
            if first_cpf_installment is None:
                first_cpf_installment = cpf_part
        if month % 12 == 0:
            history.append((inp.current_age + month // 12, balance))

    # Installments still due after retirement are paid in cash
    if loan_months > total_months:
        total_cash += monthly_repayment * (loan_months - total_months)

    if first_cpf_installment is None:
        first_cpf_installment = 0.0
    return CPFScenario(
        key=key,
        label=SCENARIO_LABELS[key],
        cpf_down_payment=cpf_dp,
        cash_down_payment=down_payment - cpf_dp,
        monthly_repayment=monthly_repayment,
        monthly_cpf_installment=first_cpf_installment,
        monthly_cash_outflow=monthly_repayment - first_cpf_installment,
        total_cpf_used=total_cpf,
        total_cash_used=total_cash,
        total_interest_paid=total_interest,
        projected_cpf_oa_at_retirement=balance,
        net_wealth_at_retirement=balance + inp.property_price,
        balance_history=history,
    )


def pick_recommended(scenarios: list[CPFScenario], default: ScenarioKey = "C") -> ScenarioKey:
    """Highest net wealth wins; ``default`` is kept unless strictly beaten."""
    by_key = {s.key: s for s in scenarios}
    best = by_key[default]
    for s in scenarios:
        if s.net_wealth_at_retirement > best.net_wealth_at_retirement:
            best = s
    return best.key


def _describe(result_key: ScenarioKey, scenario: CPFScenario, interest_saved: float, cpf_reduced: float) -> str:
    parts = [
        f"Scenario {result_key} ({scenario.label}) yields the highest net wealth at retirement "
        f"(${scenario.net_wealth_at_retirement:,.0f})."
    ]
    if interest_saved > 0:
        parts.append(f"It saves ${interest_saved:,.0f} in total interest versus Maximum CPF.")
    if cpf_reduced > 0:
        parts.append(f"It reduces CPF retirement savings by ${cpf_reduced:,.0f} versus Full Cash.")
    else:
        parts.append("It preserves the CPF balance for retirement.")
    return " ".join(parts)


def optimize_cpf_usage(inp: CPFOptimizerInput, rates: CPFRates) -> CPFOptimizerResult:
    """Compare the three CPF strategies for one loan and recommend one."""
    oa_rate = inp.oa_interest_rate if inp.oa_interest_rate is not None else rates.oa_interest_rate
    loan_rate = inp.annual_interest_rate_pct / 100
    repayment = calculate_monthly_repayment(
        inp.loan_amount, inp.annual_interest_rate_pct, inp.loan_tenure_years
    )
    # Same loan in every scenario, so interest is identical by construction
    total_interest = max(0.0, repayment * inp.loan_tenure_years * 12 - max(0.0, inp.loan_amount))

    split_uses_cpf = loan_rate > oa_rate
    logger.debug(
        "Loan rate %.2f%% vs OA rate %.2f%%: optimized split %s CPF for the down payment",
        loan_rate * 100, oa_rate * 100, "uses" if split_uses_cpf else "preserves",
    )

    a = _simulate("A", inp, oa_rate, repayment, total_interest, True, True)
    b = _simulate("B", inp, oa_rate, repayment, total_interest, False, False)
    c = _simulate("C", inp, oa_rate, repayment, total_interest, split_uses_cpf, False)

    recommended = pick_recommended([a, b, c])
    interest_saved = a.total_interest_paid - c.total_interest_paid
    cpf_reduced = b.projected_cpf_oa_at_retirement - c.projected_cpf_oa_at_retirement
    chosen = {"A": a, "B": b, "C": c}[recommended]
    return CPFOptimizerResult(
        scenario_a=a,
        scenario_b=b,
        scenario_c=c,
        recommended=recommended,
        interest_saved_vs_max_cpf=interest_saved,
        cpf_reduced_vs_full_cash=cpf_reduced,
        recommendation=_describe(recommended, chosen, interest_saved, cpf_reduced),
    )
