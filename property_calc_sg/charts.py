"""Chart generation for CPF, mortgage and ownership-cost results."""

from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as ticker

from property_calc_sg.cpf import CPFOptimizerResult
from property_calc_sg.mortgage import MortgageResult
from property_calc_sg.ownership import TCOResult
from property_calc_sg.regulatory import LoanType

# Scenario color mapping
SCENARIO_COLORS = {
    "A": "#d62728",   # red
    "B": "#2ca02c",   # green
    "C": "#1f77b4",   # blue
}

DEFAULT_COLOR = "#7f7f7f"


def _format_sgd_axis(ax: plt.Axes):
    """Thousands separators on the Y axis, with a $k/$M secondary scale."""
    ax.yaxis.set_major_formatter(
        ticker.FuncFormatter(lambda x, _: f"{x:,.0f}")
    )
    ax_right = ax.secondary_yaxis("right")
    ax_right.yaxis.set_major_formatter(
        ticker.FuncFormatter(
            lambda x, _: f"${x / 1e6:.1f}M" if abs(x) >= 1e6 else f"${x / 1e3:.0f}k" if x != 0 else "0"
        )
    )
    ax_right.set_ylabel("")


def _save(fig, output_path: Path, stem: str, name: str) -> Path:
    output_path.mkdir(parents=True, exist_ok=True)
    suffix = f"-{name}" if name else ""
    filepath = output_path / f"{stem}{suffix}.png"
    fig.tight_layout()
    fig.savefig(filepath, dpi=150)
    plt.close(fig)
    return filepath


def plot_cpf_trajectories(result: CPFOptimizerResult, output_path: Path, name: str = "") -> Path:
    """Line chart of the projected OA balance for each CPF scenario.

    Args:
        result: optimize_cpf_usage() output; each scenario's balance_history is plotted.
        output_path: directory to save the PNG.
        name: optional suffix for the output filename (e.g. "a" → "cpf_trajectories-a.png").

    Returns:
        Path to the generated PNG file.
    """
    fig, ax = plt.subplots(figsize=(12, 7))

    for s in result.scenarios:
        ages = [age for age, _ in s.balance_history]
        balances = [bal for _, bal in s.balance_history]
        color = SCENARIO_COLORS.get(s.key, DEFAULT_COLOR)
        width = 3 if s.key == result.recommended else 1.5
        ax.plot(ages, balances, label=f"{s.key}: {s.label}", color=color, linewidth=width)

    ax.set_xlabel("Age")
    ax.set_ylabel("CPF OA balance (SGD)")
    ax.set_title(f"Projected CPF OA balance (recommended: {result.recommended})")
    ax.legend(loc="upper left")
    ax.grid(True, alpha=0.3)
    _format_sgd_axis(ax)

    return _save(fig, output_path, "cpf_trajectories", name)


def plot_amortization(mortgage: MortgageResult, output_path: Path, name: str = "") -> Path:
    """Stacked yearly principal/interest bars with the remaining balance overlaid."""
    schedule = mortgage.amortization_schedule
    if not schedule:
        raise ValueError("Mortgage has no amortization schedule")

    years = (len(schedule) + 11) // 12
    principal = [0.0] * years
    interest = [0.0] * years
    balance = [0.0] * years
    for e in schedule:
        y = (e.month - 1) // 12
        principal[y] += e.principal_component
        interest[y] += e.interest_component
        balance[y] = e.remaining_balance

    x = list(range(1, years + 1))
    fig, ax = plt.subplots(figsize=(12, 7))
    ax.bar(x, principal, label="Principal", color="#1f77b4")
    ax.bar(x, interest, bottom=principal, label="Interest", color="#ff7f0e")
    ax.set_xlabel("Loan year")
    ax.set_ylabel("Paid per year (SGD)")
    loan = "HDB loan" if mortgage.loan_type is LoanType.HDB else "Bank loan"
    ax.set_title(f"Amortization ({loan}): ${mortgage.monthly_repayment:,.0f}/month")
    ax.grid(True, alpha=0.3, axis="y")
    ax.yaxis.set_major_formatter(ticker.FuncFormatter(lambda v, _: f"{v:,.0f}"))

    ax_bal = ax.twinx()
    ax_bal.plot(x, balance, color="#333333", linewidth=2, label="Remaining balance")
    ax_bal.set_ylabel("Remaining balance (SGD)")
    ax_bal.yaxis.set_major_formatter(ticker.FuncFormatter(lambda v, _: f"{v:,.0f}"))

    handles, labels = ax.get_legend_handles_labels()
    h2, l2 = ax_bal.get_legend_handles_labels()
    ax.legend(handles + h2, labels + l2, loc="upper right")

    return _save(fig, output_path, "amortization", name)


def plot_tco_breakdown(result: TCOResult, output_path: Path, name: str = "") -> Path:
    """Horizontal bar chart of the grand-total cost components."""
    components = [
        ("Purchase price", result.purchase_price),
        ("Stamp duty", result.total_stamp_duty),
        ("Mortgage interest", result.total_mortgage_interest),
        ("Property tax", result.total_property_tax),
        ("Maintenance", result.total_maintenance_fees),
        ("Legal fees", result.legal_fees),
    ]
    labels = [c[0] for c in components]
    values = [c[1] for c in components]

    fig, ax = plt.subplots(figsize=(12, 6))
    bars = ax.barh(labels, values, color="#1f77b4")
    for bar, v in zip(bars, values):
        share = v / result.grand_total_cost * 100 if result.grand_total_cost > 0 else 0
        ax.annotate(
            f"${v:,.0f} ({share:.1f}%)",
            xy=(bar.get_width(), bar.get_y() + bar.get_height() / 2),
            xytext=(4, 0), textcoords="offset points",
            va="center", fontsize=9,
        )
    ax.invert_yaxis()
    ax.set_xlabel("SGD")
    ax.set_title(
        f"Total cost of ownership ${result.grand_total_cost:,.0f} "
        f"vs projected sale ${result.projected_sale_price:,.0f}"
    )
    ax.xaxis.set_major_formatter(ticker.FuncFormatter(lambda v, _: f"{v:,.0f}"))
    ax.grid(True, alpha=0.3, axis="x")

    return _save(fig, output_path, "tco_breakdown", name)
