"""Tests for mortgage repayment and amortization."""

from datetime import date

import pytest
from property_calc_sg.mortgage import (
    calculate_monthly_repayment,
    calculate_mortgage,
    interest_over_months,
    summarize_mortgage,
    yearly_interest,
)
from property_calc_sg.params import MortgageInput, _calc_annuity_principal, _calc_equal_payment
from property_calc_sg.regulatory import LoanType


class TestMonthlyRepayment:
    def test_typical(self):
        assert calculate_monthly_repayment(800_000, 3.5, 25) == pytest.approx(4_004.98, abs=0.05)

    def test_zero_rate(self):
        assert calculate_monthly_repayment(120_000, 0, 10) == pytest.approx(1_000)

    def test_zero_principal(self):
        assert calculate_monthly_repayment(0, 3.5, 25) == 0

    def test_zero_tenure(self):
        assert calculate_monthly_repayment(500_000, 3.5, 0) == 0


class TestEqualPayment:
    def test_zero_months(self):
        assert _calc_equal_payment(1000, 0.01, 0) == 0.0

    def test_zero_rate(self):
        assert _calc_equal_payment(1200, 0, 12) == pytest.approx(100)

    def test_inverse_of_annuity_principal(self):
        payment = _calc_equal_payment(600_000, 0.03 / 12, 300)
        assert _calc_annuity_principal(payment, 0.03 / 12, 300) == pytest.approx(600_000)

    def test_annuity_principal_degenerate(self):
        assert _calc_annuity_principal(0, 0.01, 12) == 0
        assert _calc_annuity_principal(100, 0.01, 0) == 0
        assert _calc_annuity_principal(100, 0, 12) == pytest.approx(1_200)


class TestCalculateMortgage:
    def setup_method(self):
        self.inp = MortgageInput(loan_amount=800_000, annual_interest_rate_pct=3.5, loan_tenure_years=25)
        self.result = calculate_mortgage(self.inp)

    def test_schedule_length(self):
        assert len(self.result.amortization_schedule) == 300

    def test_closes_to_zero(self):
        assert self.result.amortization_schedule[-1].remaining_balance == pytest.approx(0, abs=1e-4)

    def test_principal_sums_to_loan(self):
        total = sum(e.principal_component for e in self.result.amortization_schedule)
        assert total == pytest.approx(800_000)

    def test_total_interest(self):
        assert self.result.total_interest_paid == pytest.approx(self.result.total_repayment - 800_000)
        assert self.result.amortization_schedule[-1].cumulative_interest == pytest.approx(
            self.result.total_interest_paid
        )

    def test_first_month_split(self):
        first = self.result.amortization_schedule[0]
        assert first.interest_component == pytest.approx(800_000 * 0.035 / 12)
        assert first.principal_component + first.interest_component == pytest.approx(first.payment)

    def test_interest_declines(self):
        s = self.result.amortization_schedule
        assert s[0].interest_component > s[100].interest_component > s[-1].interest_component

    def test_balance_never_negative(self):
        assert all(e.remaining_balance >= 0 for e in self.result.amortization_schedule)

    def test_effective_rate(self):
        expected = self.result.total_interest_paid / 800_000 * 100 / 25
        assert self.result.effective_interest_rate_pct == pytest.approx(expected)

    def test_zero_rate_loan(self):
        result = calculate_mortgage(MortgageInput(120_000, 0, 10))
        assert result.monthly_repayment == pytest.approx(1_000)
        assert result.total_interest_paid == 0

    def test_degenerate(self):
        result = calculate_mortgage(MortgageInput(0, 3.5, 25))
        assert result.monthly_repayment == 0
        assert result.total_interest_paid == 0
        assert result.amortization_schedule == []

    def test_loan_type_carried_through(self):
        assert calculate_mortgage(MortgageInput(500_000, 2.6, 25, LoanType.HDB)).loan_type is LoanType.HDB
        assert calculate_mortgage(MortgageInput(500_000, 3.5, 25)).loan_type is LoanType.BANK

    def test_degenerate_keeps_loan_type(self):
        assert calculate_mortgage(MortgageInput(0, 2.6, 25, LoanType.HDB)).loan_type is LoanType.HDB


class TestInterestWindows:
    def setup_method(self):
        self.schedule = calculate_mortgage(MortgageInput(500_000, 3.0, 20)).amortization_schedule

    def test_zero_months(self):
        assert interest_over_months(self.schedule, 0) == 0

    def test_beyond_tenure(self):
        assert interest_over_months(self.schedule, 1_000) == pytest.approx(self.schedule[-1].cumulative_interest)

    def test_yearly_sums(self):
        years = yearly_interest(self.schedule, 5)
        assert len(years) == 5
        assert sum(years) == pytest.approx(interest_over_months(self.schedule, 60))
        assert years[0] > years[-1]

    def test_yearly_after_payoff(self):
        years = yearly_interest(self.schedule, 22)
        assert years[-1] == 0
        assert years[-2] == 0


class TestSummarizeMortgage:
    def test_dates(self):
        summary = summarize_mortgage(MortgageInput(12_000, 0, 1), date(2024, 1, 31))
        assert len(summary.dated_schedule) == 12
        assert summary.dated_schedule[0].payment_date == date(2024, 2, 29)
        assert summary.payoff_date == date(2025, 1, 31)

    def test_interest_share(self):
        summary = summarize_mortgage(MortgageInput(800_000, 3.5, 25), date(2024, 6, 1))
        m = summary.mortgage
        assert summary.interest_pct_of_total_payment == pytest.approx(m.total_interest_paid / m.total_repayment * 100)

    def test_no_loan(self):
        summary = summarize_mortgage(MortgageInput(0, 3.5, 25), date(2024, 6, 1))
        assert summary.payoff_date is None
        assert summary.interest_pct_of_total_payment == 0
