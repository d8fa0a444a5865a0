"""Tests for LTV resolution, down payment split and maximum affordable price."""

import pytest
from property_calc_sg.affordability import (
    DEFAULT_MAX_LTV_PCT,
    DEFAULT_MIN_CASH_DOWN_PAYMENT_PCT,
    calculate_affordability,
    calculate_down_payment_sources,
    resolve_ltv_rule,
)
from property_calc_sg.borrowing import calculate_max_loan
from property_calc_sg.params import AffordabilityInput
from property_calc_sg.regulatory import (
    SG_2024_CONFIG,
    LoanType,
    LTVRule,
    PropertyType,
    ResidencyStatus,
)

cfg = SG_2024_CONFIG
CONDO = PropertyType.CONDO
HDB = PropertyType.HDB


def _inp(**overrides):
    kw = dict(
        fixed_monthly_income=10_000,
        residency_status=ResidencyStatus.SINGAPOREAN,
        property_type=CONDO,
        annual_interest_rate_pct=3.5,
        loan_tenure_years=30,
        cpf_oa_balance=100_000,
        cash_on_hand=500_000,
    )
    kw.update(overrides)
    return AffordabilityInput(**kw)


class TestResolveLTVRule:
    def test_exact(self):
        ltv = resolve_ltv_rule(cfg.ltv_rules, CONDO, 30, 0)
        assert ltv.max_ltv_pct == 75
        assert ltv.min_cash_down_payment_pct == 5
        assert not ltv.was_fallback

    def test_exact_second_loan(self):
        ltv = resolve_ltv_rule(cfg.ltv_rules, HDB, 25, 1)
        assert ltv.max_ltv_pct == 45
        assert ltv.rule.loan_type is LoanType.HDB

    def test_longer_tenure_exact(self):
        assert resolve_ltv_rule(cfg.ltv_rules, CONDO, 35, 0).max_ltv_pct == 55

    def test_tenure_fallback_prefers_nearest_loan_count(self):
        """Condo 35y with 1 loan: no exact row; the 30y/1-loan rule is nearest."""
        ltv = resolve_ltv_rule(cfg.ltv_rules, CONDO, 35, 1)
        assert ltv.max_ltv_pct == 45
        assert ltv.was_fallback
        assert "nearest match" in ltv.rationale

    def test_many_loans_take_highest_tabulated(self):
        ltv = resolve_ltv_rule(cfg.ltv_rules, CONDO, 30, 5)
        assert ltv.max_ltv_pct == 35
        assert ltv.was_fallback

    def test_shorter_tenure_than_any_rule(self):
        """Condo 20y: no rule at or below 20y, so the shortest Condo tenure applies."""
        ltv = resolve_ltv_rule(cfg.ltv_rules, CONDO, 20, 0)
        assert ltv.rule.loan_tenure_years == 30
        assert ltv.max_ltv_pct == 75
        assert ltv.was_fallback

    def test_short_tenure_keeps_loan_count(self):
        """HDB 20y with 1 loan: below every HDB tenure, the 25y/1-loan rule still applies."""
        ltv = resolve_ltv_rule(cfg.ltv_rules, HDB, 20, 1)
        assert ltv.rule.existing_loans == 1
        assert ltv.max_ltv_pct == 45
        assert ltv.min_cash_down_payment_pct == 25
        assert ltv.was_fallback

    def test_short_tenure_third_loan(self):
        """Condo 25y with 2 loans falls back to the 30y/2-loan rule, not the first-loan one."""
        ltv = resolve_ltv_rule(cfg.ltv_rules, CONDO, 25, 2)
        assert ltv.rule.loan_tenure_years == 30
        assert ltv.rule.existing_loans == 2
        assert ltv.max_ltv_pct == 35

    def test_default_when_type_missing(self):
        rules = (LTVRule(
            loan_type=LoanType.BANK, property_type=CONDO, loan_tenure_years=30,
            existing_loans=0, max_ltv_pct=75, min_cash_down_payment_pct=5,
        ),)
        ltv = resolve_ltv_rule(rules, PropertyType.LANDED, 30, 0)
        assert ltv.rule is None
        assert ltv.max_ltv_pct == DEFAULT_MAX_LTV_PCT
        assert ltv.min_cash_down_payment_pct == DEFAULT_MIN_CASH_DOWN_PAYMENT_PCT
        assert ltv.was_fallback


class TestDownPaymentSources:
    def test_split(self):
        dp = calculate_down_payment_sources(1_000_000, 75, 5, 100_000)
        assert dp.loan_amount == pytest.approx(750_000)
        assert dp.total_down_payment == pytest.approx(250_000)
        assert dp.min_cash_down_payment == pytest.approx(50_000)
        assert dp.cpf_eligible_down_payment == pytest.approx(200_000)
        assert dp.cpf_used == pytest.approx(100_000)
        assert dp.cash_for_cpf_eligible == pytest.approx(100_000)

    def test_cpf_covers_eligible_part(self):
        dp = calculate_down_payment_sources(1_000_000, 75, 5, 500_000)
        assert dp.cpf_used == pytest.approx(200_000)
        assert dp.cash_for_cpf_eligible == 0

    def test_parts_sum(self):
        dp = calculate_down_payment_sources(873_000, 55, 10, 42_000)
        assert dp.min_cash_down_payment + dp.cpf_used + dp.cash_for_cpf_eligible == pytest.approx(
            dp.total_down_payment
        )


class TestCalculateAffordability:
    def setup_method(self):
        self.result = calculate_affordability(_inp(), cfg)

    def test_price_from_loan_and_ltv(self):
        assert self.result.max_affordable_price == pytest.approx(self.result.max_loan_amount / 0.75)

    def test_loan_matches_borrowing_limit(self):
        expected = calculate_max_loan(10_000, 0, 0, CONDO, 3.5, 30, cfg.tdsr, cfg.msr)
        assert self.result.max_loan_amount == pytest.approx(expected.max_loan)

    def test_tdsr_at_limit(self):
        assert self.result.tdsr_at_max_loan == pytest.approx(0.55)
        assert self.result.within_tdsr_limit
        assert self.result.estimated_monthly_repayment == pytest.approx(5_500)

    def test_tdsr_binding_when_cash_sufficient(self):
        assert self.result.cash_sufficient
        assert self.result.binding_constraint == "TDSR"
        assert self.result.constraints["TDSR"].is_binding
        assert not self.result.constraints["Cash"].is_binding

    def test_no_msr_check_for_condo(self):
        assert "MSR" not in self.result.constraints
        assert set(self.result.constraints) == {"TDSR", "LTV", "Cash"}

    def test_cash_totals(self):
        r = self.result
        assert r.total_cash_required == pytest.approx(r.min_cash_down_payment + r.stamp_duty.total_stamp_duty)
        assert r.total_cash_needed == pytest.approx(r.total_cash_required + r.down_payment.cash_for_cpf_eligible)

    def test_stamp_duty_at_max_price(self):
        r = self.result
        assert r.stamp_duty.bsd > 0
        assert r.stamp_duty.absd.amount == 0

    def test_chart_totals(self):
        chart = self.result.chart
        assert chart.cash_amount + chart.cpf_amount + chart.loan_amount == pytest.approx(
            self.result.max_affordable_price
        )
        assert chart.total_amount == pytest.approx(
            self.result.max_affordable_price + chart.stamp_duties_amount
        )

    def test_loan_end_age(self):
        assert self.result.loan_end_age == 65

    def test_cash_binding(self):
        result = calculate_affordability(_inp(cash_on_hand=100_000), cfg)
        assert not result.cash_sufficient
        assert result.binding_constraint == "Cash"
        assert result.constraints["Cash"].is_binding
        assert not result.constraints["Cash"].within_limit

    def test_hdb_msr_binding(self):
        result = calculate_affordability(
            _inp(property_type=HDB, annual_interest_rate_pct=2.6, loan_tenure_years=25), cfg,
        )
        assert result.binding_constraint == "MSR"
        assert result.constraints["MSR"].is_binding
        assert result.constraints["MSR"].ratio_actual == pytest.approx(0.30)
        assert result.ltv.max_ltv_pct == 85

    def test_joint_income_combined(self):
        joint = calculate_affordability(
            _inp(fixed_monthly_income=5_000, joint_fixed_monthly_income=5_000), cfg,
        )
        assert joint.max_loan_amount == pytest.approx(self.result.max_loan_amount)

    def test_existing_debts_lower_price(self):
        indebted = calculate_affordability(_inp(existing_monthly_debts=1_500), cfg)
        assert indebted.max_affordable_price < self.result.max_affordable_price

    def test_second_property_pays_absd(self):
        result = calculate_affordability(_inp(existing_properties=1, existing_loans=1), cfg)
        assert result.stamp_duty.absd.rate == pytest.approx(0.20)
        assert result.ltv.max_ltv_pct == 45

    def test_no_capacity(self):
        result = calculate_affordability(_inp(existing_monthly_debts=6_000), cfg)
        assert result.max_loan_amount == 0
        assert result.max_affordable_price == 0
