"""Tests for progressive tier walks and property tax."""

import pytest
from property_calc_sg.regulatory import SG_2024_CONFIG
from property_calc_sg.tax import calc_property_tax, estimate_annual_value, progressive_tax

TIERS = [
    (0, 100, 0.0, "first"),
    (100, 300, 0.1, "second"),
    (300, None, 0.2, "rest"),
]


class TestProgressiveTax:
    def test_within_first_tier(self):
        total, breakdown = progressive_tax(50, TIERS)
        assert total == pytest.approx(0)
        assert len(breakdown) == 1

    def test_spans_tiers(self):
        """100×0 + 200×0.1 + 200×0.2 = 60"""
        total, breakdown = progressive_tax(500, TIERS)
        assert total == pytest.approx(60)
        assert [c.amount for c in breakdown] == pytest.approx([0, 20, 40])
        assert [c.label for c in breakdown] == ["first", "second", "rest"]

    def test_boundary(self):
        total, breakdown = progressive_tax(300, TIERS)
        assert total == pytest.approx(20)
        assert len(breakdown) == 2

    def test_zero_base(self):
        total, breakdown = progressive_tax(0, TIERS)
        assert total == 0
        assert breakdown == []

    def test_negative_base(self):
        total, _ = progressive_tax(-10, TIERS)
        assert total == 0


class TestAnnualValue:
    def test_proxy(self):
        assert estimate_annual_value(1_000_000, 0.035) == pytest.approx(35_000)

    def test_negative_price(self):
        assert estimate_annual_value(-1, 0.035) == 0


class TestPropertyTax:
    def test_owner_occupied(self):
        """AV 35,000: 8,000×0 + 22,000×4% + 5,000×5% = 1,130"""
        tax, breakdown = calc_property_tax(35_000, True, SG_2024_CONFIG.property_tax)
        assert tax == pytest.approx(1_130)
        assert len(breakdown) == 3

    def test_non_owner_occupied(self):
        """AV 100,000 through the six non-owner bands = 14,300"""
        tax, _ = calc_property_tax(100_000, False, SG_2024_CONFIG.property_tax)
        assert tax == pytest.approx(14_300)

    def test_non_owner_first_band(self):
        tax, _ = calc_property_tax(35_000, False, SG_2024_CONFIG.property_tax)
        assert tax == pytest.approx(3_600)

    def test_owner_below_threshold(self):
        tax, _ = calc_property_tax(8_000, True, SG_2024_CONFIG.property_tax)
        assert tax == pytest.approx(0)

    def test_zero_av(self):
        assert calc_property_tax(0, True, SG_2024_CONFIG.property_tax) == (0.0, [])
