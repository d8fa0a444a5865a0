"""Tests for regulatory table validation and loading."""

import copy
import datetime

import pytest
from pydantic import ValidationError
from property_calc_sg.regulatory import (
    SG_2024_CONFIG,
    SG_2024_RAW,
    ConfigError,
    PropertyType,
    RegulatoryConfig,
    ResidencyStatus,
    load_regulatory_config,
)


def _raw():
    return copy.deepcopy(SG_2024_RAW)


class TestBundledSnapshot:
    def test_builds(self):
        assert SG_2024_CONFIG.version == "2024.1"
        assert len(SG_2024_CONFIG.bsd_tiers) == 6
        assert len(SG_2024_CONFIG.ltv_rules) == 12

    def test_bsd_last_tier_open_ended(self):
        assert SG_2024_CONFIG.bsd_tiers[-1].max_value is None
        assert SG_2024_CONFIG.bsd_tiers[-1].rate == pytest.approx(0.06)

    def test_msr_property_types(self):
        assert SG_2024_CONFIG.msr.applicable_property_types == frozenset({PropertyType.HDB, PropertyType.EC})

    def test_enums_parsed(self):
        r = SG_2024_CONFIG.absd_rates[0]
        assert r.residency_status is ResidencyStatus.SINGAPOREAN
        assert r.property_type is PropertyType.HDB

    def test_frozen(self):
        with pytest.raises(ValidationError):
            SG_2024_CONFIG.version = "x"


class TestValidation:
    def test_missing_section(self):
        raw = _raw()
        del raw["stamp_duty"]
        with pytest.raises(ConfigError, match="stamp_duty: Field required"):
            RegulatoryConfig.from_dict(raw)

    def test_bsd_gap(self):
        raw = _raw()
        raw["stamp_duty"]["bsd_tiers"][1]["min_value"] = 200_000
        with pytest.raises(ConfigError, match=r"bsd_tiers\[1\].*gap or overlap"):
            RegulatoryConfig.from_dict(raw)

    def test_bsd_must_start_at_zero(self):
        raw = _raw()
        raw["stamp_duty"]["bsd_tiers"][0]["min_value"] = 1
        with pytest.raises(ConfigError, match="gap or overlap"):
            RegulatoryConfig.from_dict(raw)

    def test_bsd_last_tier_closed(self):
        raw = _raw()
        raw["stamp_duty"]["bsd_tiers"][-1]["max_value"] = 5_000_000
        with pytest.raises(ConfigError, match="open-ended"):
            RegulatoryConfig.from_dict(raw)

    def test_bsd_open_tier_in_middle(self):
        raw = _raw()
        raw["stamp_duty"]["bsd_tiers"][2]["max_value"] = None
        with pytest.raises(ConfigError, match="only the last tier"):
            RegulatoryConfig.from_dict(raw)

    def test_rate_out_of_range(self):
        raw = _raw()
        raw["stamp_duty"]["bsd_tiers"][0]["rate"] = 1.5
        with pytest.raises(ConfigError, match=r"bsd_tiers\[0\].rate"):
            RegulatoryConfig.from_dict(raw)

    def test_duplicate_absd_entry(self):
        raw = _raw()
        raw["stamp_duty"]["absd_rates"].append(dict(raw["stamp_duty"]["absd_rates"][0]))
        with pytest.raises(ConfigError, match="duplicate entry"):
            RegulatoryConfig.from_dict(raw)

    def test_unknown_residency(self):
        raw = _raw()
        raw["stamp_duty"]["absd_rates"][0]["residency_status"] = "Citizen"
        with pytest.raises(ConfigError, match="got 'Citizen'"):
            RegulatoryConfig.from_dict(raw)

    def test_ssd_bands_short_of_exemption(self):
        raw = _raw()
        raw["stamp_duty"]["ssd"]["exemption_threshold_months"] = 48
        with pytest.raises(ConfigError, match="exemption starts at 48"):
            RegulatoryConfig.from_dict(raw)

    def test_ssd_gap(self):
        raw = _raw()
        raw["stamp_duty"]["ssd"]["tiers"][1]["min_months"] = 13
        with pytest.raises(ConfigError, match="gap or overlap"):
            RegulatoryConfig.from_dict(raw)

    def test_ltv_min_cash_exceeds_down_payment(self):
        raw = _raw()
        raw["borrowing"]["ltv_rules"][0]["min_cash_down_payment_pct"] = 20  # 85% LTV leaves 15%
        with pytest.raises(ConfigError, match="exceeds the down payment"):
            RegulatoryConfig.from_dict(raw)

    def test_ltv_zero(self):
        raw = _raw()
        raw["borrowing"]["ltv_rules"][0]["max_ltv_pct"] = 0
        with pytest.raises(ConfigError, match="greater than 0"):
            RegulatoryConfig.from_dict(raw)

    def test_negative_tenure(self):
        raw = _raw()
        raw["borrowing"]["ltv_rules"][0]["loan_tenure_years"] = -1
        with pytest.raises(ConfigError, match="greater than or equal to 0"):
            RegulatoryConfig.from_dict(raw)

    def test_bank_rate_range(self):
        raw = _raw()
        raw["mortgage"]["bank_typical_min_pct"] = 6.0
        with pytest.raises(ConfigError, match="bank_typical_min_pct exceeds"):
            RegulatoryConfig.from_dict(raw)

    def test_property_tax_gap(self):
        raw = _raw()
        raw["property_tax"]["owner_occupied"][2]["annual_value_min"] = 31_000
        with pytest.raises(ConfigError, match=r"owner_occupied\[2\]"):
            RegulatoryConfig.from_dict(raw)

    def test_bool_is_not_a_number(self):
        raw = _raw()
        raw["cpf"]["oa_interest_rate"] = True
        with pytest.raises(ConfigError, match="valid number"):
            RegulatoryConfig.from_dict(raw)

    def test_unknown_key_rejected(self):
        raw = _raw()
        raw["misc"]["stamp_fee"] = 100
        with pytest.raises(ConfigError, match=r"misc\.stamp_fee: Extra inputs are not permitted"):
            RegulatoryConfig.from_dict(raw)

    def test_property_tax_tier_has_one_rate(self):
        raw = _raw()
        raw["property_tax"]["owner_occupied"][0]["non_owner_occupied_rate"] = 0.10
        with pytest.raises(ConfigError, match=r"owner_occupied\[0\]\.non_owner_occupied_rate"):
            RegulatoryConfig.from_dict(raw)

    def test_tier_upper_bound_below_lower(self):
        raw = _raw()
        raw["stamp_duty"]["bsd_tiers"][0]["max_value"] = 0
        with pytest.raises(ConfigError, match=r"bsd_tiers\[0\]: max_value must exceed min_value"):
            RegulatoryConfig.from_dict(raw)

    def test_every_failure_reported(self):
        raw = _raw()
        raw["cpf"]["oa_interest_rate"] = -0.01
        raw["misc"]["valuation_fee"] = "free"
        with pytest.raises(ConfigError) as exc:
            RegulatoryConfig.from_dict(raw)
        assert "cpf.oa_interest_rate" in str(exc.value)
        assert "misc.valuation_fee" in str(exc.value)
        assert isinstance(exc.value.__cause__, ValidationError)

    def test_toml_date_read_as_text(self):
        raw = _raw()
        raw["effective_date"] = datetime.date(2025, 1, 1)
        assert RegulatoryConfig.from_dict(raw).effective_date == "2025-01-01"

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)


class TestLoadRegulatoryConfig:
    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_regulatory_config(tmp_path / "nope.toml")

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("version = \n")
        with pytest.raises(ConfigError, match="not valid TOML"):
            load_regulatory_config(path)

    def test_incomplete_file(self, tmp_path):
        path = tmp_path / "partial.toml"
        path.write_text('version = "2025.1"\neffective_date = "2025-01-01"\nlast_updated = "2025-01-01"\n')
        with pytest.raises(ConfigError, match="stamp_duty: Field required"):
            load_regulatory_config(path)
