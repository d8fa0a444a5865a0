"""Singapore Property Regulatory Calculation Package."""

from property_calc_sg.regulatory import (
    ConfigError,
    ResidencyStatus,
    PropertyType,
    LoanType,
    RegulatoryConfig,
    load_regulatory_config,
    SG_2024_CONFIG,
)
from property_calc_sg.params import (
    StampDutyInput,
    TDSRInput,
    MSRInput,
    MortgageInput,
    AffordabilityInput,
    CPFOptimizerInput,
    TCOInput,
    validate_age,
    validate_tenure,
    MIN_BUYER_AGE,
    MAX_TENURE_YEARS,
)
from property_calc_sg.stamp_duty import (
    calculate_bsd,
    calculate_absd,
    calculate_ssd,
    calculate_stamp_duty,
    effective_residency,
    StampDutyResult,
)
from property_calc_sg.borrowing import calculate_tdsr, calculate_msr, calculate_max_loan
from property_calc_sg.mortgage import (
    calculate_monthly_repayment,
    calculate_mortgage,
    summarize_mortgage,
    MortgageResult,
)
from property_calc_sg.cpf import optimize_cpf_usage, project_cpf_balance, CPFOptimizerResult
from property_calc_sg.affordability import (
    calculate_affordability,
    calculate_down_payment_sources,
    resolve_ltv_rule,
    AffordabilityResult,
)
from property_calc_sg.ownership import calculate_total_cost_of_ownership, TCOResult
from property_calc_sg.tax import calc_property_tax, estimate_annual_value

__all__ = [
    "ConfigError",
    "ResidencyStatus",
    "PropertyType",
    "LoanType",
    "RegulatoryConfig",
    "load_regulatory_config",
    "SG_2024_CONFIG",
    "StampDutyInput",
    "TDSRInput",
    "MSRInput",
    "MortgageInput",
    "AffordabilityInput",
    "CPFOptimizerInput",
    "TCOInput",
    "validate_age",
    "validate_tenure",
    "MIN_BUYER_AGE",
    "MAX_TENURE_YEARS",
    "calculate_bsd",
    "calculate_absd",
    "calculate_ssd",
    "calculate_stamp_duty",
    "effective_residency",
    "StampDutyResult",
    "calculate_tdsr",
    "calculate_msr",
    "calculate_max_loan",
    "calculate_monthly_repayment",
    "calculate_mortgage",
    "summarize_mortgage",
    "MortgageResult",
    "optimize_cpf_usage",
    "project_cpf_balance",
    "CPFOptimizerResult",
    "calculate_affordability",
    "calculate_down_payment_sources",
    "resolve_ltv_rule",
    "AffordabilityResult",
    "calculate_total_cost_of_ownership",
    "TCOResult",
    "calc_property_tax",
    "estimate_annual_value",
]
