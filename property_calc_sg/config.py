"""TOML config loader with CLI > config > default resolution."""

import argparse
import logging
import sys
import tomllib
from pathlib import Path
from typing import Callable

from property_calc_sg.affordability import resolve_ltv_rule
from property_calc_sg.regulatory import (
    SG_2024_CONFIG,
    ConfigError,
    PropertyType,
    RegulatoryConfig,
    ResidencyStatus,
    load_regulatory_config,
)

DEFAULT_CONFIG_PATH = Path("config.toml")

DEFAULTS = {
    "age": 32,
    "retirement_age": 65,
    "residency": "Singaporean",
    "co_buyer_residency": "",
    "property_type": "Condo",
    "price": 1_000_000.0,
    "existing_properties": 0,
    "existing_loans": 0,
    "fixed_income": 8_000.0,
    "variable_income": 0.0,
    "joint_fixed_income": 0.0,
    "joint_variable_income": 0.0,
    "monthly_debts": 0.0,
    "cpf_oa": 80_000.0,
    "cpf_contribution": 0.0,
    "cash": 150_000.0,
    "loan_amount": None,
    "rate": None,
    "tenure": 30,
    "holding_years": 10,
    "appreciation": 2.0,
    "floor_area": 1_000.0,
    "rental_income": 0.0,
    "investment": False,
}

# TOML keys may use either form; normalize to DEFAULTS keys
_ALIASES = {
    "residency_status": "residency",
    "annual_interest_rate_pct": "rate",
    "loan_tenure_years": "tenure",
    "holding_period_years": "holding_years",
    "cpf_oa_balance": "cpf_oa",
    "cash_on_hand": "cash",
}


def load_config(path: Path | None = None) -> dict:
    """Load TOML config file. Returns empty dict if file doesn't exist."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        print(f"Failed to read config file: {path}: {e}", file=sys.stderr)
        raise SystemExit(1)
    for old, new in _ALIASES.items():
        if old in raw and new not in raw:
            raw[new] = raw.pop(old)
        elif old in raw:
            raw.pop(old)  # canonical key takes precedence
    # Normalize co-buyer: false / "none" → no co-buyer
    if raw.get("co_buyer_residency") in (False, "none"):
        raw["co_buyer_residency"] = ""
    return raw


def create_parser(description: str) -> argparse.ArgumentParser:
    """Create argparse parser with shared transaction flags."""
    d = DEFAULTS
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", type=Path, default=None, help="config file path (default: config.toml)")
    parser.add_argument("--regulatory", type=Path, default=None, help="regulatory tables TOML (default: bundled 2024 rates)")
    parser.add_argument("--verbose", action="store_true", help="log rate fallbacks and intermediate steps")
    parser.add_argument("--age", type=int, default=None, help=f"buyer's current age (default: {d['age']})")
    parser.add_argument("--retirement-age", type=int, default=None, help=f"CPF projection end age (default: {d['retirement_age']})")
    parser.add_argument("--residency", type=str, default=None, help=f"Singaporean, PR or Foreigner (default: {d['residency']})")
    parser.add_argument("--co-buyer-residency", type=str, default=None, help="co-buyer residency for joint purchases (default: none)")
    parser.add_argument("--property-type", type=str, default=None, help=f"HDB, Condo, Landed or EC (default: {d['property_type']})")
    parser.add_argument("--price", type=float, default=None, help=f"purchase price SGD (default: {d['price']:,.0f})")
    parser.add_argument("--existing-properties", type=int, default=None, help=f"residential properties already owned (default: {d['existing_properties']})")
    parser.add_argument("--existing-loans", type=int, default=None, help=f"outstanding housing loans (default: {d['existing_loans']})")
    parser.add_argument("--fixed-income", type=float, default=None, help=f"fixed monthly income SGD (default: {d['fixed_income']:,.0f})")
    parser.add_argument("--variable-income", type=float, default=None, help=f"variable monthly income SGD (default: {d['variable_income']:,.0f})")
    parser.add_argument("--joint-fixed-income", type=float, default=None, help="joint applicant fixed monthly income SGD")
    parser.add_argument("--joint-variable-income", type=float, default=None, help="joint applicant variable monthly income SGD")
    parser.add_argument("--monthly-debts", type=float, default=None, help=f"existing monthly debt repayments SGD (default: {d['monthly_debts']:,.0f})")
    parser.add_argument("--cpf-oa", type=float, default=None, help=f"CPF OA balance SGD (default: {d['cpf_oa']:,.0f})")
    parser.add_argument("--cpf-contribution", type=float, default=None, help="monthly OA contribution SGD (default: 0)")
    parser.add_argument("--cash", type=float, default=None, help=f"cash on hand SGD (default: {d['cash']:,.0f})")
    parser.add_argument("--loan-amount", type=float, default=None, help="loan principal SGD (default: max LTV of price)")
    parser.add_argument("--rate", type=float, default=None, help="annual interest rate %% (default: HDB base rate or bank low end)")
    parser.add_argument("--tenure", type=int, default=None, help=f"loan tenure years (default: {d['tenure']})")
    parser.add_argument("--holding-years", type=int, default=None, help=f"holding period years (default: {d['holding_years']})")
    parser.add_argument("--appreciation", type=float, default=None, help=f"annual appreciation %% (default: {d['appreciation']})")
    parser.add_argument("--floor-area", type=float, default=None, help=f"floor area sqft (default: {d['floor_area']:,.0f})")
    parser.add_argument("--rental-income", type=float, default=None, help="monthly rent SGD (investment only)")
    parser.add_argument("--investment", action="store_true", default=None, help="non-owner-occupied (investment) usage")
    return parser


def resolve(args: argparse.Namespace, config: dict) -> dict:
    """Resolve values with priority: CLI flag > config.toml > hardcoded default."""
    resolved = {}
    for key, default in DEFAULTS.items():
        cli_val = getattr(args, key, None)
        resolved[key] = cli_val if cli_val is not None else config.get(key, default)
    return resolved


def parse_residency(s: str) -> ResidencyStatus | None:
    """Parse residency (case-insensitive). Empty/none → None."""
    s = str(s or "").strip()
    if not s or s.lower() == "none":
        return None
    for status in ResidencyStatus:
        if status.value.lower() == s.lower():
            return status
    raise ValueError(f"Unknown residency status: {s} (Singaporean, PR or Foreigner)")


def parse_property_type(s: str) -> PropertyType:
    s = str(s).strip()
    for ptype in PropertyType:
        if ptype.value.lower() == s.lower():
            return ptype
    raise ValueError(f"Unknown property type: {s} (HDB, Condo, Landed or EC)")


def default_rate(property_type: PropertyType, reg: RegulatoryConfig) -> float:
    """HDB concessionary rate for HDB flats, otherwise the low end of bank rates."""
    if property_type == PropertyType.HDB:
        return reg.mortgage.hdb_base_interest_rate_pct
    return reg.mortgage.bank_typical_min_pct


def load_regulatory(path: Path | None) -> RegulatoryConfig:
    """Bundled snapshot, or a validated TOML file. Exits on invalid tables."""
    if path is None:
        return SG_2024_CONFIG
    try:
        return load_regulatory_config(path)
    except ConfigError as e:
        print(f"Invalid regulatory config: {e}", file=sys.stderr)
        raise SystemExit(1)


def parse_args(
    description: str,
    add_args_fn: Callable[[argparse.ArgumentParser], None] | None = None,
) -> tuple[dict, RegulatoryConfig, argparse.Namespace]:
    """Parse CLI args, load config and regulatory tables, resolve values.

    Returns (resolved_dict, regulatory_config, namespace). The resolved dict
    carries parsed enums under "residency", "co_buyer_residency" and
    "property_type", a concrete "rate", and a "loan_amount" defaulting to the
    maximum LTV of "price".
    """
    parser = create_parser(description)
    if add_args_fn:
        add_args_fn(parser)
    args = parser.parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    config = load_config(args.config)
    r = resolve(args, config)
    reg = load_regulatory(args.regulatory)
    try:
        r["residency"] = parse_residency(r["residency"]) or ResidencyStatus.SINGAPOREAN
        r["co_buyer_residency"] = parse_residency(r["co_buyer_residency"])
        r["property_type"] = parse_property_type(r["property_type"])
    except ValueError as e:
        print(e, file=sys.stderr)
        raise SystemExit(2)
    if r["rate"] is None:
        r["rate"] = default_rate(r["property_type"], reg)
    if r["loan_amount"] is None:
        ltv = resolve_ltv_rule(reg.ltv_rules, r["property_type"], r["tenure"], r["existing_loans"])
        r["loan_amount"] = r["price"] * ltv.max_ltv_pct / 100
    return r, reg, args
