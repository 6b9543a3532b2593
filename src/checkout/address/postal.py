"""Postal code rules per country.

Countries without an entry in ``POSTAL_CODE_RULES`` accept any non-empty
postal code and do not require a state.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

DEFAULT_POSTAL_CODE_NAME = "Postal Code"

# PayPal merchant countries accepted at checkout
PAYPAL_SUPPORTED_COUNTRIES = (
    "US", "GB", "CA", "AU", "DE", "FR", "IT", "ES", "NL", "BE",
    "AT", "CH", "SE", "NO", "DK", "FI", "IE", "PT", "PL", "NZ",
    "JP", "SG", "HK", "MX", "BR", "IN", "AE", "IL",
)  # fmt: skip


def _format_us_zip(code: str) -> str:
    if re.fullmatch(r"\d{9}", code):
        return f"{code[:5]}-{code[5:]}"
    return code


def _format_ca_postal(code: str) -> str:
    if re.fullmatch(r"[A-Z]\d[A-Z]\d[A-Z]\d", code):
        return f"{code[:3]} {code[3:]}"
    return code


@dataclass(frozen=True)
class PostalCodeRule:
    pattern: re.Pattern
    label: str
    state_required: bool = False
    formatter: Callable[[str], str] | None = None


POSTAL_CODE_RULES: dict[str, PostalCodeRule] = {
    "IN": PostalCodeRule(re.compile(r"^\d{6}$"), "PIN Code", state_required=True),
    "US": PostalCodeRule(re.compile(r"^\d{5}(-\d{4})?$"), "ZIP Code", state_required=True, formatter=_format_us_zip),
    "GB": PostalCodeRule(re.compile(r"^[A-Z]{1,2}\d[A-Z\d]? ?\d[A-Z]{2}$"), "Postcode"),
    "CA": PostalCodeRule(
        re.compile(r"^[A-Z]\d[A-Z] \d[A-Z]\d$"), "Postal Code", state_required=True, formatter=_format_ca_postal
    ),
    "AU": PostalCodeRule(re.compile(r"^\d{4}$"), "Postcode", state_required=True),
}


@dataclass(frozen=True)
class PostalCodeValidation:
    is_valid: bool
    error: str | None = None


def _country(country) -> str:
    return country.strip().upper() if isinstance(country, str) else ""


def postal_code_name(country) -> str:
    """Human label for a country's postal code ("PIN Code", "ZIP Code", ...)."""
    rule = POSTAL_CODE_RULES.get(_country(country))
    return rule.label if rule else DEFAULT_POSTAL_CODE_NAME


def state_required(country) -> bool:
    rule = POSTAL_CODE_RULES.get(_country(country))
    return bool(rule and rule.state_required)


def validate_postal_code(code, country) -> PostalCodeValidation:
    """Check ``code`` against the country's format. Matching ignores case."""
    label = postal_code_name(country)
    if not isinstance(code, str) or not code.strip():
        return PostalCodeValidation(is_valid=False, error=f"{label} is required")

    rule = POSTAL_CODE_RULES.get(_country(country))
    if rule is None:
        return PostalCodeValidation(is_valid=True)

    if not rule.pattern.match(code.strip().upper()):
        return PostalCodeValidation(is_valid=False, error=f"Invalid {label} format")
    return PostalCodeValidation(is_valid=True)


def format_postal_code(code, country) -> str:
    """Normalise a postal code for display: trimmed, upper case, country separators added."""
    if not isinstance(code, str):
        return ""
    normalized = code.strip().upper()
    rule = POSTAL_CODE_RULES.get(_country(country))
    if rule and rule.formatter:
        return rule.formatter(normalized)
    return normalized


def is_paypal_eligible_country(country) -> bool:
    if not isinstance(country, str) or not country.strip():
        raise ValueError("Country code is required and must be a string")
    return country.strip().upper() in PAYPAL_SUPPORTED_COUNTRIES
