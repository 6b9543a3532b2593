"""Shipping address validation.

Validation failures are returned as an ``AddressValidation`` listing every
field error at once; only a missing address altogether raises.
"""

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field

from checkout.address.postal import state_required, validate_postal_code
from checkout.config import get_settings

LINE_MAX_LENGTH = 200
LOCALITY_MAX_LENGTH = 100

ADDRESS_FIELDS = ("line1", "line2", "landmark", "city", "state", "postal_code", "country")


@dataclass(frozen=True)
class Address:
    line1: str
    city: str
    postal_code: str
    country: str
    state: str | None = None
    line2: str | None = None
    landmark: str | None = None


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


@dataclass(frozen=True)
class AddressValidation:
    is_valid: bool
    errors: list[FieldError] = field(default_factory=list)

    def messages(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for error in self.errors:
            grouped.setdefault(error.field, []).append(error.message)
        return grouped


def _as_mapping(address) -> Mapping:
    if address is None:
        raise ValueError("Address is required")
    if isinstance(address, Address):
        return asdict(address)
    if not isinstance(address, Mapping):
        raise TypeError("Address must be an object")
    return address


def _text(values: Mapping, name: str) -> str:
    value = values.get(name)
    return value.strip() if isinstance(value, str) else ""


def validate_address(address) -> AddressValidation:
    values = _as_mapping(address)
    errors: list[FieldError] = []

    def check_length(name, label, limit):
        if len(_text(values, name)) > limit:
            errors.append(FieldError(name, f"{label} must be no more than {limit} characters"))

    if not _text(values, "line1"):
        errors.append(FieldError("line1", "Address line 1 is required"))
    check_length("line1", "Address line 1", LINE_MAX_LENGTH)
    check_length("line2", "Address line 2", LINE_MAX_LENGTH)
    check_length("landmark", "Landmark", LINE_MAX_LENGTH)

    if not _text(values, "city"):
        errors.append(FieldError("city", "City is required"))
    check_length("city", "City", LOCALITY_MAX_LENGTH)

    country = _text(values, "country").upper()
    if not country:
        errors.append(FieldError("country", "Country is required"))
    elif len(country) != 2 or not country.isalpha():
        errors.append(FieldError("country", "Country must be a two-letter country code"))

    if state_required(country) and not _text(values, "state"):
        errors.append(FieldError("state", "State/Province is required"))
    check_length("state", "State/Province", LOCALITY_MAX_LENGTH)

    postal = validate_postal_code(values.get("postal_code"), country)
    if not postal.is_valid:
        errors.append(FieldError("postal_code", postal.error))

    return AddressValidation(is_valid=not errors, errors=errors)


def destination_country(address_or_country) -> str:
    """Upper-cased country of an address or bare country code; empty when absent."""
    if isinstance(address_or_country, str):
        if not address_or_country.strip():
            raise ValueError("Country code is required")
        return address_or_country.strip().upper()

    country = _as_mapping(address_or_country).get("country")
    return country.strip().upper() if isinstance(country, str) else ""


def is_international_address(address_or_country) -> bool:
    """True when the destination country differs from the home country.

    Accepts an address or a bare country code. An address without a country
    is treated as domestic.
    """
    country = destination_country(address_or_country)
    if not country:
        return False
    return country != get_settings().home_country.upper()


def normalize_address(address) -> Address:
    """Trim every field and upper-case the country code."""
    values = _as_mapping(address)
    cleaned = {
        name: values[name].strip() if isinstance(values.get(name), str) else values.get(name)
        for name in ADDRESS_FIELDS
    }
    cleaned["country"] = (cleaned["country"] or "").upper()
    for name in ("line1", "city", "postal_code"):
        cleaned[name] = cleaned[name] or ""
    return Address(**cleaned)
