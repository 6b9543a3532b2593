"""Cart item validation.

Two policies live here and must not be confused:

  - a *new* item (an add-to-cart candidate) that breaks an invariant is
    rejected with a specific input error before anything is written;
  - a *stored* item read back from a cart store is repaired in place when
    its ceiling is corrupted, with a warning, so one bad line never makes
    the whole cart unreadable.
"""

import math
from collections.abc import Mapping
from uuid import uuid4

import structlog
from protean.exceptions import ValidationError
from protean.utils.reflection import declared_fields

from checkout.cart.errors import (
    InvalidItemId,
    InvalidMaxQuantity,
    InvalidPrice,
    InvalidProductId,
    InvalidQuantity,
)
from checkout.cart.item import CartItem
from checkout.config import get_settings

logger = structlog.get_logger(__name__)


def is_finite_number(value) -> bool:
    """True for real ints/floats that are neither NaN nor infinite. Booleans are not numbers."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def default_max_quantity() -> int:
    return get_settings().default_max_quantity


# ---------------------------------------------------------------------------
# Field checks
# ---------------------------------------------------------------------------
def require_product_id(value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidProductId("Product ID must be a non-empty string")
    return value


def require_quantity(value) -> int:
    if not is_finite_number(value) or value <= 0:
        raise InvalidQuantity(f"Quantity must be a positive number, got {value!r}")
    if value != int(value):
        raise InvalidQuantity(f"Quantity must be a whole number, got {value!r}")
    return int(value)


def require_max_quantity(value) -> int:
    if not is_finite_number(value) or value <= 0:
        raise InvalidMaxQuantity(f"Maximum quantity must be a positive number, got {value!r}")
    if value != int(value):
        raise InvalidMaxQuantity(f"Maximum quantity must be a whole number, got {value!r}")
    return int(value)


def require_unit_price(value) -> float:
    if not is_finite_number(value) or value < 0:
        raise InvalidPrice(f"Price must be a non-negative number, got {value!r}")
    return float(value)


def require_discount(value) -> float:
    if value is None:
        return 0.0
    if not is_finite_number(value) or value < 0:
        raise InvalidPrice(f"Discount must be a non-negative number, got {value!r}", field="discount")
    return float(value)


def require_item_id(value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidItemId("Item ID must be a non-empty string")
    return value


# ---------------------------------------------------------------------------
# New items
# ---------------------------------------------------------------------------
def validate_candidate(candidate: Mapping) -> dict:
    """Check an add-to-cart candidate and return its normalised values.

    Raises the specific input error for the first invariant violated.
    """
    if not isinstance(candidate, Mapping):
        raise InvalidProductId("Cart item must be an object with a product ID")

    values = {
        "product_id": require_product_id(candidate.get("product_id")),
        "quantity": require_quantity(candidate.get("quantity")),
    }

    ceiling = candidate.get("max_quantity")
    values["max_quantity"] = default_max_quantity() if ceiling is None else require_max_quantity(ceiling)
    values["unit_price"] = require_unit_price(candidate.get("unit_price"))
    values["discount"] = require_discount(candidate.get("discount"))

    for name in ("variant_id", "product_name", "sku", "shop_id", "shop_name"):
        if candidate.get(name) is not None:
            values[name] = candidate[name]
    values["is_available"] = bool(candidate.get("is_available", True))
    return values


def new_item_id() -> str:
    return str(uuid4())


# ---------------------------------------------------------------------------
# Stored items
# ---------------------------------------------------------------------------
def repair_stored_item(raw) -> CartItem | None:
    """Turn one persisted cart line back into a CartItem.

    A corrupted ceiling is replaced with the default and logged. Lines that
    cannot be trusted at all are dropped (``None``) with a warning.
    """
    if not isinstance(raw, Mapping):
        logger.warning("Dropping malformed stored cart item", item_type=type(raw).__name__)
        return None

    fields = declared_fields(CartItem)
    values = {name: raw[name] for name in fields if name in raw}

    ceiling = values.get("max_quantity")
    if not is_finite_number(ceiling) or ceiling < 1 or ceiling != int(ceiling):
        fallback = default_max_quantity()
        logger.warning(
            "Repairing corrupted max_quantity on stored cart item",
            item_id=values.get("item_id"),
            product_id=values.get("product_id"),
            stored_value=repr(ceiling),
            repaired_value=fallback,
        )
        values["max_quantity"] = fallback
    else:
        values["max_quantity"] = int(ceiling)

    quantity = values.get("quantity")
    if is_finite_number(quantity) and quantity > values["max_quantity"]:
        values["quantity"] = values["max_quantity"]

    if not values.get("item_id"):
        values["item_id"] = new_item_id()

    try:
        require_product_id(values.get("product_id"))
        values["quantity"] = require_quantity(values.get("quantity"))
        values["unit_price"] = require_unit_price(values.get("unit_price"))
        values["discount"] = require_discount(values.get("discount"))
        return CartItem.create(**values)
    except ValidationError as exc:
        logger.warning(
            "Dropping stored cart item that cannot be repaired",
            item_id=values.get("item_id"),
            product_id=values.get("product_id"),
            errors=exc.messages,
        )
        return None
