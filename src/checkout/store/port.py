"""Cart store port (abstract interface).

A cart store keeps one JSON array of cart items per owner key, and beside it
one JSON object of the coupons applied to that cart, keyed by shop ID.
Adapters only provide the raw load/save primitives; decoding, self-healing
and encoding are implemented once here so every backing medium behaves
identically.
"""

import json
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping

import structlog
from protean.exceptions import ValidationError

from checkout.cart.item import CartItem
from checkout.cart.validator import repair_stored_item
from checkout.pricing.coupons import AppliedCoupon

logger = structlog.get_logger(__name__)

EMPTY_PAYLOAD = "[]"
EMPTY_COUPONS = "{}"


def _decode(payload):
    try:
        return json.loads(payload)
    except (TypeError, ValueError):
        return None


class CartStore(ABC):
    """Abstract cart store."""

    @abstractmethod
    def _load(self, owner_key: str) -> str | None:
        """Return the raw stored payload, or None when nothing is stored."""
        ...

    @abstractmethod
    def _save(self, owner_key: str, payload: str) -> None:
        """Persist the raw payload, overwriting whatever was stored."""
        ...

    @abstractmethod
    def _load_coupons(self, owner_key: str) -> str | None:
        ...

    @abstractmethod
    def _save_coupons(self, owner_key: str, payload: str) -> None:
        ...

    def read(self, owner_key: str) -> list[CartItem]:
        """Decode the stored cart, healing corrupted payloads instead of raising."""
        payload = self._load(owner_key)
        if payload is None:
            return []

        decoded = _decode(payload)
        if not isinstance(decoded, list):
            logger.error(
                "Discarding corrupted cart payload",
                owner_key=owner_key,
                payload_type=type(decoded).__name__ if decoded is not None else type(payload).__name__,
            )
            self._save(owner_key, EMPTY_PAYLOAD)
            return []

        items = []
        for raw in decoded:
            item = repair_stored_item(raw)
            if item is not None:
                items.append(item)
        return items

    def replace(self, owner_key: str, items: Iterable[CartItem]) -> None:
        """Overwrite the stored cart with ``items``."""
        payload = json.dumps([item.to_dict() for item in items])
        self._save(owner_key, payload)

    def read_coupons(self, owner_key: str) -> dict[str, AppliedCoupon]:
        """Decode the coupons applied to the cart, keyed by shop ID.

        A payload that is not a JSON object is reset; a single unreadable
        coupon is dropped. Both are logged.
        """
        payload = self._load_coupons(owner_key)
        if payload is None:
            return {}

        decoded = _decode(payload)
        if not isinstance(decoded, dict):
            logger.error(
                "Discarding corrupted coupon payload",
                owner_key=owner_key,
                payload_type=type(decoded).__name__ if decoded is not None else type(payload).__name__,
            )
            self._save_coupons(owner_key, EMPTY_COUPONS)
            return {}

        coupons = {}
        for shop_id, raw in decoded.items():
            try:
                coupons[shop_id] = AppliedCoupon(**raw)
            except (TypeError, ValidationError):
                logger.warning("Dropping corrupted applied coupon", owner_key=owner_key, shop_id=shop_id)
        return coupons

    def replace_coupons(self, owner_key: str, coupons: Mapping[str, AppliedCoupon]) -> None:
        payload = json.dumps({shop_id: coupon.to_dict() for shop_id, coupon in coupons.items()})
        self._save_coupons(owner_key, payload)
