"""Shop-level coupons.

Coupons attach to a shop group, never to an item. Validation is delegated to
a ``CouponRules`` adapter; the discount it returns is frozen into an
``AppliedCoupon`` and is not re-checked when the cart changes. Re-validation
happens when a submitted order is re-priced.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace

import structlog
from protean.fields import Float, String

from checkout.cart.item import CartItem
from checkout.domain import checkout
from checkout.pricing.calculator import group_subtotal, round_half_up
from checkout.pricing.partition import ShopGroup

logger = structlog.get_logger(__name__)

MAX_COUPON_CODE_LENGTH = 50


@checkout.value_object
class AppliedCoupon:
    code = String(required=True, max_length=MAX_COUPON_CODE_LENGTH)
    discount_amount = Float(required=True, min_value=0.0)


@dataclass(frozen=True)
class CouponValidation:
    """Result of validating a coupon code against one shop's items."""

    valid: bool
    discount_amount: float = 0.0
    error: str | None = None


class CouponRules(ABC):
    """Abstract coupon validation service."""

    @abstractmethod
    def validate(self, code: str, shop_items: Sequence[CartItem], subtotal: float) -> CouponValidation:
        """Decide whether ``code`` applies and how much it takes off."""
        ...


class PercentageCouponRules(CouponRules):
    """Configurable coupon rules that take a percentage off the shop subtotal.

    Without a code table every well-formed code is worth ``default_percent``.
    With a table only the listed codes are accepted.
    """

    def __init__(self, default_percent: float = 10.0, codes: Mapping[str, float] | None = None) -> None:
        self.default_percent = default_percent
        self.codes = {code.upper(): percent for code, percent in (codes or {}).items()}

    def validate(self, code: str, shop_items: Sequence[CartItem], subtotal: float) -> CouponValidation:
        normalized = (code or "").strip().upper()
        if not normalized:
            return CouponValidation(valid=False, error="Coupon code is required")
        if len(normalized) > MAX_COUPON_CODE_LENGTH:
            return CouponValidation(
                valid=False,
                error=f"Coupon code must be no more than {MAX_COUPON_CODE_LENGTH} characters",
            )
        if not shop_items:
            return CouponValidation(valid=False, error="Coupon cannot be applied to an empty shop order")

        if self.codes:
            if normalized not in self.codes:
                return CouponValidation(valid=False, error=f"Coupon {normalized} is not valid")
            percent = self.codes[normalized]
        else:
            percent = self.default_percent

        return CouponValidation(valid=True, discount_amount=round_half_up(subtotal * percent / 100))


_coupon_rules: CouponRules | None = None


def get_coupon_rules() -> CouponRules:
    """Return the active coupon rules. Defaults to PercentageCouponRules."""
    global _coupon_rules
    if _coupon_rules is None:
        _coupon_rules = PercentageCouponRules()
    return _coupon_rules


def set_coupon_rules(rules: CouponRules) -> None:
    """Override the active coupon rules (useful for tests)."""
    global _coupon_rules
    _coupon_rules = rules


def reset_coupon_rules() -> None:
    global _coupon_rules
    _coupon_rules = None


def apply_coupon(
    group: ShopGroup, code: str, rules: CouponRules | None = None
) -> tuple[ShopGroup, CouponValidation]:
    """Validate ``code`` for ``group`` and attach it when accepted.

    A rejected coupon leaves the group unchanged; the reason is in the
    returned validation, never raised.
    """
    rules = rules or get_coupon_rules()
    validation = rules.validate(code, group.items, group_subtotal(group))

    if not validation.valid:
        logger.info("Coupon rejected", shop_id=group.shop_id, code=code, reason=validation.error)
        return group, validation

    coupon = AppliedCoupon(code=code.strip().upper(), discount_amount=validation.discount_amount)
    logger.info(
        "Coupon applied",
        shop_id=group.shop_id,
        code=coupon.code,
        discount_amount=coupon.discount_amount,
    )
    return replace(group, coupon=coupon), validation


def remove_coupon(group: ShopGroup) -> ShopGroup:
    return replace(group, coupon=None)
