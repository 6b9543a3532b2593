"""Pricing calculator — the single computation path for shop and cart totals.

Cart summaries, the checkout preview and server-side re-pricing of a
submitted order all call ``price_cart``; nothing else derives a total.

Per shop group:

    subtotal   = sum(unit_price * quantity)
    discount   = applied coupon amount, or 0
    shipping   = 0 if subtotal >= free_shipping_threshold else flat_shipping_fee
    tax        = round_half_up(subtotal * tax_rate)      (pre-discount subtotal)
    shop_total = max(0, subtotal + shipping + tax - discount)
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from checkout.config import get_settings
from checkout.pricing.partition import ShopGroup


def round_half_up(amount: float, places: int = 0) -> float:
    """Round to ``places`` decimals with halves rounded up."""
    quantize_str = "1" if places == 0 else "0." + "0" * places
    return float(Decimal(str(amount)).quantize(Decimal(quantize_str), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class PricingConstants:
    tax_rate: float = 0.18
    free_shipping_threshold: float = 5000.0
    flat_shipping_fee: float = 100.0

    @classmethod
    def from_settings(cls) -> "PricingConstants":
        settings = get_settings()
        return cls(
            tax_rate=settings.tax_rate,
            free_shipping_threshold=settings.free_shipping_threshold,
            flat_shipping_fee=settings.flat_shipping_fee,
        )


@dataclass(frozen=True)
class ShopPricing:
    shop_id: str
    shop_name: str
    subtotal: float
    discount: float
    shipping: float
    tax: float
    shop_total: float


@dataclass(frozen=True)
class CartPricing:
    shops: tuple[ShopPricing, ...]
    grand_total: float

    def for_shop(self, shop_id: str) -> ShopPricing | None:
        return next((shop for shop in self.shops if shop.shop_id == shop_id), None)


def group_subtotal(group: ShopGroup) -> float:
    return sum(item.unit_price * item.quantity for item in group.items)


def price_shop_group(group: ShopGroup, constants: PricingConstants | None = None) -> ShopPricing:
    constants = constants or PricingConstants.from_settings()

    subtotal = group_subtotal(group)
    discount = group.coupon.discount_amount if group.coupon is not None else 0.0
    shipping = 0.0 if subtotal >= constants.free_shipping_threshold else constants.flat_shipping_fee
    tax = round_half_up(Decimal(str(subtotal)) * Decimal(str(constants.tax_rate)))
    shop_total = max(0.0, subtotal + shipping + tax - discount)

    return ShopPricing(
        shop_id=group.shop_id,
        shop_name=group.shop_name,
        subtotal=subtotal,
        discount=discount,
        shipping=shipping,
        tax=tax,
        shop_total=shop_total,
    )


def price_cart(groups: Iterable[ShopGroup], constants: PricingConstants | None = None) -> CartPricing:
    constants = constants or PricingConstants.from_settings()
    shops = tuple(price_shop_group(group, constants) for group in groups)
    return CartPricing(shops=shops, grand_total=sum((shop.shop_total for shop in shops), 0.0))
