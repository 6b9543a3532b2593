"""Shop partitioner — groups cart items into per-shop order groups.

Groups are derived views, rebuilt on every pricing pass and never stored.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from checkout.cart.item import CartItem

UNKNOWN_SHOP_NAME = "Unknown Shop"


@dataclass(frozen=True)
class ShopGroup:
    shop_id: str
    shop_name: str
    items: tuple[CartItem, ...] = field(default_factory=tuple)
    coupon: object | None = None  # AppliedCoupon

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)


def partition(items: Iterable[CartItem], coupons: Mapping | None = None) -> list[ShopGroup]:
    """Group ``items`` by shop, preserving first-seen shop order and item order."""
    coupons = coupons or {}
    grouped: dict[str, list[CartItem]] = {}
    names: dict[str, str] = {}

    for item in items:
        if item.shop_id not in grouped:
            grouped[item.shop_id] = []
            names[item.shop_id] = item.shop_name or UNKNOWN_SHOP_NAME
        grouped[item.shop_id].append(item)

    return [
        ShopGroup(
            shop_id=shop_id,
            shop_name=names[shop_id],
            items=tuple(shop_items),
            coupon=coupons.get(shop_id),
        )
        for shop_id, shop_items in grouped.items()
    ]
