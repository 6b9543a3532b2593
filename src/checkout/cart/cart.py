"""Cart value — an ordered sequence of items owned by one principal.

A cart is never held in an ambient "current cart" object: every operation
receives a Cart and returns a new one. The owner key is opaque; the helpers
below build the keys used for guest sessions and authenticated accounts.
"""

from dataclasses import dataclass, field

from checkout.cart.item import CartItem

GUEST_PREFIX = "guest:"
USER_PREFIX = "user:"


def guest_owner(session_id: str) -> str:
    return f"{GUEST_PREFIX}{session_id}"


def user_owner(user_id: str) -> str:
    return f"{USER_PREFIX}{user_id}"


def is_guest_owner(owner_key: str) -> bool:
    return owner_key.startswith(GUEST_PREFIX)


@dataclass(frozen=True)
class Cart:
    owner_key: str
    items: tuple[CartItem, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def line_count(self) -> int:
        return len(self.items)

    @property
    def item_count(self) -> int:
        """Total number of units across all lines."""
        return sum(item.quantity for item in self.items)

    @property
    def unavailable_items(self) -> tuple[CartItem, ...]:
        return tuple(item for item in self.items if not item.is_available)

    def find(self, item_id: str) -> CartItem | None:
        return next((item for item in self.items if item.item_id == item_id), None)

    def find_by_identity(self, product_id: str, variant_id: str | None = None) -> CartItem | None:
        key = (product_id, variant_id or None)
        return next((item for item in self.items if item.line_key == key), None)

    def with_items(self, items) -> "Cart":
        return Cart(owner_key=self.owner_key, items=tuple(items))
