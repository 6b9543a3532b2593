"""Cart mutations.

The module-level functions are pure: they take a Cart and return a new Cart,
validating before they build anything. ``CartMutator`` wraps them with the
store read and write, and is the only code that ever calls
``CartStore.replace``.

Adding is idempotent by identity: a line is identified by
``(product_id, variant_id)`` and repeated adds converge on the clamped sum of
the requested quantities, never on duplicate lines or a quantity above the
item's ceiling. Guest-cart merging on login reuses the same path.
"""

import threading
import weakref
from collections.abc import Callable, Iterable, Mapping

import structlog

from checkout.cart.cart import Cart, is_guest_owner
from checkout.cart.errors import InvalidGuestCart, InvalidItemId, InvalidQuantity
from checkout.cart.item import CartItem
from checkout.cart.validator import (
    is_finite_number,
    new_item_id,
    require_item_id,
    validate_candidate,
)
from checkout.pricing import coupons as shop_coupons
from checkout.pricing.coupons import AppliedCoupon, CouponRules, CouponValidation
from checkout.pricing.partition import partition

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Pure operations
# ---------------------------------------------------------------------------
def add_item(cart: Cart, candidate: Mapping) -> Cart:
    values = validate_candidate(candidate)

    existing = cart.find_by_identity(values["product_id"], values.get("variant_id"))
    if existing is not None:
        quantity = min(existing.quantity + values["quantity"], existing.max_quantity)
        updated = existing.with_quantity(quantity)
        return cart.with_items(updated if item.item_id == existing.item_id else item for item in cart.items)

    values["quantity"] = min(values["quantity"], values["max_quantity"])
    item = CartItem.create(item_id=new_item_id(), **values)
    return cart.with_items((*cart.items, item))


def update_item(cart: Cart, item_id, quantity) -> Cart:
    """Set a line's quantity; zero or below removes the line."""
    require_item_id(item_id)
    existing = cart.find(item_id)
    if existing is None:
        raise InvalidItemId(f"Item {item_id} is not in the cart")

    if not is_finite_number(quantity):
        raise InvalidQuantity(f"Quantity must be a number, got {quantity!r}")
    if quantity <= 0:
        return remove_item(cart, item_id)
    if quantity != int(quantity):
        raise InvalidQuantity(f"Quantity must be a whole number, got {quantity!r}")

    clamped = max(1, min(int(quantity), existing.max_quantity))
    updated = existing.with_quantity(clamped)
    return cart.with_items(updated if item.item_id == item_id else item for item in cart.items)


def remove_item(cart: Cart, item_id) -> Cart:
    return cart.with_items(item for item in cart.items if item.item_id != item_id)


def merge_items(cart: Cart, guest_items: Iterable) -> Cart:
    """Fold guest lines into ``cart`` exactly as repeated adds would."""
    for guest_item in guest_items:
        candidate = guest_item.to_dict() if isinstance(guest_item, CartItem) else guest_item
        cart = add_item(cart, candidate)
    return cart


def clear(cart: Cart) -> Cart:
    return cart.with_items(())


# ---------------------------------------------------------------------------
# Single writer
# ---------------------------------------------------------------------------
class CartMutator:
    """Applies cart operations against the cart stores.

    Each operation is one read-modify-write held under a per-owner lock, so
    overlapping calls for the same cart are serialised. Operations validate
    before writing; a rejected mutation leaves the store untouched.

    Coupons applied to a shop keep the discount computed when they were
    applied. A coupon is dropped once its shop has no items left in the cart.
    """

    def __init__(self, store_for: Callable | None = None):
        if store_for is None:
            from checkout.store import get_cart_store

            store_for = get_cart_store
        self._store_for = store_for
        # Entries go away once no caller holds the lock
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = weakref.WeakValueDictionary()
        self._guard = threading.Lock()

    def _lock_for(self, owner_key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(owner_key)
            if lock is None:
                lock = threading.Lock()
                self._locks[owner_key] = lock
            return lock

    def load(self, owner_key: str) -> Cart:
        items = self._store_for(owner_key).read(owner_key)
        return Cart(owner_key=owner_key, items=tuple(items))

    def load_coupons(self, owner_key: str) -> dict[str, AppliedCoupon]:
        return self._store_for(owner_key).read_coupons(owner_key)

    def _prune_coupons(self, cart: Cart) -> None:
        store = self._store_for(cart.owner_key)
        applied = store.read_coupons(cart.owner_key)
        shop_ids = {item.shop_id for item in cart.items}
        kept = {shop_id: coupon for shop_id, coupon in applied.items() if shop_id in shop_ids}
        if len(kept) != len(applied):
            store.replace_coupons(cart.owner_key, kept)

    def _apply(self, owner_key: str, operation: Callable[[Cart], Cart]) -> Cart:
        with self._lock_for(owner_key):
            cart = self.load(owner_key)
            result = operation(cart)
            self._store_for(owner_key).replace(owner_key, result.items)
            self._prune_coupons(result)
            return result

    def add_item(self, owner_key: str, candidate: Mapping) -> Cart:
        cart = self._apply(owner_key, lambda cart: add_item(cart, candidate))
        logger.info(
            "Added item to cart",
            owner_key=owner_key,
            product_id=candidate.get("product_id"),
            line_count=cart.line_count,
        )
        return cart

    def update_item(self, owner_key: str, item_id, quantity) -> Cart:
        return self._apply(owner_key, lambda cart: update_item(cart, item_id, quantity))

    def remove_item(self, owner_key: str, item_id) -> Cart:
        return self._apply(owner_key, lambda cart: remove_item(cart, item_id))

    def clear(self, owner_key: str) -> Cart:
        cart = self._apply(owner_key, clear)
        logger.info("Cleared cart", owner_key=owner_key)
        return cart

    def merge_guest_cart(self, owner_key: str, guest_items: Iterable) -> Cart:
        guest_items = list(guest_items)
        cart = self._apply(owner_key, lambda cart: merge_items(cart, guest_items))
        logger.info(
            "Merged guest items into cart",
            owner_key=owner_key,
            items_merged_count=len(guest_items),
        )
        return cart

    def adopt_guest_cart(self, guest_key: str, user_key: str) -> Cart:
        """Merge a guest cart into an account cart on login, then empty the guest cart.

        Coupons applied to the guest cart are discarded.
        """
        if not isinstance(guest_key, str) or not is_guest_owner(guest_key):
            raise InvalidGuestCart(f"{guest_key!r} is not a guest cart")
        if guest_key == user_key:
            raise InvalidGuestCart("A guest cart cannot be merged into itself")

        first, second = sorted((guest_key, user_key))
        with self._lock_for(first), self._lock_for(second):
            guest_items = self._store_for(guest_key).read(guest_key)
            cart = merge_items(self.load(user_key), guest_items)
            self._store_for(user_key).replace(user_key, cart.items)
            self._store_for(guest_key).replace(guest_key, ())
            self._prune_coupons(Cart(owner_key=guest_key))

        logger.info(
            "Adopted guest cart",
            guest_key=guest_key,
            owner_key=user_key,
            items_merged_count=len(guest_items),
        )
        return cart

    def apply_coupon(
        self, owner_key: str, shop_id: str, code: str, rules: CouponRules | None = None
    ) -> CouponValidation:
        """Validate ``code`` against one shop's items and keep it with the cart when accepted.

        The accepted discount is stored as computed now. Re-applying replaces
        the shop's previous coupon; a rejection leaves it in place.
        """
        with self._lock_for(owner_key):
            cart = self.load(owner_key)
            group = next((group for group in partition(cart.items) if group.shop_id == shop_id), None)
            if group is None:
                return CouponValidation(valid=False, error=f"Shop {shop_id} has no items in the cart")

            group, validation = shop_coupons.apply_coupon(group, code, rules)
            if validation.valid:
                store = self._store_for(owner_key)
                applied = store.read_coupons(owner_key)
                applied[shop_id] = group.coupon
                store.replace_coupons(owner_key, applied)
            return validation

    def remove_coupon(self, owner_key: str, shop_id: str) -> bool:
        """Drop the coupon applied to ``shop_id``. Returns whether one was applied."""
        with self._lock_for(owner_key):
            store = self._store_for(owner_key)
            applied = store.read_coupons(owner_key)
            if applied.pop(shop_id, None) is None:
                return False
            store.replace_coupons(owner_key, applied)

        logger.info("Removed coupon", owner_key=owner_key, shop_id=shop_id)
        return True


_cart_mutator: CartMutator | None = None


def get_cart_mutator() -> CartMutator:
    """Return the process-wide cart writer."""
    global _cart_mutator
    if _cart_mutator is None:
        _cart_mutator = CartMutator()
    return _cart_mutator


def reset_cart_mutator() -> None:
    """Reset the cart writer singleton (useful for testing)."""
    global _cart_mutator
    _cart_mutator = None
