"""Cart store factory.

Provides get_cart_store() / set_cart_store() to swap implementations:
- LocalCartStore for guest carts (local key/value storage)
- RepositoryCartStore for account carts (domain repository)
"""

from checkout.cart.cart import is_guest_owner
from checkout.store.local_adapter import LocalCartStore
from checkout.store.port import CartStore
from checkout.store.repository_adapter import RepositoryCartStore

_guest_store: CartStore | None = None
_account_store: CartStore | None = None


def get_cart_store(owner_key: str) -> CartStore:
    """Return the store holding ``owner_key``'s cart."""
    global _guest_store, _account_store
    if is_guest_owner(owner_key):
        if _guest_store is None:
            _guest_store = LocalCartStore()
        return _guest_store

    if _account_store is None:
        _account_store = RepositoryCartStore()
    return _account_store


def set_cart_store(store: CartStore, guest: bool = False) -> None:
    """Override the guest or account store (useful for tests)."""
    global _guest_store, _account_store
    if guest:
        _guest_store = store
    else:
        _account_store = store


def reset_cart_stores() -> None:
    """Reset to default stores."""
    global _guest_store, _account_store
    _guest_store = None
    _account_store = None
