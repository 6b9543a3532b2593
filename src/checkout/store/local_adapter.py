"""In-process key/value cart store for guest carts.

Stands in for the browser's local storage: a flat mapping of key to JSON
string with a byte quota. Writes over quota fail with ``CartStorageError``
the way a full local storage refuses a write.
"""

from checkout.cart.errors import CartStorageError
from checkout.config import get_settings
from checkout.store.port import CartStore

STORAGE_KEY_PREFIX = "cart:"
COUPON_KEY_PREFIX = "coupons:"


class LocalCartStore(CartStore):
    """Dictionary-backed cart store with a storage quota."""

    def __init__(self, quota: int | None = None) -> None:
        self.quota: int = get_settings().guest_storage_quota if quota is None else quota
        self.entries: dict[str, str] = {}

    @staticmethod
    def storage_key(owner_key: str) -> str:
        return f"{STORAGE_KEY_PREFIX}{owner_key}"

    @staticmethod
    def coupon_key(owner_key: str) -> str:
        return f"{COUPON_KEY_PREFIX}{owner_key}"

    def used_bytes(self) -> int:
        return sum(len(key) + len(value.encode("utf-8")) for key, value in self.entries.items())

    def _write(self, owner_key: str, key: str, payload: str) -> None:
        current = self.entries.get(key)
        released = len(key) + len(current.encode("utf-8")) if current is not None else 0
        required = self.used_bytes() - released + len(key) + len(payload.encode("utf-8"))
        if required > self.quota:
            raise CartStorageError(owner_key, f"storage quota of {self.quota} bytes exceeded")
        self.entries[key] = payload

    def _load(self, owner_key: str) -> str | None:
        return self.entries.get(self.storage_key(owner_key))

    def _save(self, owner_key: str, payload: str) -> None:
        self._write(owner_key, self.storage_key(owner_key), payload)

    def _load_coupons(self, owner_key: str) -> str | None:
        return self.entries.get(self.coupon_key(owner_key))

    def _save_coupons(self, owner_key: str, payload: str) -> None:
        self._write(owner_key, self.coupon_key(owner_key), payload)

    def put_raw(self, owner_key: str, payload) -> None:
        """Write a payload without any encoding (used to simulate tampered storage)."""
        self.entries[self.storage_key(owner_key)] = payload

    def get_raw(self, owner_key: str):
        return self.entries.get(self.storage_key(owner_key))
