"""Account cart store backed by the domain repository."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from checkout.store.port import CartStore
from checkout.store.stored_cart import StoredCart


class RepositoryCartStore(CartStore):
    """Persists each account cart as a StoredCart aggregate."""

    def _find(self, owner_key: str) -> StoredCart | None:
        try:
            return current_domain.repository_for(StoredCart).get(owner_key)
        except ObjectNotFoundError:
            return None

    def _load(self, owner_key: str) -> str | None:
        record = self._find(owner_key)
        return record.payload if record is not None else None

    def _save(self, owner_key: str, payload: str) -> None:
        record = self._find(owner_key)
        if record is None:
            record = StoredCart.create(owner_key, payload=payload)
        else:
            record.overwrite(payload)
        current_domain.repository_for(StoredCart).add(record)

    def _load_coupons(self, owner_key: str) -> str | None:
        record = self._find(owner_key)
        return record.coupons if record is not None else None

    def _save_coupons(self, owner_key: str, payload: str) -> None:
        record = self._find(owner_key)
        if record is None:
            record = StoredCart.create(owner_key, coupons=payload)
        else:
            record.overwrite_coupons(payload)
        current_domain.repository_for(StoredCart).add(record)
