"""Tests for the cart stores: encoding, self-healing and the storage quota."""

import json

import pytest
from structlog.testing import capture_logs

from checkout.cart.errors import CartStorageError
from checkout.cart.item import CartItem
from checkout.pricing.coupons import AppliedCoupon
from checkout.store import get_cart_store, reset_cart_stores, set_cart_store
from checkout.store.local_adapter import LocalCartStore
from checkout.store.repository_adapter import RepositoryCartStore
from checkout.store.stored_cart import StoredCart
from protean import current_domain

GUEST = "guest:sess-001"
ACCOUNT = "user:cust-001"


def _item(item_id="item-001", product_id="prod-001", quantity=2):
    return CartItem.create(
        item_id=item_id,
        product_id=product_id,
        unit_price=100.0,
        quantity=quantity,
        max_quantity=10,
        shop_id="shop-001",
        shop_name="Handloom House",
    )


class TestLocalCartStore:
    def test_missing_cart_reads_empty(self):
        assert LocalCartStore().read(GUEST) == []

    def test_replace_then_read(self):
        store = LocalCartStore()
        store.replace(GUEST, [_item(), _item("item-002", "prod-002", 1)])

        items = store.read(GUEST)
        assert [item.item_id for item in items] == ["item-001", "item-002"]
        assert items[0].subtotal == 200.0

    def test_payload_is_json_array(self):
        store = LocalCartStore()
        store.replace(GUEST, [_item()])
        payload = json.loads(store.get_raw(GUEST))
        assert isinstance(payload, list)
        assert payload[0]["product_id"] == "prod-001"

    def test_over_quota_write_raises(self):
        store = LocalCartStore(quota=50)
        with pytest.raises(CartStorageError):
            store.replace(GUEST, [_item()])

    def test_over_quota_write_keeps_previous_payload(self):
        store = LocalCartStore(quota=400)
        store.replace(GUEST, [])
        with pytest.raises(CartStorageError):
            store.replace(GUEST, [_item(f"item-{n}", f"prod-{n}") for n in range(5)])
        assert store.get_raw(GUEST) == "[]"


class TestSelfHealing:
    @pytest.mark.parametrize("payload", ["{not json", '{"items": []}', '"cart"', "42", "null"])
    def test_corrupted_payload_resets_to_empty(self, payload):
        store = LocalCartStore()
        store.put_raw(GUEST, payload)

        with capture_logs() as logs:
            assert store.read(GUEST) == []

        assert store.get_raw(GUEST) == "[]"
        assert logs[0]["event"] == "Discarding corrupted cart payload"
        assert logs[0]["log_level"] == "error"
        assert logs[0]["owner_key"] == GUEST

    def test_read_after_heal_is_clean(self):
        store = LocalCartStore()
        store.put_raw(GUEST, "garbage")
        store.read(GUEST)

        with capture_logs() as logs:
            assert store.read(GUEST) == []
        assert logs == []

    def test_bad_elements_are_dropped(self):
        store = LocalCartStore()
        good = _item().to_dict()
        store.put_raw(GUEST, json.dumps([good, "junk", {"product_id": ""}, 7]))

        items = store.read(GUEST)
        assert [item.item_id for item in items] == ["item-001"]

    def test_corrupted_ceiling_is_healed_on_read(self):
        store = LocalCartStore()
        raw = {**_item().to_dict(), "max_quantity": -1}
        store.put_raw(GUEST, json.dumps([raw]))

        items = store.read(GUEST)
        assert items[0].max_quantity == 100


class TestAppliedCoupons:
    def test_missing_coupons_read_empty(self):
        assert LocalCartStore().read_coupons(GUEST) == {}

    def test_replace_then_read(self):
        store = LocalCartStore()
        store.replace_coupons(GUEST, {"shop-001": AppliedCoupon(code="SAVE10", discount_amount=150.0)})

        coupons = store.read_coupons(GUEST)
        assert coupons["shop-001"].code == "SAVE10"
        assert coupons["shop-001"].discount_amount == 150.0

    def test_coupons_count_against_quota(self):
        store = LocalCartStore(quota=40)
        with pytest.raises(CartStorageError):
            store.replace_coupons(GUEST, {"shop-001": AppliedCoupon(code="SAVE10", discount_amount=150.0)})

    @pytest.mark.parametrize("payload", ["{not json", "[]", "42"])
    def test_corrupted_payload_resets_to_empty(self, payload):
        store = LocalCartStore()
        store.entries[store.coupon_key(GUEST)] = payload

        with capture_logs() as logs:
            assert store.read_coupons(GUEST) == {}

        assert store.entries[store.coupon_key(GUEST)] == "{}"
        assert logs[0]["event"] == "Discarding corrupted coupon payload"
        assert logs[0]["log_level"] == "error"

    def test_unreadable_coupon_is_dropped(self):
        store = LocalCartStore()
        store.entries[store.coupon_key(GUEST)] = json.dumps(
            {
                "shop-001": {"code": "SAVE10", "discount_amount": 100.0},
                "shop-002": "junk",
                "shop-003": {"code": "SAVE10", "discount_amount": -5},
            }
        )

        with capture_logs() as logs:
            coupons = store.read_coupons(GUEST)

        assert list(coupons) == ["shop-001"]
        assert [log["shop_id"] for log in logs if log["event"] == "Dropping corrupted applied coupon"] == [
            "shop-002",
            "shop-003",
        ]

    def test_coupons_do_not_touch_the_cart_payload(self):
        store = LocalCartStore()
        store.replace(GUEST, [_item()])
        store.replace_coupons(GUEST, {})
        assert len(store.read(GUEST)) == 1


class TestRepositoryCartStore:
    def test_missing_cart_reads_empty(self):
        assert RepositoryCartStore().read(ACCOUNT) == []

    def test_replace_persists_stored_cart(self):
        store = RepositoryCartStore()
        store.replace(ACCOUNT, [_item()])

        record = current_domain.repository_for(StoredCart).get(ACCOUNT)
        assert json.loads(record.payload)[0]["item_id"] == "item-001"
        assert record.updated_at is not None

    def test_replace_overwrites(self):
        store = RepositoryCartStore()
        store.replace(ACCOUNT, [_item()])
        store.replace(ACCOUNT, [_item(quantity=5)])

        items = store.read(ACCOUNT)
        assert len(items) == 1
        assert items[0].quantity == 5

    def test_corrupted_record_heals(self):
        current_domain.repository_for(StoredCart).add(StoredCart.create(ACCOUNT, "{broken"))

        assert RepositoryCartStore().read(ACCOUNT) == []
        assert current_domain.repository_for(StoredCart).get(ACCOUNT).payload == "[]"

    def test_coupons_live_on_the_stored_cart(self):
        store = RepositoryCartStore()
        store.replace(ACCOUNT, [_item()])
        store.replace_coupons(ACCOUNT, {"shop-001": AppliedCoupon(code="SAVE10", discount_amount=20.0)})

        record = current_domain.repository_for(StoredCart).get(ACCOUNT)
        assert json.loads(record.coupons)["shop-001"]["code"] == "SAVE10"
        assert store.read(ACCOUNT)[0].item_id == "item-001"
        assert store.read_coupons(ACCOUNT)["shop-001"].discount_amount == 20.0

    def test_coupons_before_any_cart(self):
        store = RepositoryCartStore()
        store.replace_coupons(ACCOUNT, {})
        assert store.read(ACCOUNT) == []


class TestStoreFactory:
    def test_guest_owner_uses_local_store(self):
        assert isinstance(get_cart_store(GUEST), LocalCartStore)

    def test_account_owner_uses_repository_store(self):
        assert isinstance(get_cart_store(ACCOUNT), RepositoryCartStore)

    def test_store_is_shared_per_kind(self):
        assert get_cart_store(GUEST) is get_cart_store("guest:sess-002")

    def test_set_and_reset(self):
        custom = LocalCartStore(quota=1000)
        set_cart_store(custom, guest=True)
        assert get_cart_store(GUEST) is custom

        reset_cart_stores()
        assert get_cart_store(GUEST) is not custom
