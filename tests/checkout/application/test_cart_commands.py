"""Application tests for cart commands processed through the domain."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError

from checkout.cart.coupons import ApplyShopCoupon, RemoveShopCoupon
from checkout.cart.errors import InvalidGuestCart, InvalidItemId, InvalidQuantity
from checkout.cart.items import AddCartItem, RemoveCartItem, UpdateCartItem
from checkout.cart.management import ClearCart, MergeGuestCart
from checkout.cart.mutator import get_cart_mutator
from checkout.store.stored_cart import StoredCart

ACCOUNT = "user:cust-001"
GUEST = "guest:sess-001"


def _add(owner_key, item):
    return current_domain.process(AddCartItem(owner_key=owner_key, item=item), asynchronous=False)


class TestAddCartItemCommand:
    def test_add_item_persists_account_cart(self, candidate):
        cart = _add(ACCOUNT, candidate(quantity=2))

        assert cart.line_count == 1
        record = current_domain.repository_for(StoredCart).get(ACCOUNT)
        assert json.loads(record.payload)[0]["quantity"] == 2

    def test_repeated_add_accumulates(self, candidate):
        _add(ACCOUNT, candidate(quantity=2))
        cart = _add(ACCOUNT, candidate(quantity=3))
        assert cart.items[0].quantity == 5

    def test_guest_cart_stays_out_of_repository(self, candidate):
        _add(GUEST, candidate())
        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(StoredCart).get(GUEST)

    def test_invalid_item_is_rejected(self, candidate):
        with pytest.raises(InvalidQuantity):
            _add(ACCOUNT, candidate(quantity=-1))


class TestUpdateCartItemCommand:
    def test_update_quantity(self, candidate):
        item_id = _add(ACCOUNT, candidate()).items[0].item_id
        cart = current_domain.process(
            UpdateCartItem(owner_key=ACCOUNT, item_id=item_id, quantity=4),
            asynchronous=False,
        )
        assert cart.items[0].quantity == 4
        assert cart.items[0].subtotal == 4000.0

    def test_update_to_zero_removes(self, candidate):
        item_id = _add(ACCOUNT, candidate()).items[0].item_id
        cart = current_domain.process(
            UpdateCartItem(owner_key=ACCOUNT, item_id=item_id, quantity=0),
            asynchronous=False,
        )
        assert cart.is_empty

    def test_unknown_item(self, candidate):
        _add(ACCOUNT, candidate())
        with pytest.raises(InvalidItemId):
            current_domain.process(
                UpdateCartItem(owner_key=ACCOUNT, item_id="missing", quantity=1),
                asynchronous=False,
            )


class TestRemoveAndClearCommands:
    def test_remove_item(self, candidate):
        cart = _add(ACCOUNT, candidate())
        _add(ACCOUNT, candidate(product_id="prod-002"))
        cart = current_domain.process(
            RemoveCartItem(owner_key=ACCOUNT, item_id=cart.items[0].item_id),
            asynchronous=False,
        )
        assert [item.product_id for item in cart.items] == ["prod-002"]

    def test_clear_cart(self, candidate):
        _add(ACCOUNT, candidate())
        cart = current_domain.process(ClearCart(owner_key=ACCOUNT), asynchronous=False)
        assert cart.is_empty
        assert current_domain.repository_for(StoredCart).get(ACCOUNT).payload == "[]"


class TestMergeGuestCartCommand:
    def test_guest_items_move_to_account(self, candidate):
        _add(ACCOUNT, candidate(quantity=1))
        _add(GUEST, candidate(quantity=2))
        _add(GUEST, candidate(product_id="prod-002", shop_id="shop-002"))

        cart = current_domain.process(
            MergeGuestCart(owner_key=ACCOUNT, guest_owner_key=GUEST),
            asynchronous=False,
        )

        assert cart.line_count == 2
        assert cart.find_by_identity("prod-001").quantity == 3
        assert get_cart_mutator().load(GUEST).is_empty

    def test_account_key_is_rejected_as_guest(self, candidate):
        other = "user:cust-002"
        _add(other, candidate(quantity=3))

        with pytest.raises(InvalidGuestCart):
            current_domain.process(MergeGuestCart(owner_key=ACCOUNT, guest_owner_key=other), asynchronous=False)

        assert get_cart_mutator().load(other).items[0].quantity == 3


class TestShopCouponCommands:
    def test_apply_stores_coupon_on_account_cart(self, candidate):
        _add(ACCOUNT, candidate(quantity=2))

        validation = current_domain.process(
            ApplyShopCoupon(owner_key=ACCOUNT, shop_id="shop-001", code="SAVE10"),
            asynchronous=False,
        )

        assert validation.valid is True
        record = current_domain.repository_for(StoredCart).get(ACCOUNT)
        assert json.loads(record.coupons) == {"shop-001": {"code": "SAVE10", "discount_amount": 200.0}}

    def test_rejected_coupon_is_returned(self, candidate):
        _add(ACCOUNT, candidate())

        validation = current_domain.process(
            ApplyShopCoupon(owner_key=ACCOUNT, shop_id="shop-001", code="X" * 60),
            asynchronous=False,
        )

        assert validation.valid is False
        assert get_cart_mutator().load_coupons(ACCOUNT) == {}

    def test_remove(self, candidate):
        _add(GUEST, candidate())
        current_domain.process(ApplyShopCoupon(owner_key=GUEST, shop_id="shop-001", code="SAVE10"), asynchronous=False)

        removed = current_domain.process(RemoveShopCoupon(owner_key=GUEST, shop_id="shop-001"), asynchronous=False)

        assert removed is True
        assert get_cart_mutator().load_coupons(GUEST) == {}
