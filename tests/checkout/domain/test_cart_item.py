"""Tests for the CartItem value object and Cart value."""

import pytest
from protean.exceptions import ValidationError

from checkout.cart.cart import Cart, guest_owner, is_guest_owner, user_owner
from checkout.cart.item import CartItem


def _item(**overrides):
    values = {
        "item_id": "item-001",
        "product_id": "prod-001",
        "unit_price": 250.0,
        "quantity": 2,
        "max_quantity": 10,
        "shop_id": "shop-001",
        "shop_name": "Handloom House",
    }
    values.update(overrides)
    return CartItem.create(**values)


class TestCartItemCreation:
    def test_subtotal_is_derived(self):
        item = _item(unit_price=250.0, quantity=3)
        assert item.subtotal == 750.0

    def test_total_subtracts_discount(self):
        item = _item(unit_price=250.0, quantity=2, discount=50.0)
        assert item.total == 450.0

    def test_discount_defaults_to_zero(self):
        item = _item()
        assert item.discount == 0.0
        assert item.total == item.subtotal

    def test_available_by_default(self):
        assert _item().is_available is True

    def test_quantity_above_ceiling_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _item(quantity=11, max_quantity=10)
        assert "quantity" in exc.value.messages

    def test_shop_is_required(self):
        with pytest.raises(ValidationError):
            _item(shop_id=None)


class TestWithQuantity:
    def test_recomputes_totals(self):
        item = _item(unit_price=100.0, quantity=1, discount=10.0)
        updated = item.with_quantity(4)
        assert updated.quantity == 4
        assert updated.subtotal == 400.0
        assert updated.total == 390.0

    def test_keeps_identity(self):
        item = _item(variant_id="var-red")
        updated = item.with_quantity(3)
        assert updated.item_id == item.item_id
        assert updated.line_key == ("prod-001", "var-red")

    def test_original_is_unchanged(self):
        item = _item(quantity=2)
        item.with_quantity(5)
        assert item.quantity == 2


class TestDisplayFlags:
    def test_has_discount(self):
        assert _item(discount=5.0).has_discount is True
        assert _item().has_discount is False

    def test_can_increment_below_ceiling(self):
        assert _item(quantity=2, max_quantity=10).can_increment is True
        assert _item(quantity=10, max_quantity=10).can_increment is False

    def test_cannot_increment_unavailable_item(self):
        assert _item(is_available=False).can_increment is False

    def test_can_decrement_above_one(self):
        assert _item(quantity=2).can_decrement is True
        assert _item(quantity=1).can_decrement is False

    def test_low_stock(self):
        assert _item(quantity=1, max_quantity=3).is_low_stock is True
        assert _item(quantity=1, max_quantity=10).is_low_stock is False

    def test_out_of_stock(self):
        item = _item(is_available=False, max_quantity=3)
        assert item.is_out_of_stock is True
        assert item.is_low_stock is False


class TestCart:
    def test_owner_keys(self):
        assert guest_owner("sess-1") == "guest:sess-1"
        assert user_owner("cust-1") == "user:cust-1"
        assert is_guest_owner("guest:sess-1") is True
        assert is_guest_owner("user:cust-1") is False

    def test_empty_cart(self):
        cart = Cart(owner_key="user:cust-1")
        assert cart.is_empty
        assert cart.item_count == 0
        assert cart.line_count == 0

    def test_item_count_sums_quantities(self):
        cart = Cart(
            owner_key="user:cust-1",
            items=(_item(quantity=2), _item(item_id="item-002", product_id="prod-002", quantity=3)),
        )
        assert cart.line_count == 2
        assert cart.item_count == 5

    def test_find_by_identity_distinguishes_variants(self):
        red = _item(variant_id="var-red")
        blue = _item(item_id="item-002", variant_id="var-blue")
        cart = Cart(owner_key="user:cust-1", items=(red, blue))

        assert cart.find_by_identity("prod-001", "var-blue").item_id == "item-002"
        assert cart.find_by_identity("prod-001") is None

    def test_find_by_item_id(self):
        cart = Cart(owner_key="user:cust-1", items=(_item(),))
        assert cart.find("item-001") is not None
        assert cart.find("missing") is None

    def test_unavailable_items(self):
        cart = Cart(
            owner_key="user:cust-1",
            items=(_item(), _item(item_id="item-002", product_id="prod-002", is_available=False)),
        )
        assert [item.item_id for item in cart.unavailable_items] == ["item-002"]
