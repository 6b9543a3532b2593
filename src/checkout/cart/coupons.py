"""Cart coupon management — commands and handler."""

from protean import handle
from protean.fields import String

from checkout.cart.mutator import get_cart_mutator
from checkout.domain import checkout
from checkout.store.stored_cart import StoredCart


@checkout.command(part_of="StoredCart")
class ApplyShopCoupon:
    """Apply a coupon code to one shop's items in a cart."""

    owner_key = String(required=True, max_length=255)
    shop_id = String(required=True, max_length=255)
    code = String(required=True, max_length=100)


@checkout.command(part_of="StoredCart")
class RemoveShopCoupon:
    owner_key = String(required=True, max_length=255)
    shop_id = String(required=True, max_length=255)


@checkout.command_handler(part_of=StoredCart)
class ManageShopCouponsHandler:
    @handle(ApplyShopCoupon)
    def apply_coupon(self, command):
        return get_cart_mutator().apply_coupon(command.owner_key, command.shop_id, command.code)

    @handle(RemoveShopCoupon)
    def remove_coupon(self, command):
        return get_cart_mutator().remove_coupon(command.owner_key, command.shop_id)
