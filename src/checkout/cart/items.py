"""Cart item management — commands and handler."""

from protean import handle
from protean.fields import Dict, Float, String

from checkout.cart.mutator import get_cart_mutator
from checkout.domain import checkout
from checkout.store.stored_cart import StoredCart


@checkout.command(part_of="StoredCart")
class AddCartItem:
    owner_key = String(required=True, max_length=255)
    item = Dict(required=True)  # Candidate: product_id, quantity, unit_price, shop_id, ...


@checkout.command(part_of="StoredCart")
class UpdateCartItem:
    owner_key = String(required=True, max_length=255)
    item_id = String(required=True, max_length=64)
    quantity = Float(required=True)  # Zero or below removes the line


@checkout.command(part_of="StoredCart")
class RemoveCartItem:
    owner_key = String(required=True, max_length=255)
    item_id = String(required=True, max_length=64)


@checkout.command_handler(part_of=StoredCart)
class ManageCartItemsHandler:
    @handle(AddCartItem)
    def add_cart_item(self, command):
        return get_cart_mutator().add_item(command.owner_key, command.item)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        return get_cart_mutator().update_item(command.owner_key, command.item_id, command.quantity)

    @handle(RemoveCartItem)
    def remove_cart_item(self, command):
        return get_cart_mutator().remove_item(command.owner_key, command.item_id)
