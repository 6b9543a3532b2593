"""Cart management — commands and handler.

Handles emptying a cart and adopting a guest cart when the shopper logs in.
"""

from protean import handle
from protean.fields import String

from checkout.cart.mutator import get_cart_mutator
from checkout.domain import checkout
from checkout.store.stored_cart import StoredCart


@checkout.command(part_of="StoredCart")
class ClearCart:
    owner_key = String(required=True, max_length=255)


@checkout.command(part_of="StoredCart")
class MergeGuestCart:
    """Merge a guest session's cart into an account cart and empty the guest cart."""

    owner_key = String(required=True, max_length=255)
    guest_owner_key = String(required=True, max_length=255)


@checkout.command_handler(part_of=StoredCart)
class ManageCartHandler:
    @handle(ClearCart)
    def clear_cart(self, command):
        return get_cart_mutator().clear(command.owner_key)

    @handle(MergeGuestCart)
    def merge_guest_cart(self, command):
        return get_cart_mutator().adopt_guest_cart(command.guest_owner_key, command.owner_key)
