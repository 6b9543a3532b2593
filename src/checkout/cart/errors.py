"""Cart error taxonomy.

Input errors reject a specific operation and are always raised to the
caller. They subclass Protean's ``ValidationError`` so the API layer maps
them to HTTP 400 like every other domain validation failure, and they carry
the usual ``{field: [message]}`` payload in ``.messages``.
"""

from protean.exceptions import ValidationError


class CartInputError(ValidationError):
    """A cart mutation request violated an item invariant."""

    field = "item"

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        super().__init__({field or self.field: [message]})


class InvalidProductId(CartInputError):
    field = "product_id"


class InvalidQuantity(CartInputError):
    field = "quantity"


class InvalidMaxQuantity(CartInputError):
    field = "max_quantity"


class InvalidPrice(CartInputError):
    field = "unit_price"


class InvalidItemId(CartInputError):
    field = "item_id"


class InvalidGuestCart(CartInputError):
    field = "guest_owner_key"


class CartStorageError(Exception):
    """The backing store refused to persist a cart."""

    def __init__(self, owner_key: str, reason: str):
        self.owner_key = owner_key
        self.reason = reason
        super().__init__(f"Could not store cart for {owner_key}: {reason}")
