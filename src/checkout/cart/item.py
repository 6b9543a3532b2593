"""CartItem value object — one line in a shopper's cart.

Items are immutable: quantity changes produce a new item whose subtotal and
total are derived again from unit price, quantity and discount. Nothing ever
stores a total independently of its inputs.
"""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, Integer, String

from checkout.domain import checkout

# Items whose ceiling is at or below this count are flagged as low stock
LOW_STOCK_THRESHOLD = 5


@checkout.value_object
class CartItem:
    item_id = String(required=True, max_length=64)
    product_id = String(required=True, max_length=255)
    variant_id = String(max_length=255)
    product_name = String(max_length=255)
    sku = String(max_length=50)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    max_quantity = Integer(required=True, min_value=1)
    discount = Float(default=0.0, min_value=0.0)
    subtotal = Float(default=0.0)
    total = Float(default=0.0)
    shop_id = String(required=True, max_length=255)
    shop_name = String(max_length=255)
    is_available = Boolean(default=True)

    @invariant.post
    def quantity_must_not_exceed_ceiling(self):
        if self.quantity is not None and self.max_quantity is not None and self.quantity > self.max_quantity:
            raise ValidationError(
                {"quantity": [f"Quantity {self.quantity} exceeds available stock of {self.max_quantity}"]}
            )

    @classmethod
    def create(cls, **values):
        """Build an item, deriving subtotal and total from their inputs."""
        unit_price = float(values["unit_price"])
        quantity = int(values["quantity"])
        discount = float(values.get("discount") or 0.0)
        subtotal = unit_price * quantity
        return cls(
            **{
                **values,
                "unit_price": unit_price,
                "quantity": quantity,
                "discount": discount,
                "subtotal": subtotal,
                "total": subtotal - discount,
            }
        )

    def with_quantity(self, quantity: int):
        """Return a copy of this item holding ``quantity`` units."""
        return CartItem.create(**{**self.to_dict(), "quantity": quantity})

    @property
    def line_key(self) -> tuple[str, str | None]:
        return (self.product_id, self.variant_id or None)

    @property
    def has_discount(self) -> bool:
        return (self.discount or 0.0) > 0

    @property
    def is_out_of_stock(self) -> bool:
        return not self.is_available

    @property
    def is_low_stock(self) -> bool:
        return not self.is_out_of_stock and self.max_quantity <= LOW_STOCK_THRESHOLD

    @property
    def can_increment(self) -> bool:
        return bool(self.is_available) and self.quantity < self.max_quantity

    @property
    def can_decrement(self) -> bool:
        return self.quantity > 1
