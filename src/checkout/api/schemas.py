"""Pydantic request/response schemas for the Checkout API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands and the pricing results they are built from.
Numeric inputs accept any number; the domain validator decides
what is acceptable and reports violations as HTTP 400.
"""

from pydantic import BaseModel, Field

from checkout.address.validator import AddressValidation
from checkout.cart.cart import Cart
from checkout.cart.item import CartItem
from checkout.pricing.calculator import CartPricing, ShopPricing
from checkout.pricing.coupons import CouponValidation
from checkout.pricing.partition import ShopGroup


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class CartItemSchema(BaseModel):
    item_id: str
    product_id: str
    variant_id: str | None = None
    product_name: str | None = None
    sku: str | None = None
    unit_price: float
    quantity: int
    max_quantity: int
    discount: float = 0.0
    subtotal: float
    total: float
    shop_id: str
    shop_name: str | None = None
    is_available: bool = True
    has_discount: bool = False
    can_increment: bool = True
    can_decrement: bool = False
    is_low_stock: bool = False
    is_out_of_stock: bool = False

    @classmethod
    def from_item(cls, item: CartItem) -> "CartItemSchema":
        return cls(
            **item.to_dict(),
            has_discount=item.has_discount,
            can_increment=item.can_increment,
            can_decrement=item.can_decrement,
            is_low_stock=item.is_low_stock,
            is_out_of_stock=item.is_out_of_stock,
        )


class AddressSchema(BaseModel):
    line1: str = ""
    line2: str | None = None
    landmark: str | None = None
    city: str = ""
    state: str | None = None
    postal_code: str = ""
    country: str = ""

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "line1": "12 MG Road",
                    "city": "Mumbai",
                    "state": "MH",
                    "postal_code": "400001",
                    "country": "IN",
                }
            ]
        }
    }


class ShopPricingSchema(BaseModel):
    shop_id: str
    shop_name: str
    subtotal: float
    discount: float
    shipping: float
    tax: float
    shop_total: float
    coupon_code: str | None = None
    items: list[CartItemSchema] = Field(default_factory=list)

    @classmethod
    def from_pricing(cls, pricing: ShopPricing, group: ShopGroup) -> "ShopPricingSchema":
        return cls(
            shop_id=pricing.shop_id,
            shop_name=pricing.shop_name,
            subtotal=pricing.subtotal,
            discount=pricing.discount,
            shipping=pricing.shipping,
            tax=pricing.tax,
            shop_total=pricing.shop_total,
            coupon_code=group.coupon.code if group.coupon is not None else None,
            items=[CartItemSchema.from_item(item) for item in group.items],
        )


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddCartItemRequest(BaseModel):
    product_id: str
    variant_id: str | None = None
    product_name: str | None = None
    sku: str | None = None
    quantity: int | float = 1
    max_quantity: int | float | None = None
    unit_price: float
    discount: float | None = None
    shop_id: str
    shop_name: str | None = None
    is_available: bool = True

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "prod-001",
                    "variant_id": "var-red",
                    "product_name": "Cotton Kurta",
                    "quantity": 2,
                    "max_quantity": 10,
                    "unit_price": 1499.0,
                    "shop_id": "shop-001",
                    "shop_name": "Handloom House",
                }
            ]
        }
    }


class UpdateCartItemRequest(BaseModel):
    quantity: int | float


class MergeGuestCartRequest(BaseModel):
    guest_owner_key: str


# ---------------------------------------------------------------------------
# Checkout Request Schemas
# ---------------------------------------------------------------------------
class ApplyCouponRequest(BaseModel):
    shop_id: str
    code: str


class PlaceOrderRequest(BaseModel):
    shipping_address_id: str | None = None
    billing_address_id: str | None = None
    use_same_address: bool = True
    payment_method: str | None = None
    notes: str | None = None


class PaymentOutcomeRequest(BaseModel):
    status: str = Field(pattern="^(succeeded|failed|cancelled)$")
    reference: str | None = None
    reason: str | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class CartResponse(BaseModel):
    owner_key: str
    items: list[CartItemSchema]
    line_count: int
    item_count: int

    @classmethod
    def from_cart(cls, cart: Cart) -> "CartResponse":
        return cls(
            owner_key=cart.owner_key,
            items=[CartItemSchema.from_item(item) for item in cart.items],
            line_count=cart.line_count,
            item_count=cart.item_count,
        )


class CouponValidationResponse(BaseModel):
    valid: bool
    discount_amount: float = 0.0
    error: str | None = None

    @classmethod
    def from_validation(cls, validation: CouponValidation) -> "CouponValidationResponse":
        return cls(valid=validation.valid, discount_amount=validation.discount_amount, error=validation.error)


class PreviewResponse(BaseModel):
    shops: list[ShopPricingSchema]
    grand_total: float

    @classmethod
    def from_pricing(cls, pricing: CartPricing, groups: list[ShopGroup]) -> "PreviewResponse":
        return cls(
            shops=[ShopPricingSchema.from_pricing(shop, group) for shop, group in zip(pricing.shops, groups)],
            grand_total=pricing.grand_total,
        )


class FieldErrorSchema(BaseModel):
    field: str
    message: str


class AddressValidationResponse(BaseModel):
    is_valid: bool
    errors: list[FieldErrorSchema]
    is_international: bool = False
    postal_code_name: str
    currency: str | None = None
    payment_methods: list[str] = Field(default_factory=list)

    @classmethod
    def from_validation(cls, validation: AddressValidation, **extra) -> "AddressValidationResponse":
        return cls(
            is_valid=validation.is_valid,
            errors=[FieldErrorSchema(field=error.field, message=error.message) for error in validation.errors],
            **extra,
        )


class OrderSubmissionResponse(BaseModel):
    order: dict
    grand_total: float
    shops: list[ShopPricingSchema]


class PaymentSettledResponse(BaseModel):
    cart_cleared: bool
