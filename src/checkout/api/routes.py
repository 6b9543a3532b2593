"""FastAPI routes for the Checkout domain: carts and checkout."""

from fastapi import APIRouter
from protean.utils.globals import current_domain

from checkout.address.postal import postal_code_name
from checkout.address.validator import destination_country, is_international_address, validate_address
from checkout.api.schemas import (
    AddCartItemRequest,
    AddressSchema,
    AddressValidationResponse,
    ApplyCouponRequest,
    CartResponse,
    CouponValidationResponse,
    MergeGuestCartRequest,
    OrderSubmissionResponse,
    PaymentOutcomeRequest,
    PaymentSettledResponse,
    PlaceOrderRequest,
    PreviewResponse,
    ShopPricingSchema,
    UpdateCartItemRequest,
)
from checkout.cart.coupons import ApplyShopCoupon, RemoveShopCoupon
from checkout.cart.items import AddCartItem, RemoveCartItem, UpdateCartItem
from checkout.cart.management import ClearCart, MergeGuestCart
from checkout.cart.mutator import get_cart_mutator
from checkout.orders.submission import build_order_submission, reprice_submission
from checkout.payments.methods import available_payment_methods, detect_currency
from checkout.payments.outcome import PaymentOutcome, PaymentStatus, settle_payment
from checkout.pricing.calculator import price_cart
from checkout.pricing.partition import partition

# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.get("/{owner_key}", response_model=CartResponse)
async def get_cart(owner_key: str) -> CartResponse:
    return CartResponse.from_cart(get_cart_mutator().load(owner_key))


@cart_router.post("/{owner_key}/items", response_model=CartResponse)
async def add_cart_item(owner_key: str, body: AddCartItemRequest) -> CartResponse:
    command = AddCartItem(owner_key=owner_key, item=body.model_dump(exclude_none=True))
    cart = current_domain.process(command, asynchronous=False)
    return CartResponse.from_cart(cart)


@cart_router.put("/{owner_key}/items/{item_id}", response_model=CartResponse)
async def update_cart_item(owner_key: str, item_id: str, body: UpdateCartItemRequest) -> CartResponse:
    command = UpdateCartItem(owner_key=owner_key, item_id=item_id, quantity=body.quantity)
    cart = current_domain.process(command, asynchronous=False)
    return CartResponse.from_cart(cart)


@cart_router.delete("/{owner_key}/items/{item_id}", response_model=CartResponse)
async def remove_cart_item(owner_key: str, item_id: str) -> CartResponse:
    command = RemoveCartItem(owner_key=owner_key, item_id=item_id)
    cart = current_domain.process(command, asynchronous=False)
    return CartResponse.from_cart(cart)


@cart_router.delete("/{owner_key}", response_model=CartResponse)
async def clear_cart(owner_key: str) -> CartResponse:
    cart = current_domain.process(ClearCart(owner_key=owner_key), asynchronous=False)
    return CartResponse.from_cart(cart)


@cart_router.post("/{owner_key}/merge", response_model=CartResponse)
async def merge_guest_cart(owner_key: str, body: MergeGuestCartRequest) -> CartResponse:
    command = MergeGuestCart(owner_key=owner_key, guest_owner_key=body.guest_owner_key)
    cart = current_domain.process(command, asynchronous=False)
    return CartResponse.from_cart(cart)


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


def _shop_groups(owner_key: str):
    """Partition the cart, attaching the coupons applied to each shop."""
    mutator = get_cart_mutator()
    return partition(mutator.load(owner_key).items, coupons=mutator.load_coupons(owner_key))


@checkout_router.post("/addresses/validate", response_model=AddressValidationResponse)
async def validate_shipping_address(body: AddressSchema) -> AddressValidationResponse:
    address = body.model_dump()
    validation = validate_address(address)
    extra = {"postal_code_name": postal_code_name(body.country)}
    if validation.is_valid:
        extra.update(
            is_international=is_international_address(address),
            currency=detect_currency(destination_country(address)),
            payment_methods=available_payment_methods(address),
        )
    return AddressValidationResponse.from_validation(validation, **extra)


@checkout_router.get("/{owner_key}/preview", response_model=PreviewResponse)
async def preview_checkout(owner_key: str) -> PreviewResponse:
    groups = _shop_groups(owner_key)
    return PreviewResponse.from_pricing(price_cart(groups), groups)


@checkout_router.post("/{owner_key}/coupons", response_model=CouponValidationResponse)
async def apply_shop_coupon(owner_key: str, body: ApplyCouponRequest) -> CouponValidationResponse:
    command = ApplyShopCoupon(owner_key=owner_key, shop_id=body.shop_id, code=body.code)
    validation = current_domain.process(command, asynchronous=False)
    return CouponValidationResponse.from_validation(validation)


@checkout_router.delete("/{owner_key}/coupons/{shop_id}", response_model=PreviewResponse)
async def remove_shop_coupon(owner_key: str, shop_id: str) -> PreviewResponse:
    current_domain.process(RemoveShopCoupon(owner_key=owner_key, shop_id=shop_id), asynchronous=False)
    groups = _shop_groups(owner_key)
    return PreviewResponse.from_pricing(price_cart(groups), groups)


@checkout_router.post("/{owner_key}/orders", response_model=OrderSubmissionResponse)
async def place_order(owner_key: str, body: PlaceOrderRequest) -> OrderSubmissionResponse:
    groups = _shop_groups(owner_key)
    submission = build_order_submission(
        groups,
        shipping_address_id=body.shipping_address_id,
        payment_method=body.payment_method,
        billing_address_id=None if body.use_same_address else body.billing_address_id,
        notes=body.notes,
    )
    pricing = reprice_submission(submission)
    return OrderSubmissionResponse(
        order=submission.to_payload(),
        grand_total=pricing.grand_total,
        shops=[ShopPricingSchema.from_pricing(shop, group) for shop, group in zip(pricing.shops, groups)],
    )


@checkout_router.post("/{owner_key}/payment-outcome", response_model=PaymentSettledResponse)
async def record_payment_outcome(owner_key: str, body: PaymentOutcomeRequest) -> PaymentSettledResponse:
    outcome = PaymentOutcome(status=PaymentStatus(body.status), reference=body.reference, reason=body.reason)
    return PaymentSettledResponse(cart_cleared=settle_payment(owner_key, outcome))
