"""Order submission payload.

Built from the priced shop groups at checkout and sent to the order service.
Totals are not part of the payload: the server re-prices it through
``reprice_submission``, which takes the same path as the checkout preview.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from checkout.cart.errors import CartInputError
from checkout.cart.item import CartItem
from checkout.pricing.calculator import CartPricing, PricingConstants, price_cart
from checkout.pricing.coupons import CouponRules, apply_coupon
from checkout.pricing.partition import ShopGroup

logger = structlog.get_logger(__name__)


class InvalidSubmission(CartInputError):
    field = "order"


@dataclass(frozen=True)
class ShopOrder:
    shop_id: str
    shop_name: str
    items: tuple[CartItem, ...]
    coupon_code: str | None = None

    def to_payload(self) -> dict:
        payload = {
            "shopId": self.shop_id,
            "shopName": self.shop_name,
            "items": [_item_payload(item) for item in self.items],
        }
        if self.coupon_code:
            payload["couponCode"] = self.coupon_code
        return payload


@dataclass(frozen=True)
class OrderSubmission:
    shop_orders: tuple[ShopOrder, ...]
    shipping_address_id: str
    billing_address_id: str
    payment_method: str
    notes: str | None = None

    def to_payload(self) -> dict:
        payload = {
            "shopOrders": [order.to_payload() for order in self.shop_orders],
            "shippingAddressId": self.shipping_address_id,
            "billingAddressId": self.billing_address_id,
            "paymentMethod": self.payment_method,
        }
        if self.notes:
            payload["notes"] = self.notes
        return payload


def _item_payload(item: CartItem) -> dict:
    payload = {
        "productId": item.product_id,
        "quantity": item.quantity,
        "price": item.unit_price,
    }
    if item.variant_id:
        payload["variantId"] = item.variant_id
    return payload


def build_order_submission(
    groups: Sequence[ShopGroup],
    shipping_address_id: str | None,
    payment_method: str | None,
    billing_address_id: str | None = None,
    notes: str | None = None,
) -> OrderSubmission:
    """Assemble the submission for every shop group in the cart.

    Billing defaults to the shipping address.
    """
    if not groups or not any(group.items for group in groups):
        raise InvalidSubmission("Cannot place an order for an empty cart", field="shop_orders")
    if not shipping_address_id:
        raise InvalidSubmission("Shipping address is required", field="shipping_address_id")
    if not payment_method:
        raise InvalidSubmission("Payment method is required", field="payment_method")

    shop_orders = tuple(
        ShopOrder(
            shop_id=group.shop_id,
            shop_name=group.shop_name,
            items=group.items,
            coupon_code=group.coupon.code if group.coupon is not None else None,
        )
        for group in groups
        if group.items
    )
    submission = OrderSubmission(
        shop_orders=shop_orders,
        shipping_address_id=shipping_address_id,
        billing_address_id=billing_address_id or shipping_address_id,
        payment_method=payment_method,
        notes=notes or None,
    )
    logger.info(
        "Built order submission",
        shop_count=len(shop_orders),
        payment_method=payment_method,
    )
    return submission


def reprice_submission(
    submission: OrderSubmission,
    rules: CouponRules | None = None,
    constants: PricingConstants | None = None,
) -> CartPricing:
    """Price a submission server-side, re-validating each shop's coupon code.

    A coupon that no longer validates is dropped from that shop's total.
    """
    groups = []
    for order in submission.shop_orders:
        group = ShopGroup(shop_id=order.shop_id, shop_name=order.shop_name, items=order.items)
        if order.coupon_code:
            group, validation = apply_coupon(group, order.coupon_code, rules)
            if not validation.valid:
                logger.warning(
                    "Dropping coupon that failed re-validation",
                    shop_id=order.shop_id,
                    code=order.coupon_code,
                    reason=validation.error,
                )
        groups.append(group)
    return price_cart(groups, constants)
