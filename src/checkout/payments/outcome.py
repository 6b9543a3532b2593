"""Payment outcome handling.

The gateway protocol itself lives elsewhere; checkout only consumes the
opaque result. A cart is cleared only once its payment has succeeded.
"""

from dataclasses import dataclass
from enum import Enum

import structlog

from checkout.cart.mutator import CartMutator, get_cart_mutator

logger = structlog.get_logger(__name__)


class PaymentStatus(Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class PaymentOutcome:
    """Result reported back by a payment gateway."""

    status: PaymentStatus
    reference: str | None = None
    reason: str | None = None

    @classmethod
    def succeeded(cls, reference: str) -> "PaymentOutcome":
        return cls(status=PaymentStatus.SUCCEEDED, reference=reference)

    @classmethod
    def failed(cls, reason: str) -> "PaymentOutcome":
        return cls(status=PaymentStatus.FAILED, reason=reason)

    @classmethod
    def cancelled(cls, reason: str = "Payment cancelled by shopper") -> "PaymentOutcome":
        return cls(status=PaymentStatus.CANCELLED, reason=reason)

    @property
    def is_success(self) -> bool:
        return self.status == PaymentStatus.SUCCEEDED


def settle_payment(owner_key: str, outcome: PaymentOutcome, mutator: CartMutator | None = None) -> bool:
    """Clear the cart after a successful payment; leave it intact otherwise.

    Returns True when the cart was cleared.
    """
    if not outcome.is_success:
        logger.warning(
            "Payment not completed, cart kept",
            owner_key=owner_key,
            status=outcome.status.value,
            reason=outcome.reason,
        )
        return False

    (mutator or get_cart_mutator()).clear(owner_key)
    logger.info("Payment settled", owner_key=owner_key, reference=outcome.reference)
    return True
