"""Checkout bounded context — shopper carts and multi-shop checkout pricing.

Maintains guest and account carts, partitions them into per-shop order
groups and prices each group so the checkout preview and the submitted
order always agree.
"""

from protean.domain import Domain

# Domain Composition Root
checkout = Domain(name="checkout")
