import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def checkout_bed():
    from checkout.domain import checkout

    bed = DomainFixture(checkout)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(checkout_bed):
    with checkout_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()


@pytest.fixture(autouse=True)
def _reset_adapters():
    """Every test starts from fresh stores, writer, coupon rules and settings."""
    from checkout.cart.mutator import reset_cart_mutator
    from checkout.config import get_settings
    from checkout.pricing.coupons import reset_coupon_rules
    from checkout.store import reset_cart_stores

    get_settings.cache_clear()
    reset_cart_stores()
    reset_cart_mutator()
    reset_coupon_rules()
    yield
    get_settings.cache_clear()
    reset_cart_stores()
    reset_cart_mutator()
    reset_coupon_rules()


def make_candidate(**overrides):
    """A valid add-to-cart candidate."""
    candidate = {
        "product_id": "prod-001",
        "product_name": "Cotton Kurta",
        "quantity": 1,
        "max_quantity": 10,
        "unit_price": 1000.0,
        "shop_id": "shop-001",
        "shop_name": "Handloom House",
    }
    candidate.update(overrides)
    return candidate


@pytest.fixture()
def candidate():
    return make_candidate
