"""Checkout settings loaded from the environment.

Every tunable used by the pricing engine and the cart stores lives here so
nothing downstream hard-codes a business constant. Variables are read with
the ``CHECKOUT_`` prefix, optionally from a ``.env`` file:

  - CHECKOUT_TAX_RATE                  (default 0.18)
  - CHECKOUT_FREE_SHIPPING_THRESHOLD   (default 5000)
  - CHECKOUT_FLAT_SHIPPING_FEE         (default 100)
  - CHECKOUT_DEFAULT_MAX_QUANTITY      (default 100)
  - CHECKOUT_HOME_COUNTRY              (default "IN")
  - CHECKOUT_GUEST_STORAGE_QUOTA       (default 5_000_000 bytes)
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CheckoutSettings(BaseSettings):
    """Centralized checkout settings."""

    tax_rate: float = Field(default=0.18, ge=0)
    free_shipping_threshold: float = Field(default=5000.0, ge=0)
    flat_shipping_fee: float = Field(default=100.0, ge=0)

    # Ceiling substituted when an item arrives without one or a stored
    # item's ceiling is corrupted
    default_max_quantity: int = Field(default=100, ge=1)

    home_country: str = Field(default="IN", min_length=2, max_length=2)

    guest_storage_quota: int = Field(default=5_000_000, ge=1)

    model_config = SettingsConfigDict(env_prefix="CHECKOUT_", env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> CheckoutSettings:
    """
    Cached settings loader.
    Call ``get_settings.cache_clear()`` after changing the environment.
    """
    return CheckoutSettings()
