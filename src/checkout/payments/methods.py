"""Payment method and currency selection for a destination address."""

from decimal import Decimal

from checkout.address.postal import is_paypal_eligible_country
from checkout.address.validator import destination_country, is_international_address
from checkout.config import get_settings
from checkout.pricing.calculator import round_half_up

HOME_CURRENCY = "INR"

RAZORPAY = "razorpay"
PAYPAL = "paypal"
CASH_ON_DELIVERY = "cod"

EURO_COUNTRIES = ("DE", "FR", "IT", "ES")

# Fixed conversion rates from the home currency
EXCHANGE_RATES = {
    "USD": 0.012,
    "EUR": 0.011,
    "GBP": 0.0095,
}


def detect_currency(country) -> str:
    code = country.strip().upper() if isinstance(country, str) else ""
    if code == get_settings().home_country.upper():
        return HOME_CURRENCY
    if code == "GB":
        return "GBP"
    if code in EURO_COUNTRIES:
        return "EUR"
    return "USD"


def convert_amount(amount: float, currency: str) -> float:
    """Convert a home-currency amount, rounded half-up to two decimals."""
    if currency == HOME_CURRENCY:
        return amount
    if currency not in EXCHANGE_RATES:
        raise ValueError(f"Unsupported currency: {currency}")
    return round_half_up(Decimal(str(amount)) * Decimal(str(EXCHANGE_RATES[currency])), places=2)


def available_payment_methods(address) -> list[str]:
    """Gateways offered for a destination: domestic gateway or PayPal, plus cash on delivery."""
    if not is_international_address(address):
        return [RAZORPAY, CASH_ON_DELIVERY]
    if is_paypal_eligible_country(destination_country(address)):
        return [PAYPAL, CASH_ON_DELIVERY]
    return [CASH_ON_DELIVERY]
