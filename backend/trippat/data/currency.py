"""Currency utilities — static USD-based rates, symbols, and cross-rate conversion."""

import logging

logger = logging.getLogger(__name__)

# Units of each currency per 1 USD (used when the rate API is unavailable)
FALLBACK_RATES_FROM_USD: dict[str, float] = {
    "USD": 1.0,
    "SAR": 3.75,
    "AED": 3.6725,
    "QAR": 3.64,
    "KWD": 0.31,
    "BHD": 0.376,
    "OMR": 0.385,
    "EUR": 0.92,
    "GBP": 0.79,
    "TRY": 32.0,
    "THB": 36.0,
    "MYR": 4.7,
    "IDR": 15700.0,
    "INR": 83.0,
    "EGP": 48.0,
}

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "SAR": "ر.س",
    "AED": "AED",
    "EUR": "€",
    "GBP": "£",
    "THB": "฿",
    "INR": "₹",
    "TRY": "TRY",
}

SUPPORTED_CURRENCIES: tuple[str, ...] = ("USD", "SAR")


def cross_convert(
    amount: float, from_currency: str, to_currency: str, rates: dict[str, float]
) -> float:
    """Convert through USD using a table of units-per-USD rates.

    A currency missing from ``rates`` is treated as 1:1 with USD.
    """
    if from_currency == to_currency:
        return amount

    for code in (from_currency, to_currency):
        if code not in rates:
            logger.warning(f"No exchange rate for {code}, assuming parity with USD")

    from_rate = rates.get(from_currency) or 1.0
    to_rate = rates.get(to_currency) or 1.0

    if from_currency == "USD":
        return amount * to_rate
    if to_currency == "USD":
        return amount / from_rate
    return amount / from_rate * to_rate


def get_currency_symbol(currency: str) -> str:
    return CURRENCY_SYMBOLS.get(currency, currency)


def format_price(amount: float, currency: str = "SAR") -> str:
    """Format a price with currency symbol for display."""
    if currency == "SAR":
        return f"{CURRENCY_SYMBOLS['SAR']} {amount:,.0f}"
    symbol = CURRENCY_SYMBOLS.get(currency, currency + " ")
    if float(amount).is_integer():
        return f"{symbol}{amount:,.0f}"
    return f"{symbol}{amount:,.2f}"
