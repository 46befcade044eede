from pydantic import BaseModel


class CurrencyDTO(BaseModel):
    code: str
    symbol: str
    rate: float  # Multiply a reference-currency amount by this to display it
    fraction_digits: int = 2


# Published cross rates against EUR. The catalog re-bases them on the INR
# reference currency, so INR is always exactly 1. Symbols are what en-US
# Intl.NumberFormat prints for each code, so no two currencies share one.
_EUR_CROSS_RATES: list[tuple[str, str, float, int]] = [
    ("EUR", "€", 1.0, 2),
    ("USD", "$", 1.1, 2),
    ("GBP", "£", 0.85, 2),
    ("INR", "₹", 90.0, 2),
    ("JPY", "¥", 165.0, 0),
    ("AUD", "A$", 1.65, 2),
    ("CAD", "CA$", 1.5, 2),
    ("CHF", "CHF", 0.95, 2),
    ("CNY", "CN¥", 7.8, 2),
    ("SGD", "SGD", 1.45, 2),
]


def build_catalog(reference_code: str) -> list[CurrencyDTO]:
    base = next(rate for code, _, rate, _ in _EUR_CROSS_RATES if code == reference_code)
    return [
        CurrencyDTO(code=code, symbol=symbol, rate=rate / base, fraction_digits=digits)
        for code, symbol, rate, digits in _EUR_CROSS_RATES
    ]


# Country part of a locale -> display currency, used only when nothing was saved
LOCALE_CURRENCY: dict[str, str] = {
    "US": "USD",
    "GB": "GBP",
    "IN": "INR",
    "JP": "JPY",
    "AU": "AUD",
    "CA": "CAD",
    "CH": "CHF",
    "CN": "CNY",
    "SG": "SGD",
}
