"""
Currency Converter

Prices live in the reference currency (INR) everywhere: in product payloads, in
the cart, in orders and in the payment intent. Conversion happens only when a
price is rendered for display, so a change of display currency never touches
any stored amount.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

import config
from exceptions.base import StorefrontException
from models.currency import CurrencyDTO, LOCALE_CURRENCY, build_catalog
from services.storage import LocalStorage

logger = logging.getLogger(__name__)


class CurrencyConverter:
    """Pure display conversion over the static currency catalog."""

    def __init__(self, reference_code: str | None = None):
        self.reference_code = reference_code or config.REFERENCE_CURRENCY
        self.currencies: list[CurrencyDTO] = build_catalog(self.reference_code)
        self._by_code = {currency.code: currency for currency in self.currencies}

    @property
    def default(self) -> CurrencyDTO:
        return self.currencies[0]

    @property
    def reference(self) -> CurrencyDTO:
        return self._by_code[self.reference_code]

    def get(self, code: str) -> CurrencyDTO | None:
        return self._by_code.get(code.upper()) if code else None

    def for_locale(self, locale: str | None) -> CurrencyDTO:
        """
        Seed currency for a locale such as "en_GB" or "en-US".

        Unknown or missing locales get the first catalog entry.
        """
        if locale:
            region = locale.replace("-", "_").split(".")[0].split("_")[-1].upper()
            code = LOCALE_CURRENCY.get(region)
            if code and code in self._by_code:
                return self._by_code[code]
        return self.default

    def convert(self, amount: float, currency: CurrencyDTO) -> Decimal:
        """Reference amount -> display amount, rounded to the currency's digits."""
        exponent = Decimal(1).scaleb(-currency.fraction_digits)
        return (Decimal(str(amount)) * Decimal(str(currency.rate))).quantize(exponent, rounding=ROUND_HALF_UP)

    def format_price(self, amount: float, currency: CurrencyDTO) -> str:
        """
        Render a reference-currency amount in the display currency.

        Symbol first, thousands grouping, no trailing fraction zeros:
            format_price(1500, USD) -> "$18.33"
            format_price(1500, JPY) -> "¥2,750"
            format_price(90, CHF)   -> "CHF 0.95"
        """
        value = self.convert(amount, currency)
        sign = "-" if value < 0 else ""
        grouped = f"{abs(value):,.{currency.fraction_digits}f}"
        if "." in grouped:
            grouped = grouped.rstrip("0").rstrip(".")
        separator = " " if currency.symbol[-1].isalpha() else ""
        return f"{sign}{currency.symbol}{separator}{grouped}"

    def parse_price(self, text: str, currency: CurrencyDTO) -> float:
        """
        Inverse of format_price: display text -> reference-currency amount.

        Raises:
            StorefrontException: If the text is not a price in this currency
        """
        raw = text.strip()
        negative = raw.startswith("-")
        if negative:
            raw = raw[1:]
        if not raw.startswith(currency.symbol):
            raise StorefrontException(
                f"'{text}' is not a {currency.code} price",
                details={"text": text, "currency": currency.code}
            )
        digits = raw[len(currency.symbol):].strip().replace(",", "")
        try:
            value = Decimal(digits)
        except InvalidOperation:
            raise StorefrontException(
                f"'{text}' is not a {currency.code} price",
                details={"text": text, "currency": currency.code}
            )
        if negative:
            value = -value
        return float(value / Decimal(str(currency.rate)))

    @staticmethod
    def to_minor_units(amount: float) -> int:
        """Gateway amount: reference total in paise."""
        return int((Decimal(str(amount)) * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


class CurrencyService:
    """
    Selected display currency, persisted in local storage.

    Without a saved selection the currency is seeded from the client locale.
    """

    def __init__(self, storage: LocalStorage, converter: CurrencyConverter | None = None, locale: str | None = None):
        self.storage = storage
        self.converter = converter or CurrencyConverter()
        self.locale = locale or config.CLIENT_LOCALE
        self.selected: CurrencyDTO = self.converter.for_locale(self.locale)

    async def load(self) -> CurrencyDTO:
        saved_code = await self.storage.get_item(config.CURRENCY_STORAGE_KEY)
        saved = self.converter.get(saved_code) if saved_code else None
        if saved_code and saved is None:
            logger.warning(f"[Currency] Ignoring unknown saved currency '{saved_code}'")
        self.selected = saved or self.converter.for_locale(self.locale)
        logger.info(f"[Currency] Display currency {self.selected.code}")
        return self.selected

    async def set_currency(self, code: str) -> CurrencyDTO:
        currency = self.converter.get(code)
        if currency is None:
            raise StorefrontException(f"Unsupported currency: {code}", details={"currency": code})
        self.selected = currency
        await self.storage.set_item(config.CURRENCY_STORAGE_KEY, currency.code)
        return currency

    def format_price(self, amount: float) -> str:
        return self.converter.format_price(amount, self.selected)

    def parse_price(self, text: str) -> float:
        return self.converter.parse_price(text, self.selected)
