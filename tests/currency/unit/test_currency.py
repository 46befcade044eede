"""
Unit Tests: Currency conversion and formatting

Tests for services/currency.py covering:
- format_price() - symbol, grouping, fraction digits per currency
- parse_price() - inverse of format_price()
- to_minor_units() - gateway amount in paise
- CurrencyService - locale seeding and persisted selection
"""

import pytest

from exceptions.base import StorefrontException
from services.currency import CurrencyConverter, CurrencyService


@pytest.fixture
def converter():
    return CurrencyConverter("INR")


class TestCatalog:

    def test_reference_currency_has_rate_one(self, converter):
        assert converter.reference.code == "INR"
        assert converter.reference.rate == pytest.approx(1.0)

    def test_first_entry_is_default(self, converter):
        assert converter.default.code == "EUR"

    def test_lookup_is_case_insensitive(self, converter):
        assert converter.get("usd").code == "USD"
        assert converter.get("XYZ") is None


class TestFormatPrice:

    def test_reference_amount_keeps_value(self, converter):
        assert converter.format_price(1500, converter.get("INR")) == "₹1,500"

    def test_trailing_zero_fraction_is_dropped(self, converter):
        assert converter.format_price(1234.5, converter.get("INR")) == "₹1,234.5"

    def test_usd_conversion(self, converter):
        assert converter.format_price(1500, converter.get("USD")) == "$18.33"

    def test_zero_fraction_currency(self, converter):
        assert converter.format_price(1500, converter.get("JPY")) == "¥2,750"

    def test_alphabetic_symbol_is_separated(self, converter):
        assert converter.format_price(90, converter.get("CHF")) == "CHF 0.95"

    @pytest.mark.parametrize("code, shown", [
        ("CAD", "CA$15"),
        ("CNY", "CN¥78"),
        ("SGD", "SGD 14.5"),
        ("AUD", "A$16.5"),
    ])
    def test_symbols_match_en_us_number_format(self, converter, code, shown):
        assert converter.format_price(900, converter.get(code)) == shown

    def test_yen_price_is_not_a_yuan_price(self, converter):
        with pytest.raises(StorefrontException):
            converter.parse_price("¥2,750", converter.get("CNY"))

    def test_negative_amount(self, converter):
        assert converter.format_price(-450, converter.get("EUR")) == "-€5"

    def test_canonical_amount_is_not_touched(self, converter, make_product):
        product = make_product(1, price=2500.0)

        converter.format_price(product.price, converter.get("GBP"))

        assert product.price == 2500.0


class TestRoundTrip:
    """format(parse(format(x))) == format(x) for every catalog currency."""

    @pytest.mark.parametrize("amount", [0, 1, 99.99, 1500, 2499.5, 123456.78])
    def test_round_trip(self, converter, amount):
        for currency in converter.currencies:
            shown = converter.format_price(amount, currency)
            parsed = converter.parse_price(shown, currency)
            assert converter.format_price(parsed, currency) == shown, currency.code

    def test_parse_rejects_other_currency(self, converter):
        with pytest.raises(StorefrontException):
            converter.parse_price("$10", converter.get("GBP"))

    def test_parse_rejects_garbage(self, converter):
        with pytest.raises(StorefrontException):
            converter.parse_price("₹abc", converter.get("INR"))


class TestMinorUnits:

    def test_total_is_rounded_to_paise(self):
        assert CurrencyConverter.to_minor_units(1650.0) == 165000
        assert CurrencyConverter.to_minor_units(1234.565) == 123457
        assert CurrencyConverter.to_minor_units(0.1 + 0.2) == 30


class TestCurrencyService:

    @pytest.mark.asyncio
    async def test_locale_seeds_currency_without_saved_choice(self, storage):
        service = CurrencyService(storage, locale="en_GB")

        selected = await service.load()

        assert selected.code == "GBP"

    @pytest.mark.asyncio
    async def test_unknown_locale_falls_back_to_first_entry(self, storage):
        service = CurrencyService(storage, locale="fr_FR")

        assert (await service.load()).code == "EUR"

    @pytest.mark.asyncio
    async def test_selection_is_persisted(self, storage):
        service = CurrencyService(storage, locale="en_US")
        await service.set_currency("JPY")

        reloaded = CurrencyService(storage, locale="en_US")

        assert (await reloaded.load()).code == "JPY"
        assert reloaded.format_price(1500) == "¥2,750"

    @pytest.mark.asyncio
    async def test_unknown_saved_code_is_ignored(self, storage):
        await storage.set_item("pashmiya-currency", "DOGE")
        service = CurrencyService(storage, locale="en-IN")

        assert (await service.load()).code == "INR"

    @pytest.mark.asyncio
    async def test_unsupported_currency_is_rejected(self, storage):
        service = CurrencyService(storage, locale="en_US")

        with pytest.raises(StorefrontException):
            await service.set_currency("DOGE")
