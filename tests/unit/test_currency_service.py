import httpx
import pytest

from trippat.data.currency import format_price
from trippat.services.currency_service import CurrencyService

RATES_URL = "http://rates.test/latest/USD"


class RateApi:
    """MockTransport handler that counts requests."""

    def __init__(self, status: int = 200, rates: dict | None = None):
        self.status = status
        self.rates = rates or {"USD": 1, "SAR": 3.75, "EUR": 0.5}
        self.requests = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests += 1
        if self.status != 200:
            return httpx.Response(self.status)
        return httpx.Response(200, json={"base": "USD", "rates": self.rates})


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def make_service(api: RateApi, clock: Clock | None = None) -> CurrencyService:
    return CurrencyService(
        api_url=RATES_URL,
        refresh_seconds=3600,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(api)),
        clock=clock or Clock(),
    )


@pytest.mark.asyncio
async def test_same_currency_is_identity_without_network():
    api = RateApi()
    service = make_service(api)

    assert await service.convert(123.45, "SAR", "SAR") == 123.45
    assert api.requests == 0


@pytest.mark.asyncio
async def test_rates_are_cached_until_stale():
    api = RateApi()
    clock = Clock()
    service = make_service(api, clock)

    assert await service.convert(10, "USD", "EUR") == 5
    assert await service.convert(10, "EUR", "USD") == 20
    assert api.requests == 1

    clock.now += 3601
    assert service.is_stale
    await service.convert(10, "USD", "SAR")
    assert api.requests == 2


@pytest.mark.asyncio
async def test_cross_rate_goes_through_usd():
    service = make_service(RateApi())

    assert await service.convert(375, "SAR", "EUR") == pytest.approx(50)


@pytest.mark.asyncio
async def test_failed_fetch_uses_fallback_table():
    api = RateApi(status=503)
    service = make_service(api)

    assert await service.convert(100, "USD", "SAR") == pytest.approx(375)
    assert await service.convert(100, "USD", "SAR") == pytest.approx(375)
    assert api.requests == 1


@pytest.mark.asyncio
async def test_unknown_currency_assumes_parity():
    service = make_service(RateApi())

    assert await service.convert(10, "USD", "XYZ") == 10


@pytest.mark.asyncio
async def test_convert_price_to_user_currency_rounds():
    service = make_service(RateApi(rates={"USD": 1, "SAR": 3.7512}))

    result = await service.convert_price_to_user_currency(99.99, "USD", "SAR")

    assert result == {
        "price": 375.08,
        "currency": "SAR",
        "original_price": 99.99,
        "original_currency": "USD",
    }


@pytest.mark.asyncio
async def test_convert_price_without_target_keeps_original():
    service = make_service(RateApi())

    result = await service.convert_price_to_user_currency(50, "USD", None)

    assert result["price"] == 50
    assert result["currency"] == "USD"


def test_format_price():
    assert format_price(1250, "SAR") == "ر.س 1,250"
    assert format_price(1250, "USD") == "$1,250"
    assert format_price(12.5, "USD") == "$12.50"
    assert CurrencyService.get_supported_currencies() == ["USD", "SAR"]
    assert CurrencyService.get_currency_symbol("GBP") == "£"
    assert CurrencyService.get_currency_symbol("XYZ") == "XYZ"
