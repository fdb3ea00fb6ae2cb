"""Currency service — cached spot rates with lazy refresh and static fallback."""

import logging
import time
from typing import Callable

import httpx

from trippat.config import settings
from trippat.data.currency import (
    FALLBACK_RATES_FROM_USD,
    SUPPORTED_CURRENCIES,
    cross_convert,
    format_price,
    get_currency_symbol,
)

logger = logging.getLogger(__name__)


class CurrencyService:
    """Converts amounts using USD-based rates refreshed at most once per interval."""

    def __init__(
        self,
        api_url: str | None = None,
        refresh_seconds: int | None = None,
        fallback_rates: dict[str, float] | None = None,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._api_url = api_url or settings.currency_api_url
        self._refresh_seconds = (
            refresh_seconds if refresh_seconds is not None else settings.currency_refresh_seconds
        )
        if fallback_rates is None:
            fallback_rates = {**FALLBACK_RATES_FROM_USD, "SAR": settings.fallback_usd_sar_rate}
        self._fallback_rates = fallback_rates
        self._client = http_client
        self._clock = clock
        self._rates: dict[str, float] = {}
        self._last_updated: float | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=settings.currency_timeout_seconds)
        return self._client

    @property
    def is_stale(self) -> bool:
        if self._last_updated is None:
            return True
        return self._clock() - self._last_updated > self._refresh_seconds

    @property
    def rates(self) -> dict[str, float]:
        """Effective rate table: fallback values overlaid with fetched ones."""
        return {**self._fallback_rates, **self._rates}

    async def refresh_rates(self) -> dict[str, float]:
        """Fetch spot rates. On failure keep what is cached and rely on fallbacks."""
        try:
            client = await self._get_client()
            resp = await client.get(self._api_url)
            resp.raise_for_status()
            rates = resp.json().get("rates") or {}
            self._rates = {code: float(rate) for code, rate in rates.items() if rate}
            logger.info(f"Exchange rates refreshed ({len(self._rates)} currencies)")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error fetching exchange rates, using cached/fallback rates: {e}")
        # A failed fetch also counts as a refresh attempt
        self._last_updated = self._clock()
        return self.rates

    async def convert(self, amount: float, from_currency: str, to_currency: str) -> float:
        if from_currency == to_currency:
            return amount

        if self.is_stale:
            await self.refresh_rates()

        return cross_convert(amount, from_currency, to_currency, self.rates)

    async def convert_price_to_user_currency(
        self, price: float, original_currency: str, user_currency: str | None
    ) -> dict:
        if not user_currency or original_currency == user_currency:
            return {
                "price": price,
                "currency": original_currency,
                "original_price": price,
                "original_currency": original_currency,
            }

        converted = await self.convert(price, original_currency, user_currency)
        return {
            "price": round(converted, 2),
            "currency": user_currency,
            "original_price": price,
            "original_currency": original_currency,
        }

    @staticmethod
    def format_price(price: float, currency: str) -> str:
        return format_price(price, currency)

    @staticmethod
    def get_currency_symbol(currency: str) -> str:
        return get_currency_symbol(currency)

    @staticmethod
    def get_supported_currencies() -> list[str]:
        return list(SUPPORTED_CURRENCIES)

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None
