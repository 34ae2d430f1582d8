"""Spot exchange rates relative to the base currency.

A ``RateMap`` maps a currency code to the factor converting 1 unit of that
currency into the base currency, so ``rates["USD"] == 83.0`` reads as
"1 USD = 83 INR". The base currency always maps to 1.
"""

import asyncio
import logging
import math
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

import httpx

from lifeboard.config import settings
from lifeboard.services.costs import normalize_currency

logger = logging.getLogger(__name__)

RateMap = dict[str, float]


class RateFetchError(RuntimeError):
    """Raised when the rate source cannot deliver a usable rate table."""


@dataclass(frozen=True)
class CachedRates:
    rates: dict[str, float]
    expires_at: float


@dataclass
class RateCache:
    """Last good rate table per base currency, kept for ``ttl_seconds``."""

    ttl_seconds: float = 3600
    clock: Callable[[], float] = time.monotonic
    _entries: dict[str, CachedRates] = field(default_factory=dict)

    def get(self, base: str) -> dict[str, float] | None:
        cached = self._entries.get(base)
        if cached and cached.expires_at > self.clock():
            return cached.rates
        return None

    def put(self, base: str, rates: dict[str, float]) -> None:
        # Concurrent refreshes simply overwrite each other
        self._entries[base] = CachedRates(rates=dict(rates), expires_at=self.clock() + self.ttl_seconds)


@dataclass
class RateProvider:
    base_currency: str = "INR"
    api_url: str = "https://api.exchangerate-api.com/v4/latest"
    timeout: float = 5.0
    # Priced in ``fallback_base``; rebased onto ``base_currency`` when they differ
    fallback_rates: dict[str, float] = field(default_factory=dict)
    fallback_base: str = "INR"
    cache: RateCache = field(default_factory=RateCache)
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        self.base_currency = normalize_currency(self.base_currency)
        self.fallback_base = normalize_currency(self.fallback_base)
        self.fallback_rates = {normalize_currency(code): float(rate) for code, rate in self.fallback_rates.items()}

    async def get_rates(self, currencies: Iterable[str | None]) -> RateMap:
        base = self.base_currency
        requested = _requested_codes(currencies, base)
        if not requested:
            return {base: 1.0}

        try:
            table = await self._get_table()
        except RateFetchError as exc:
            logger.warning(f"Exchange rate fetch failed, using fallback rates: {exc}")
            return self.fallback_map(requested)

        rates: RateMap = {base: 1.0}
        for code in requested:
            quoted = table.get(code)
            # The source quotes units of ``code`` per 1 base; invert it
            rates[code] = 1 / quoted if quoted else 1.0
        return rates

    def fallback_map(self, requested: Iterable[str]) -> RateMap:
        table = dict(self.fallback_rates)
        table.setdefault(self.fallback_base, 1.0)
        base_price = table.get(self.base_currency)
        rates: RateMap = {self.base_currency: 1.0}
        for code in requested:
            price = table.get(code)
            rates[code] = price / base_price if price and base_price else 1.0
        return rates

    async def _get_table(self) -> dict[str, float]:
        cached = self.cache.get(self.base_currency)
        if cached is not None:
            return cached
        table = await self._fetch_table()
        self.cache.put(self.base_currency, table)
        return table

    async def _fetch_table(self) -> dict[str, float]:
        url = f"{self.api_url.rstrip('/')}/{self.base_currency}"
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                # One deadline for the whole exchange; httpx timeouts apply per read
                response = await asyncio.wait_for(client.get(url), self.timeout)
                response.raise_for_status()
                payload = response.json()
            except httpx.HTTPError as exc:
                raise RateFetchError(f"{type(exc).__name__}: {exc}") from exc
            except asyncio.TimeoutError as exc:
                raise RateFetchError(f"no response within {self.timeout}s") from exc
            except ValueError as exc:
                raise RateFetchError("response is not JSON") from exc

        rates = payload.get("rates") if isinstance(payload, dict) else None
        if not isinstance(rates, dict):
            raise RateFetchError("response missing rates")

        table: dict[str, float] = {}
        for code, value in rates.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                continue
            if math.isfinite(value) and value > 0:
                table[normalize_currency(code)] = float(value)
        logger.info(f"Fetched {len(table)} exchange rates for {self.base_currency}")
        return table


def _requested_codes(currencies: Iterable[str | None], base: str) -> list[str]:
    codes: list[str] = []
    for currency in currencies:
        if not currency or not currency.strip():
            continue
        code = normalize_currency(currency)
        if code != base and code not in codes:
            codes.append(code)
    return codes


def build_rate_provider() -> RateProvider:
    return RateProvider(
        base_currency=settings.BASE_CURRENCY,
        api_url=settings.FX_API_URL,
        timeout=settings.FX_TIMEOUT_SECONDS,
        fallback_rates=settings.FX_FALLBACK_RATES,
        fallback_base=settings.FX_FALLBACK_BASE,
        cache=RateCache(ttl_seconds=settings.FX_CACHE_TTL_SECONDS),
    )


async def get_rates_map(provider: RateProvider, currencies: Iterable[str | None]) -> RateMap:
    return await provider.get_rates(currencies)
