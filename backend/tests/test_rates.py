import asyncio
import json
import time

import httpx
import pytest

from conftest import rates_transport
from lifeboard.services.rates import RateCache, RateProvider, get_rates_map

FALLBACK = {"INR": 1, "USD": 83, "EUR": 90, "GBP": 105}


class Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class CountingTransport(httpx.AsyncBaseTransport):
    def __init__(self, inner: httpx.AsyncBaseTransport) -> None:
        self.inner = inner
        self.calls: list[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        return await self.inner.handle_async_request(request)


def make_provider(transport: httpx.AsyncBaseTransport, clock: Clock | None = None) -> RateProvider:
    return RateProvider(
        base_currency="INR",
        api_url="https://rates.test/v4/latest",
        fallback_rates=FALLBACK,
        cache=RateCache(ttl_seconds=3600, clock=clock or Clock()),
        transport=transport,
    )


def failing_transport(exc: Exception) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc

    return httpx.MockTransport(handler)


class TestNoNetwork:
    @pytest.mark.parametrize("currencies", [[], ["INR"], ["INR", "inr", None, ""]])
    async def test_base_only_returns_base(self, currencies):
        transport = CountingTransport(rates_transport())
        provider = make_provider(transport)

        assert await provider.get_rates(currencies) == {"INR": 1.0}
        assert transport.calls == []


class TestFetch:
    async def test_inverts_quoted_rates(self):
        transport = CountingTransport(rates_transport())
        provider = make_provider(transport)

        rates = await get_rates_map(provider, ["USD", "EUR", "INR"])

        assert rates == {"INR": 1.0, "USD": 64.0, "EUR": 128.0}
        assert len(transport.calls) == 1
        assert str(transport.calls[0].url) == "https://rates.test/v4/latest/INR"

    async def test_missing_code_maps_to_one(self):
        provider = make_provider(rates_transport())

        rates = await provider.get_rates(["USD", "XYZ"])

        assert rates["XYZ"] == 1.0
        assert rates["USD"] == 64.0

    async def test_ignores_bad_values_in_response(self):
        payload = {"rates": {"USD": 0, "EUR": "lots", "GBP": 0.00390625}}
        provider = make_provider(rates_transport(payload))

        rates = await provider.get_rates(["USD", "EUR", "GBP"])

        assert rates == {"INR": 1.0, "USD": 1.0, "EUR": 1.0, "GBP": 256.0}


class TestFallback:
    @pytest.mark.parametrize(
        "transport",
        [
            failing_transport(httpx.ConnectError("down")),
            failing_transport(httpx.ReadTimeout("slow")),
            rates_transport(status_code=503),
            rates_transport(payload={"result": "error"}),
            rates_transport(payload={"rates": ["USD"]}),
        ],
    )
    async def test_failures_use_static_table(self, transport):
        provider = make_provider(transport)

        rates = await provider.get_rates(["USD", "GBP"])

        assert rates == {"INR": 1.0, "USD": 83.0, "GBP": 105.0}

    async def test_non_json_body_uses_static_table(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>oops</html>"))
        provider = make_provider(transport)

        assert await provider.get_rates(["EUR"]) == {"INR": 1.0, "EUR": 90.0}

    async def test_fallback_covers_every_requested_code(self):
        provider = make_provider(failing_transport(httpx.ConnectError("down")))

        rates = await provider.get_rates(["USD", "JPY"])

        assert rates == {"INR": 1.0, "USD": 83.0, "JPY": 1.0}

    async def test_failure_is_not_cached(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("down")
            return httpx.Response(200, json={"rates": {"USD": 0.015625}})

        provider = make_provider(httpx.MockTransport(handler))

        assert (await provider.get_rates(["USD"]))["USD"] == 83.0
        assert (await provider.get_rates(["USD"]))["USD"] == 64.0


class TestCache:
    async def test_reuses_table_within_ttl(self):
        clock = Clock()
        transport = CountingTransport(rates_transport())
        provider = make_provider(transport, clock)

        await provider.get_rates(["USD"])
        clock.now += 3599
        await provider.get_rates(["EUR"])

        assert len(transport.calls) == 1

    async def test_refreshes_after_ttl(self):
        clock = Clock()
        transport = CountingTransport(rates_transport())
        provider = make_provider(transport, clock)

        await provider.get_rates(["USD"])
        clock.now += 3601
        await provider.get_rates(["USD"])

        assert len(transport.calls) == 2

    def test_cache_entry_expires(self):
        clock = Clock()
        cache = RateCache(ttl_seconds=10, clock=clock)
        cache.put("INR", {"USD": 0.5})

        assert cache.get("INR") == {"USD": 0.5}
        clock.now += 11
        assert cache.get("INR") is None


class TestDeadline:
    async def test_slow_body_falls_back_within_timeout(self):
        stop = asyncio.Event()
        body = json.dumps({"rates": {"USD": 0.015625}}).encode()

        async def drip(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
            await reader.readuntil(b"\r\n\r\n")
            writer.write(
                b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n"
                + f"Content-Length: {len(body)}\r\n\r\n".encode()
            )
            try:
                # Each byte arrives well inside the per-read timeout
                for byte in body:
                    writer.write(bytes([byte]))
                    await writer.drain()
                    try:
                        await asyncio.wait_for(stop.wait(), 0.2)
                        break
                    except asyncio.TimeoutError:
                        pass
            except ConnectionError:
                pass
            finally:
                writer.close()

        server = await asyncio.start_server(drip, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        provider = RateProvider(
            base_currency="INR",
            api_url=f"http://127.0.0.1:{port}/v4/latest",
            timeout=0.5,
            fallback_rates=FALLBACK,
            transport=httpx.AsyncHTTPTransport(),
        )

        try:
            started = time.monotonic()
            rates = await provider.get_rates(["USD"])
            elapsed = time.monotonic() - started
        finally:
            stop.set()
            server.close()
            await server.wait_closed()

        assert elapsed < 1.5
        assert rates == {"INR": 1.0, "USD": 83.0}


class TestFallbackBase:
    async def test_fallback_is_rebased_onto_configured_base(self):
        provider = RateProvider(
            base_currency="USD",
            fallback_rates=FALLBACK,
            fallback_base="INR",
            transport=failing_transport(httpx.ConnectError("down")),
        )

        rates = await provider.get_rates(["EUR", "INR", "JPY"])

        assert rates["USD"] == 1.0
        assert rates["EUR"] == pytest.approx(90 / 83)
        assert rates["INR"] == pytest.approx(1 / 83)
        assert rates["JPY"] == 1.0

    def test_base_missing_from_fallback_table_converts_one_to_one(self):
        provider = RateProvider(base_currency="CHF", fallback_rates=FALLBACK, fallback_base="INR")

        assert provider.fallback_map(["USD"]) == {"CHF": 1.0, "USD": 1.0}
