from datetime import datetime, timezone

from fastapi import Request

from lifeboard.services.rates import RateProvider, build_rate_provider


def get_now() -> datetime:
    return datetime.now(timezone.utc)


def get_rate_provider(request: Request) -> RateProvider:
    provider = getattr(request.app.state, "rate_provider", None)
    if provider is None:
        provider = build_rate_provider()
        request.app.state.rate_provider = provider
    return provider
