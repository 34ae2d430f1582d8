from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lifeboard.config import settings
from lifeboard.db import get_db
from lifeboard.dependencies import get_now, get_rate_provider
from lifeboard.models.user import User
from lifeboard.schemas.dashboard import DashboardSummary, UpcomingRenewal
from lifeboard.schemas.listing import ListQuery
from lifeboard.schemas.subscription import SubscriptionRecord
from lifeboard.services.aggregation import aggregate, collect_currencies, days_until, upcoming_renewals
from lifeboard.services.auth import get_current_user
from lifeboard.services.listing import filter_and_sort
from lifeboard.services.rates import RateProvider, get_rates_map
from lifeboard.services.records import load_ideas, load_subscriptions

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _upcoming(subs: list[SubscriptionRecord], now: datetime) -> list[UpcomingRenewal]:
    return [
        UpcomingRenewal(
            subscription_id=s.id,
            name=s.name,
            cost=s.cost,
            currency=s.currency,
            billing_cycle=s.billing_cycle,
            renewal_date=s.renewal_date,
            days_until=days_until(s.renewal_date, now),
        )
        for s in subs
    ]


@router.get("/summary", response_model=DashboardSummary)
async def get_summary(
    limit: int = Query(default=settings.DASHBOARD_RENEWAL_LIMIT, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    rate_provider: RateProvider = Depends(get_rate_provider),
    now: datetime = Depends(get_now),
):
    ideas = await load_ideas(db, current_user.id)
    subs = await load_subscriptions(db, current_user.id)

    rates = await get_rates_map(rate_provider, collect_currencies(subs))
    upcoming = upcoming_renewals(subs, now)[:limit]

    return DashboardSummary(
        currency=rate_provider.base_currency,
        total_ideas=len(ideas),
        active_ideas=sum(1 for i in ideas if i.status == "active"),
        completed_ideas=sum(1 for i in ideas if i.status == "completed"),
        recent_ideas=filter_and_sort(ideas, ListQuery(sort="newest"))[:3],
        costs=aggregate(subs, rates),
        upcoming_renewals=_upcoming(upcoming, now),
    )


@router.get("/upcoming", response_model=list[UpcomingRenewal])
async def get_upcoming(
    days: int = Query(default=30, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    subs = await load_subscriptions(db, current_user.id)
    return _upcoming(upcoming_renewals(subs, now, window_days=days), now)
