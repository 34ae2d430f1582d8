from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lifeboard.db import get_db
from lifeboard.dependencies import get_rate_provider
from lifeboard.models.subscription import Subscription
from lifeboard.models.user import User
from lifeboard.schemas.listing import ListQuery
from lifeboard.schemas.subscription import (
    SubscriptionCreate, SubscriptionList, SubscriptionRecord, SubscriptionUpdate,
)
from lifeboard.services.aggregation import aggregate, collect_currencies
from lifeboard.services.auth import get_current_user
from lifeboard.services.listing import filter_and_sort
from lifeboard.services.rates import RateProvider, get_rates_map
from lifeboard.services.records import load_subscriptions

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])

REQUIRED_FIELDS = {"name", "cost", "currency", "billing_cycle", "renewal_date", "status"}

SortKey = Literal["newest", "oldest", "name", "cost-high", "cost-low", "renewal"]


async def _get_owned(db: AsyncSession, sub_id: str, user_id: str) -> Subscription:
    result = await db.execute(
        select(Subscription).where(Subscription.id == sub_id, Subscription.user_id == user_id)
    )
    sub = result.scalar_one_or_none()
    if not sub:
        raise HTTPException(status_code=404, detail="Subscription not found")
    return sub


def _categories(subs: list[SubscriptionRecord]) -> list[str]:
    return sorted({s.category for s in subs if s.category})


@router.get("/", response_model=SubscriptionList)
async def list_subscriptions(
    search: str = Query(default=""),
    status: str = Query(default="all"),
    category: str = Query(default="all"),
    sort: SortKey = Query(default="newest"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    rate_provider: RateProvider = Depends(get_rate_provider),
):
    subs = await load_subscriptions(db, current_user.id)
    shown = filter_and_sort(subs, ListQuery(search=search, status=status, category=category, sort=sort))
    rates = await get_rates_map(rate_provider, collect_currencies(shown))
    summary = aggregate(shown, rates)
    return SubscriptionList(
        subscriptions=shown,
        categories=_categories(subs),
        active_count=summary.active_count,
        total_monthly=summary.total_monthly,
        currency=rate_provider.base_currency,
    )


@router.get("/categories", response_model=list[str])
async def list_categories(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _categories(await load_subscriptions(db, current_user.id))


@router.get("/{sub_id}", response_model=SubscriptionRecord)
async def get_subscription(
    sub_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await _get_owned(db, sub_id, current_user.id)


@router.post("/", response_model=SubscriptionRecord, status_code=201)
async def create_subscription(
    data: SubscriptionCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    sub = Subscription(**data.model_dump(), user_id=current_user.id)
    db.add(sub)
    await db.flush()
    await db.refresh(sub)
    return sub


@router.patch("/{sub_id}", response_model=SubscriptionRecord)
async def update_subscription(
    sub_id: str,
    data: SubscriptionUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    sub = await _get_owned(db, sub_id, current_user.id)
    for key, value in data.model_dump(exclude_unset=True).items():
        if value is None and key in REQUIRED_FIELDS:
            continue
        setattr(sub, key, value)
    await db.flush()
    await db.refresh(sub)
    return sub


@router.delete("/{sub_id}")
async def delete_subscription(
    sub_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    sub = await _get_owned(db, sub_id, current_user.id)
    await db.delete(sub)
    return {"message": "Subscription deleted successfully"}
