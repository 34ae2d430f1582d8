import logging
from datetime import date

from dateutil.relativedelta import relativedelta
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lifeboard.models.subscription import Subscription
from lifeboard.services.costs import MONTHS_PER_CYCLE
from lifeboard.services.rates import RateProvider

logger = logging.getLogger(__name__)


def next_renewal(renewal_date: date, billing_cycle: str, today: date) -> date:
    """Step ``renewal_date`` forward by whole billing cycles until it is not before ``today``."""
    step = relativedelta(months=MONTHS_PER_CYCLE.get(billing_cycle, 1))
    periods = 0
    current = renewal_date
    while current < today:
        periods += 1
        # Step from the original date so month-end renewals do not drift
        current = renewal_date + step * periods
    return current


async def roll_renewal_dates(db: AsyncSession, today: date | None = None) -> int:
    """For active subscriptions past their renewal_date, move it to the next one."""
    today = today or date.today()
    result = await db.execute(
        select(Subscription)
        .where(Subscription.status == "active")
        .where(Subscription.renewal_date < today)
    )
    subs = result.scalars().all()
    for sub in subs:
        sub.renewal_date = next_renewal(sub.renewal_date, sub.billing_cycle, today)
    await db.commit()
    if subs:
        logger.info(f"Rolled renewal dates forward for {len(subs)} subscriptions")
    return len(subs)


async def warm_rate_cache(db: AsyncSession, provider: RateProvider) -> None:
    result = await db.execute(select(Subscription.currency).distinct())
    await provider.get_rates(result.scalars().all())
