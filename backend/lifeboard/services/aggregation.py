import math
from collections.abc import Iterable, Sequence
from datetime import date, datetime, time, timedelta

from lifeboard.schemas.dashboard import CostSummary
from lifeboard.schemas.subscription import SubscriptionRecord
from lifeboard.services.costs import normalize_currency, to_monthly_base

ONE_DAY = timedelta(days=1)


def collect_currencies(subscriptions: Iterable[SubscriptionRecord]) -> list[str]:
    """Distinct currency codes of ``subscriptions``, in first-seen order."""
    codes: list[str] = []
    for sub in subscriptions:
        if not sub.currency:
            continue
        code = normalize_currency(sub.currency)
        if code not in codes:
            codes.append(code)
    return codes


def aggregate(subscriptions: Iterable[SubscriptionRecord], rates: dict[str, float]) -> CostSummary:
    active = [s for s in subscriptions if s.status == "active"]
    total_monthly = sum(
        (to_monthly_base(s.cost, s.currency, s.billing_cycle, rates) for s in active),
        0.0,
    )
    return CostSummary(
        active_count=len(active),
        total_monthly=total_monthly,
        total_yearly=total_monthly * 12,
    )


def renewal_moment(renewal: date | datetime, now: datetime) -> datetime:
    """A date-only renewal happens at the start of that day in ``now``'s timezone."""
    if isinstance(renewal, datetime):
        if (renewal.tzinfo is None) != (now.tzinfo is None):
            return renewal.replace(tzinfo=now.tzinfo)
        return renewal
    return datetime.combine(renewal, time.min, tzinfo=now.tzinfo)


def days_until(renewal: date | datetime, now: datetime) -> int:
    return math.ceil((renewal_moment(renewal, now) - now) / ONE_DAY)


def upcoming_renewals(
    subscriptions: Sequence[SubscriptionRecord],
    now: datetime,
    window_days: int = 30,
) -> list[SubscriptionRecord]:
    """Active subscriptions renewing within ``window_days`` of ``now``, soonest first."""
    if window_days < 0:
        raise ValueError("window_days must not be negative")
    cutoff = now + timedelta(days=window_days)
    matching = [
        s
        for s in subscriptions
        if s.status == "active" and s.renewal_date is not None
        and now <= renewal_moment(s.renewal_date, now) <= cutoff
    ]
    return sorted(matching, key=lambda s: renewal_moment(s.renewal_date, now))
