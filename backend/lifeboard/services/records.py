"""Loading of a user's rows as typed records for the cost engine and list views."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lifeboard.models.idea import Idea
from lifeboard.models.subscription import Subscription
from lifeboard.schemas.idea import IdeaRecord
from lifeboard.schemas.subscription import SubscriptionRecord


async def load_subscriptions(db: AsyncSession, user_id: str) -> list[SubscriptionRecord]:
    result = await db.execute(
        select(Subscription)
        .where(Subscription.user_id == user_id)
        .order_by(Subscription.created_at, Subscription.id)
    )
    return [SubscriptionRecord.model_validate(s) for s in result.scalars().all()]


async def load_ideas(db: AsyncSession, user_id: str) -> list[IdeaRecord]:
    result = await db.execute(
        select(Idea)
        .where(Idea.user_id == user_id)
        .order_by(Idea.created_at, Idea.id)
    )
    return [IdeaRecord.model_validate(i) for i in result.scalars().all()]
