from datetime import date

from pydantic import BaseModel

from lifeboard.schemas.idea import IdeaRecord


class CostSummary(BaseModel):
    active_count: int
    total_monthly: float
    total_yearly: float


class UpcomingRenewal(BaseModel):
    subscription_id: str
    name: str
    cost: float
    currency: str
    billing_cycle: str
    renewal_date: date
    days_until: int


class DashboardSummary(BaseModel):
    currency: str
    total_ideas: int
    active_ideas: int
    completed_ideas: int
    recent_ideas: list[IdeaRecord]
    costs: CostSummary
    upcoming_renewals: list[UpcomingRenewal]
