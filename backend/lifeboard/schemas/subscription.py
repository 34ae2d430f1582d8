from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from lifeboard.services.costs import normalize_currency, parse_cost

BillingCycle = Literal["monthly", "quarterly", "yearly"]
SubscriptionStatus = Literal["active", "cancelled", "paused"]


def _clean_name(value: str | None) -> str | None:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Name is required")
    return value


class SubscriptionBase(BaseModel):
    name: str
    description: str | None = None
    cost: float = Field(ge=0)
    currency: str | None = None
    billing_cycle: BillingCycle = "monthly"
    renewal_date: date
    category: str | None = None
    status: SubscriptionStatus = "active"
    website: str | None = None


class SubscriptionCreate(SubscriptionBase):
    currency: str | None = Field(default=None, validate_default=True)

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _clean_name(value)

    @field_validator("currency")
    @classmethod
    def default_currency(cls, value: str | None) -> str:
        return normalize_currency(value)


class SubscriptionUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    cost: float | None = Field(default=None, ge=0)
    currency: str | None = None
    billing_cycle: BillingCycle | None = None
    renewal_date: date | None = None
    category: str | None = None
    status: SubscriptionStatus | None = None
    website: str | None = None

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str | None) -> str | None:
        return _clean_name(value)

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, value: str | None) -> str | None:
        return normalize_currency(value) if value else None


class SubscriptionRecord(BaseModel):
    """A stored subscription as the cost engine sees it.

    Built from ORM rows by ``lifeboard.services.records``; cost and currency
    are normalized here so nothing downstream has to coerce them again.
    """

    id: str
    name: str
    description: str | None = None
    cost: float = 0.0
    currency: str
    billing_cycle: str = "monthly"
    renewal_date: date
    category: str | None = None
    status: str = "active"
    website: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}

    @field_validator("cost", mode="before")
    @classmethod
    def coerce_cost(cls, value: object) -> float:
        return parse_cost(value)

    @field_validator("currency", mode="before")
    @classmethod
    def coerce_currency(cls, value: str | None) -> str:
        return normalize_currency(value)


class SubscriptionList(BaseModel):
    subscriptions: list[SubscriptionRecord]
    categories: list[str]
    active_count: int
    total_monthly: float
    currency: str
