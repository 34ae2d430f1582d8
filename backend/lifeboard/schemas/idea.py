from datetime import datetime
from typing import Literal

from pydantic import BaseModel, field_validator

IdeaStatus = Literal["draft", "active", "completed", "archived"]


def _clean_title(value: str | None) -> str | None:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Title is required")
    return value


class IdeaCreate(BaseModel):
    title: str
    description: str | None = None
    status: IdeaStatus = "draft"
    category: str | None = None
    tags: list[str] = []

    @field_validator("title")
    @classmethod
    def check_title(cls, value: str) -> str:
        return _clean_title(value)

    @field_validator("tags", mode="before")
    @classmethod
    def default_tags(cls, value: list[str] | None) -> list[str]:
        return value or []


class IdeaUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    status: IdeaStatus | None = None
    category: str | None = None
    tags: list[str] | None = None

    @field_validator("title")
    @classmethod
    def check_title(cls, value: str | None) -> str | None:
        return _clean_title(value)


class IdeaRecord(BaseModel):
    id: str
    title: str
    description: str | None = None
    status: str = "draft"
    category: str | None = None
    tags: list[str] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}

    @field_validator("tags", mode="before")
    @classmethod
    def default_tags(cls, value: list[str] | None) -> list[str]:
        return value or []
