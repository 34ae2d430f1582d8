from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lifeboard.db import get_db
from lifeboard.models.idea import Idea
from lifeboard.models.user import User
from lifeboard.schemas.idea import IdeaCreate, IdeaRecord, IdeaUpdate
from lifeboard.schemas.listing import ListQuery
from lifeboard.services.auth import get_current_user
from lifeboard.services.listing import filter_and_sort
from lifeboard.services.records import load_ideas

router = APIRouter(prefix="/ideas", tags=["ideas"])

REQUIRED_FIELDS = {"title", "status", "tags"}


async def _get_owned(db: AsyncSession, idea_id: str, user_id: str) -> Idea:
    result = await db.execute(select(Idea).where(Idea.id == idea_id, Idea.user_id == user_id))
    idea = result.scalar_one_or_none()
    if not idea:
        raise HTTPException(status_code=404, detail="Idea not found")
    return idea


@router.get("/", response_model=list[IdeaRecord])
async def list_ideas(
    search: str = Query(default=""),
    status: str = Query(default="all"),
    category: str = Query(default="all"),
    sort: Literal["newest", "oldest", "title"] = Query(default="newest"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ideas = await load_ideas(db, current_user.id)
    return filter_and_sort(ideas, ListQuery(search=search, status=status, category=category, sort=sort))


@router.get("/{idea_id}", response_model=IdeaRecord)
async def get_idea(
    idea_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await _get_owned(db, idea_id, current_user.id)


@router.post("/", response_model=IdeaRecord, status_code=201)
async def create_idea(
    data: IdeaCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    idea = Idea(**data.model_dump(), user_id=current_user.id)
    db.add(idea)
    await db.flush()
    await db.refresh(idea)
    return idea


@router.patch("/{idea_id}", response_model=IdeaRecord)
async def update_idea(
    idea_id: str,
    data: IdeaUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    idea = await _get_owned(db, idea_id, current_user.id)
    for key, value in data.model_dump(exclude_unset=True).items():
        if value is None and key in REQUIRED_FIELDS:
            continue
        setattr(idea, key, value)
    await db.flush()
    await db.refresh(idea)
    return idea


@router.delete("/{idea_id}")
async def delete_idea(
    idea_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    idea = await _get_owned(db, idea_id, current_user.id)
    await db.delete(idea)
    return {"message": "Idea deleted successfully"}
