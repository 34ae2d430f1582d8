import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lifeboard.db import get_db
from lifeboard.models.user import User
from lifeboard.schemas.user import AuthResponse, PasswordChange, UserLogin, UserRegister, UserResponse
from lifeboard.services.auth import (
    authenticate_user,
    clear_session_cookie,
    create_session_token,
    get_current_user,
    hash_password,
    set_session_cookie,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _start_session(response: Response, user: User, message: str) -> AuthResponse:
    token = create_session_token(user)
    set_session_cookie(response, token)
    return AuthResponse(message=message, user=UserResponse.model_validate(user), access_token=token)


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(data: UserRegister, response: Response, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).where(User.email == data.email))
    if result.scalar_one_or_none():
        raise HTTPException(status_code=409, detail="User with this email already exists")

    user = User(email=data.email, password_hash=hash_password(data.password), name=data.name)
    db.add(user)
    await db.flush()
    await db.refresh(user)
    logger.info(f"Registered user {user.id}")
    return _start_session(response, user, "User created successfully")


@router.post("/login", response_model=AuthResponse)
async def login(data: UserLogin, response: Response, db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(db, data.email, data.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return _start_session(response, user, "Login successful")


@router.post("/logout")
async def logout(response: Response):
    clear_session_cookie(response)
    return {"message": "Logged out"}


@router.post("/change-password")
async def change_password(
    data: PasswordChange,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not verify_password(data.current_password, current_user.password_hash):
        raise HTTPException(status_code=401, detail="Current password is incorrect")
    current_user.password_hash = hash_password(data.new_password)
    await db.flush()
    return {"message": "Password changed successfully"}


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    return current_user
