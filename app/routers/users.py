import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user
from app.models import User
from app.schemas import (
    AuthResponse,
    FriendshipStatus,
    MessageResponse,
    PublicationResponse,
    UserLogin,
    UserRegister,
    UserResponse,
    UserUpdate,
)
from app.services import publication_service, user_service

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post("/register", response_model=AuthResponse)
async def register(data: UserRegister, db: AsyncSession = Depends(get_db)):
    return await user_service.register(
        db, data.email, data.password, data.first_name, data.last_name
    )


@router.post("/login", response_model=AuthResponse)
async def login(data: UserLogin, db: AsyncSession = Depends(get_db)):
    return await user_service.login(db, data.email, data.password)


@router.get("", response_model=list[UserResponse])
async def list_users(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await user_service.list_users(db)


@router.get("/me", response_model=UserResponse)
async def get_me(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await user_service.get_user(db, current_user.id)


@router.put("/me", response_model=UserResponse)
async def update_me(
    data: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await user_service.update_profile(db, current_user.id, data.model_dump(exclude_unset=True))


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await user_service.get_user(db, user_id)


@router.get("/{user_id}/publications", response_model=list[PublicationResponse])
async def list_user_publications(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await publication_service.list_publications_by_user(db, user_id)


# --- Friends ---

@router.get("/{user_id}/friends", response_model=list[UserResponse])
async def list_friends(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await user_service.list_friends(db, user_id)


@router.get("/{user_id}/is-friend", response_model=FriendshipStatus)
async def is_friend(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"are_friends": await user_service.are_friends(db, current_user.id, user_id)}


@router.post("/{user_id}/friend", response_model=MessageResponse)
async def add_friend(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await user_service.add_friend(db, current_user.id, user_id)
    return {"message": "Friend added successfully."}


@router.delete("/{user_id}/friend", response_model=MessageResponse)
async def remove_friend(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await user_service.remove_friend(db, current_user.id, user_id)
    return {"message": "Friend removed successfully."}
