import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user
from app.models import User
from app.schemas import (
    CommentForm,
    CommentResponse,
    MediaForm,
    MediaResponse,
    MessageResponse,
    PublicationForm,
    PublicationResponse,
    PublicationUpdate,
    ReactionResponse,
)
from app.services import comment_service, publication_service, reaction_service

router = APIRouter(prefix="/api/v1/publications", tags=["publications"])


@router.get("", response_model=list[PublicationResponse])
async def list_publications(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await publication_service.list_publications(db)


@router.post("", response_model=PublicationResponse)
async def create_publication(
    data: PublicationForm,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await publication_service.create_publication(
        db, current_user.id, data.content, data.topic_id
    )


@router.get("/{publication_id}", response_model=PublicationResponse)
async def get_publication(
    publication_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await publication_service.get_publication(db, publication_id)


@router.put("/{publication_id}", response_model=PublicationResponse)
async def update_publication(
    publication_id: uuid.UUID,
    data: PublicationUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await publication_service.update_publication(
        db, current_user.id, publication_id, data.content
    )


@router.delete("/{publication_id}", response_model=MessageResponse)
async def delete_publication(
    publication_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await publication_service.delete_publication(db, current_user.id, publication_id)
    return {"message": "Publication deleted successfully."}


@router.post("/{publication_id}/media", response_model=MediaResponse)
async def attach_media(
    publication_id: uuid.UUID,
    data: MediaForm,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await publication_service.attach_media(
        db, current_user.id, publication_id, data.title, data.url
    )


# --- Comments ---

@router.get("/{publication_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    publication_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await comment_service.list_comments_for_publication(db, publication_id)


@router.post("/{publication_id}/comments", response_model=CommentResponse)
async def create_comment(
    publication_id: uuid.UUID,
    data: CommentForm,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await comment_service.create_comment(db, current_user.id, publication_id, data.content)


# --- Likes ---

@router.get("/{publication_id}/likes", response_model=list[ReactionResponse])
async def list_likes(
    publication_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await reaction_service.list_likes(db, publication_id)


@router.post("/{publication_id}/likes", response_model=ReactionResponse)
async def like_publication(
    publication_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await reaction_service.like_publication(db, current_user.id, publication_id)


@router.delete("/{publication_id}/likes", response_model=MessageResponse)
async def unlike_publication(
    publication_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await reaction_service.unlike_publication(db, current_user.id, publication_id)
    return {"message": "Like removed."}


# --- Shares ---

@router.get("/{publication_id}/shares", response_model=list[ReactionResponse])
async def list_shares(
    publication_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await reaction_service.list_shares(db, publication_id)


@router.post("/{publication_id}/shares", response_model=ReactionResponse)
async def share_publication(
    publication_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await reaction_service.share_publication(db, current_user.id, publication_id)


@router.delete("/{publication_id}/shares", response_model=MessageResponse)
async def unshare_publication(
    publication_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await reaction_service.unshare_publication(db, current_user.id, publication_id)
    return {"message": "Share removed."}
