import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user
from app.models import User
from app.schemas import MessageResponse, PublicationResponse, TopicForm, TopicResponse
from app.services import publication_service, topic_service

router = APIRouter(prefix="/api/v1/topics", tags=["topics"])


@router.get("", response_model=list[TopicResponse])
async def list_topics(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await topic_service.list_topics(db)


@router.post("", response_model=TopicResponse)
async def create_topic(
    data: TopicForm,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await topic_service.create_topic(db, current_user.id, data.title, data.topic_url)


@router.get("/{topic_id}", response_model=TopicResponse)
async def get_topic(
    topic_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await topic_service.get_topic(db, topic_id)


@router.delete("/{topic_id}", response_model=MessageResponse)
async def delete_topic(
    topic_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await topic_service.delete_topic(db, current_user.id, topic_id)
    return {"message": "Topic deleted successfully."}


@router.get("/{topic_id}/publications", response_model=list[PublicationResponse])
async def list_topic_publications(
    topic_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await publication_service.list_publications_by_topic(db, topic_id)


@router.post("/{topic_id}/follow", response_model=MessageResponse)
async def follow_topic(
    topic_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await topic_service.follow_topic(db, current_user.id, topic_id)
    return {"message": "Topic followed."}


@router.delete("/{topic_id}/follow", response_model=MessageResponse)
async def unfollow_topic(
    topic_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await topic_service.unfollow_topic(db, current_user.id, topic_id)
    return {"message": "Topic unfollowed."}
