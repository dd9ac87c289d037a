from fastapi import APIRouter, Depends
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.dependencies import get_current_user
from app.models import Comment, Like, Publication, Share, User
from app.schemas import MetricsResponse
from app.cache import cache

router = APIRouter(prefix="/api/v1/metrics", tags=["metrics"])


async def _count(db: AsyncSession, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


@router.get("", response_model=MetricsResponse)
async def get_metrics(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    total_publications = await _count(db, Publication)
    total_comments = await _count(db, Comment)
    avg_comments = total_comments / total_publications if total_publications > 0 else 0

    return MetricsResponse(
        total_publications=total_publications,
        total_comments=total_comments,
        total_likes=await _count(db, Like),
        total_shares=await _count(db, Share),
        total_users=await _count(db, User),
        avg_comments_per_publication=round(avg_comments, 2),
        cache_info=cache.stats,
    )
