import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.cache import cache
from app.config import settings
from app.handlers import register_exception_handlers
from app.middleware import RequestTimingMiddleware
from app.routers import comments, metrics, notifications, publications, topics, users

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # The API keeps working without Redis; the cache degrades to no-ops.
    await cache.connect()
    logger.info("Social Platform API started (%s)", settings.APP_ENV)
    yield
    await cache.disconnect()


app = FastAPI(
    title="Social Platform API",
    description="Publications, comments, reactions, topics, friendships and notifications",
    version="1.0.0",
    lifespan=lifespan,
)

# Middleware
app.add_middleware(RequestTimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Routers
app.include_router(users.router)
app.include_router(publications.router)
app.include_router(comments.router)
app.include_router(topics.router)
app.include_router(notifications.router)
app.include_router(metrics.router)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0"}
