from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from recommender.api.main import api_router
from recommender.services.catalog.service import catalog_service
from recommender.services.redis_service import redis_service

from .config import settings
from .version import __version__


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events (startup/shutdown).
    """
    logger.info(f"Starting favorites recommender v{__version__} ({settings.APP_ENV})")
    yield
    await redis_service.close()
    await catalog_service.close()
    logger.info("Catalog HTTP client closed")


app = FastAPI(
    title="Favorites Recommender",
    description="Recommends catalog items from a user's favorited tags and items",
    version=__version__,
    lifespan=lifespan,
    docs_url=None if settings.APP_ENV != "development" else "/docs",
    redoc_url=None if settings.APP_ENV != "development" else "/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)
