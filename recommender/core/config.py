from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from recommender.core.version import __version__


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
    )

    PORT: int = 8000
    APP_ENV: Literal["development", "production"] = "production"

    REDIS_URL: str = "redis://redis:6379/0"
    # Maximum number of connections Redis client will open per process
    REDIS_MAX_CONNECTIONS: int = 20
    # One key per user, the whole profile is stored as a single JSON value
    PREFERENCE_KEY_PREFIX: str = "situationcd:wishlist:"

    CATALOG_API_URL: str = "http://catalog:8080/api"
    CATALOG_TIMEOUT: float = 10.0
    CATALOG_MAX_RETRIES: int = 3
    # At most 3 tag + 2 cast fetches per request, so 5 never queues
    CATALOG_FETCH_CONCURRENCY: int = 5

    RECOMMENDATION_TAG_TERMS: int = 3
    RECOMMENDATION_CAST_TERMS: int = 2
    RECOMMENDATION_LIMIT: int = 6
    # Generations and published runs are kept in memory per user, bounded and expiring
    RECOMMENDATION_STATE_MAX_ENTRIES: int = 10000
    RECOMMENDATION_STATE_TTL_SECONDS: int = 86400


settings = Settings()

APP_VERSION = __version__
