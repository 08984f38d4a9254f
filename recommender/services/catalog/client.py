import asyncio
from typing import Any

import httpx
from loguru import logger

from recommender.core.config import settings
from recommender.core.version import __version__


class CatalogClient:
    """
    Asynchronous HTTP client for the catalog backend with retry logic and logging.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        backoff: float = 0.5,
    ):
        self.base_url = base_url or settings.CATALOG_API_URL
        self.timeout = settings.CATALOG_TIMEOUT if timeout is None else timeout
        self.max_retries = max_retries or settings.CATALOG_MAX_RETRIES
        self.backoff = backoff
        self.headers = {
            "User-Agent": f"FavoritesRecommender/{__version__}",
            "Accept": "application/json",
        }
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def get_client(self) -> httpx.AsyncClient:
        """Get or create the httpx.AsyncClient instance."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close the underlying HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def get(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """GET with exponential backoff; returns the decoded JSON body."""
        client = await self.get_client()
        last_exception: Exception | None = None

        for attempt in range(1, self.max_retries + 1):
            try:
                response = await client.get(url, params=params)
                response.raise_for_status()
                return response.json()
            except (httpx.HTTPStatusError, httpx.RequestError) as e:
                last_exception = e
                if attempt < self.max_retries:
                    wait_time = self.backoff * (2 ** (attempt - 1))
                    logger.warning(
                        f"Catalog request failed (GET {url} {params}): {e}. "
                        f"Retrying in {wait_time}s... (Attempt {attempt}/{self.max_retries})"
                    )
                    await asyncio.sleep(wait_time)
                else:
                    logger.error(f"Catalog request failed after {self.max_retries} attempts: {e}")

        raise last_exception
