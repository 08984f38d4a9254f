import asyncio
from collections.abc import Iterable

from loguru import logger

from recommender.core.config import settings
from recommender.core.exceptions import CatalogUnavailableError
from recommender.models.item import Item
from recommender.services.catalog.service import CatalogGateway


class CandidateAggregator:
    """
    Fans out one catalog query per term and merges the results into an ordered candidate map.

    Canonical order: tag-term results in term order, then cast-term results in term order,
    gateway order within a term. The map is rebuilt from term order after the fan-out, so
    completion order never leaks into the ranking tie-break.
    """

    def __init__(self, gateway: CatalogGateway, concurrency: int | None = None):
        self.gateway = gateway
        self.concurrency = max(1, concurrency or settings.CATALOG_FETCH_CONCURRENCY)

    async def collect(
        self,
        tag_terms: list[str],
        cast_terms: list[str],
        current_item_id: str | None = None,
        exclude_ids: Iterable[str] = (),
        favorite_ids: Iterable[str] = (),
    ) -> dict[str, Item]:
        jobs = [("tag", term, self.gateway.fetch_by_tag) for term in tag_terms]
        jobs += [("cast", term, self.gateway.fetch_by_cast) for term in cast_terms]
        if not jobs:
            return {}

        skip = set(exclude_ids) | set(favorite_ids)
        if current_item_id:
            skip.add(current_item_id)

        # Semaphore is per call so it never outlives the event loop that created it
        sem = asyncio.Semaphore(self.concurrency)

        async def _fetch(fetch, term: str) -> list[Item]:
            async with sem:
                return await fetch(term)

        batches = await asyncio.gather(*(_fetch(fetch, term) for _, term, fetch in jobs), return_exceptions=True)

        candidates: dict[str, Item] = {}
        failed = 0
        for (kind, term, _), batch in zip(jobs, batches):
            if isinstance(batch, CatalogUnavailableError):
                failed += 1
                logger.warning(f"Skipping {kind} term '{term}': {batch}")
                continue
            if isinstance(batch, Exception):
                failed += 1
                logger.warning(f"Skipping {kind} term '{term}' after unexpected error: {batch!r}")
                continue
            if isinstance(batch, BaseException):
                raise batch
            for item in batch:
                if item.id in skip or item.id in candidates:
                    continue
                candidates[item.id] = item

        if failed:
            logger.info(f"{failed}/{len(jobs)} catalog lookups failed; {len(candidates)} candidates collected")
        return candidates
