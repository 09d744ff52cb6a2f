import asyncio
import logging
from typing import Awaitable, Callable, Iterable
import uuid

import httpx

from catalog.models import Recipe
from catalog.remote import is_valid_url
from catalog.repository import RecipesRepository


logger = logging.getLogger(__name__)


type AssetCallback = Callable[[uuid.UUID, bool, bytes], Awaitable[None]]


class AssetCache:
    """Downloads recipe photos and files them against the stored recipes.

    Best effort. A photo that fails is logged and skipped, the rest carry on.
    """

    def __init__(
        self,
        repository: RecipesRepository,
        *,
        client: httpx.AsyncClient | None = None,
        concurrency: int = 4,
    ) -> None:
        self.repository = repository
        self._client = httpx.AsyncClient() if client is None else client
        self._limit = asyncio.Semaphore(max(1, concurrency))

    async def download(self, url: str) -> bytes:
        async with self._limit:
            resp = await self._client.get(url)
        resp.raise_for_status()
        return resp.content

    async def _cache_one(
        self,
        recipe: Recipe,
        *,
        is_large: bool,
        on_cached: AssetCallback | None,
    ) -> bool:
        url = recipe.photo_url_large if is_large else recipe.photo_url_small
        if not is_valid_url(url):
            logger.warning("Skipping photo for %s, bad URL %r", recipe.name, url)
            return False

        try:
            payload = await self.download(url)
            await self.repository.attach_asset(
                recipe.id, is_large=is_large, payload=payload
            )
            if on_cached is not None:
                await on_cached(recipe.id, is_large, payload)
        except Exception as e:
            logger.warning("Could not cache photo %s for %s: %r", url, recipe.name, e)
            return False
        return True

    async def cache_assets(
        self,
        recipes: Iterable[Recipe],
        *,
        on_cached: AssetCallback | None = None,
    ) -> int:
        """Cache the small and large photo of every recipe.

        `on_cached` hears about every photo that was downloaded and filed.
        Returns how many were.
        """
        coros = [
            self._cache_one(recipe, is_large=is_large, on_cached=on_cached)
            for recipe in recipes
            for is_large in (False, True)
        ]
        results = await asyncio.gather(*coros)
        cached = sum(results)
        logger.info("Cached %d of %d recipe photos", cached, len(results))
        return cached
