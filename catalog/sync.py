import asyncio
from enum import Enum
import logging
from typing import Any, Coroutine, Protocol
import uuid

from catalog.assets import AssetCache
from catalog.errors import CatalogError
from catalog.models import Recipe
from catalog.search import filter_recipes, sort_recipes


logger = logging.getLogger(__name__)


class SyncStatus(Enum):
    idle = "idle"
    loading = "loading"
    refreshing = "refreshing"


class RecipeSource(Protocol):
    async def fetch_all(self) -> list[Recipe]:
        ...


class RecipeStore(Protocol):
    async def read_all(self) -> list[Recipe]:
        ...

    async def replace_all(self, recipes: list[Recipe]) -> None:
        ...


class SyncEngine:
    """Keeps the local store and the in-memory recipe list in step with the
    remote catalog.

    The recipe list, the refreshing flag and the error message are only
    changed here, each change made while holding one lock. Only one refresh
    runs at a time; asking for another while it runs does nothing.
    """

    def __init__(
        self,
        *,
        source: RecipeSource,
        store: RecipeStore,
        assets: AssetCache | None = None,
    ) -> None:
        self.source = source
        self.store = store
        self.assets = assets
        self._recipes: list[Recipe] = []
        self._is_refreshing = False
        self._loading = 0
        self._error_message: str | None = None
        # Bumped whenever a new list is shown.
        self._generation = 0
        self._lock = asyncio.Lock()
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def recipes(self) -> list[Recipe]:
        return list(self._recipes)

    @property
    def is_refreshing(self) -> bool:
        return self._is_refreshing

    @property
    def error_message(self) -> str | None:
        return self._error_message

    @property
    def status(self) -> SyncStatus:
        if self._is_refreshing:
            return SyncStatus.refreshing
        if self._loading:
            return SyncStatus.loading
        return SyncStatus.idle

    def get(self, id: uuid.UUID) -> Recipe | None:
        return next((r for r in self._recipes if r.id == id), None)

    def filtered(self, query: str) -> list[Recipe]:
        return filter_recipes(self.recipes, query)

    async def _set_recipes(
        self, recipes: list[Recipe], *, since: int | None = None
    ) -> bool:
        """Show `recipes`. With `since`, only if nothing newer was shown after
        that generation."""
        async with self._lock:
            if since is not None and since != self._generation:
                return False
            self._recipes = sort_recipes(recipes)
            self._error_message = None
            self._generation += 1
        return True

    async def _record_error(self, error: Exception) -> None:
        logger.error("Recipe list error: %s", error)
        async with self._lock:
            self._error_message = str(error)

    async def load(self, *, network_fallback: bool = True) -> None:
        """Fill the list from the local store.

        An empty store triggers a full refresh instead. Failures end up in
        `error_message` and leave the current list alone.
        """
        async with self._lock:
            self._loading += 1
            generation = self._generation
        try:
            recipes = await self.store.read_all()
        except CatalogError as e:
            await self._record_error(e)
            return
        finally:
            async with self._lock:
                self._loading -= 1

        if self._generation != generation:
            logger.debug("A newer recipe list was shown while loading, dropping it")
            return

        if not recipes and network_fallback:
            logger.info("Local store is empty, refreshing from the network")
            try:
                await self.refresh()
            except CatalogError:
                pass  # recorded by refresh
            return

        if await self._set_recipes(recipes, since=generation):
            logger.info("Loaded %d recipes from the local store", len(recipes))

    async def refresh(self) -> list[Recipe] | None:
        """Fetch the catalog, replace the stored recipes with it and show it.

        Returns the fetched recipes in server order, or None if a refresh was
        already running. Errors are recorded and raised again. Photo caching
        is started afterwards and not waited for.
        """
        async with self._lock:
            if self._is_refreshing:
                logger.debug("Refresh already running, skipping")
                return None
            self._is_refreshing = True

        try:
            fetched = await self.source.fetch_all()
            await self.store.replace_all(fetched)
            await self._set_recipes(fetched)
        except CatalogError as e:
            await self._record_error(e)
            raise
        finally:
            async with self._lock:
                self._is_refreshing = False

        logger.info("Refreshed %d recipes", len(fetched))
        if self.assets is not None:
            self._spawn(
                self.assets.cache_assets(fetched, on_cached=self._apply_asset)
            )
        return fetched

    async def get_from_network(self) -> list[Recipe]:
        """Show the remote catalog without storing it."""
        async with self._lock:
            self._loading += 1
        try:
            fetched = await self.source.fetch_all()
        except CatalogError as e:
            await self._record_error(e)
            raise
        finally:
            async with self._lock:
                self._loading -= 1

        await self._set_recipes(fetched)
        return fetched

    async def _apply_asset(
        self, id: uuid.UUID, is_large: bool, payload: bytes
    ) -> None:
        async with self._lock:
            self._recipes = [
                r.with_photo(payload, is_large=is_large) if r.id == id else r
                for r in self._recipes
            ]

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait_for_assets(self) -> None:
        """Wait for any photo caching still in flight."""
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def aclose(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
