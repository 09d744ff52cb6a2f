import asyncio
from pathlib import Path
from typing import AsyncIterator
import uuid

from databases import Database
import pytest
import pytest_asyncio

from catalog.errors import CatalogError
from catalog.models import Recipe
from catalog.repository import RecipesRepository, create_db


CATALOG_JSON = b"""
{
    "recipes": [
        {
            "cuisine": "Malaysian",
            "name": "Apam Balik",
            "photo_url_large": "https://photos.test/apam/large.jpg",
            "photo_url_small": "https://photos.test/apam/small.jpg",
            "source_url": "https://www.nyonyacooking.com/recipes/apam-balik~SJ5WuvsDf9WQ",
            "uuid": "0c6ca6e7-e32a-4053-b824-1dbf749910d8",
            "youtube_url": "https://www.youtube.com/watch?v=6R8ffRRJcrg"
        },
        {
            "cuisine": "British",
            "name": "Apple & Blackberry Crumble",
            "photo_url_large": "https://photos.test/crumble/large.jpg",
            "photo_url_small": "https://photos.test/crumble/small.jpg",
            "uuid": "599344f4-3c5c-4cca-b914-2210e3b3312f"
        }
    ]
}
"""


def make_recipe(name: str, cuisine: str = "British", **kwargs: str) -> Recipe:
    return Recipe(id=uuid.uuid4(), cuisine=cuisine, name=name, **kwargs)


class FakeSource:
    """Stands in for the remote catalog."""

    def __init__(
        self,
        recipes: list[Recipe] | None = None,
        *,
        error: CatalogError | None = None,
    ) -> None:
        self.recipes = [] if recipes is None else recipes
        self.error = error
        self.calls = 0
        self.started = asyncio.Event()
        self.gate: asyncio.Event | None = None

    async def fetch_all(self) -> list[Recipe]:
        self.calls += 1
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.recipes)


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'recipes.db'}"


@pytest_asyncio.fixture
async def db(db_url: str) -> AsyncIterator[Database]:
    database = Database(db_url)
    await database.connect()
    await create_db(database)
    yield database
    await database.disconnect()


@pytest.fixture
def repository(db: Database) -> RecipesRepository:
    return RecipesRepository(db)
