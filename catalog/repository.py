import asyncio
import logging
from typing import Any, Iterable, Mapping
import uuid

from databases import Database

from catalog.errors import StorageError
from catalog.models import Recipe


logger = logging.getLogger(__name__)


CREATE_RECIPES_TABLE = """
CREATE TABLE IF NOT EXISTS Recipes (
    id VARCHAR(36) PRIMARY KEY,
    cuisine_type VARCHAR(256),
    recipe_name VARCHAR(256),
    photo_url_small VARCHAR(2048),
    photo_url_large VARCHAR(2048),
    source_url VARCHAR(2048),
    youtube_url VARCHAR(2048),
    photo_small BLOB,
    photo_large BLOB
)
"""


CREATE_RECIPE = """
INSERT INTO Recipes(
    id, cuisine_type, recipe_name, photo_url_small, photo_url_large,
    source_url, youtube_url, photo_small, photo_large
) VALUES (
    :id, :cuisine_type, :recipe_name, :photo_url_small, :photo_url_large,
    :source_url, :youtube_url, :photo_small, :photo_large
)
"""


DELETE_RECIPES = "DELETE FROM Recipes"


LIST_RECIPES = "SELECT * FROM Recipes"


GET_RECIPE = "SELECT * FROM Recipes WHERE id = :id"


COUNT_RECIPES = "SELECT COUNT(*) AS n FROM Recipes"


ATTACH_PHOTO_SMALL = "UPDATE Recipes SET photo_small = :payload WHERE id = :id"


ATTACH_PHOTO_LARGE = "UPDATE Recipes SET photo_large = :payload WHERE id = :id"


async def create_db(db: Database) -> None:
    await db.execute(  # pyright: ignore[reportUnknownMemberType]
        query=CREATE_RECIPES_TABLE
    )


def recipe_to_values(recipe: Recipe) -> dict[str, Any]:
    return {
        "id": str(recipe.id),
        "cuisine_type": recipe.cuisine,
        "recipe_name": recipe.name,
        "photo_url_small": recipe.photo_url_small,
        "photo_url_large": recipe.photo_url_large,
        "source_url": recipe.source_url,
        "youtube_url": recipe.youtube_url,
        "photo_small": recipe.photo_small,
        "photo_large": recipe.photo_large,
    }


def recipe_from_record(record: Mapping[str, Any]) -> Recipe:
    return Recipe(
        id=uuid.UUID(record["id"]),
        cuisine=record["cuisine_type"] or "",
        name=record["recipe_name"] or "",
        photo_url_small=record["photo_url_small"] or "",
        photo_url_large=record["photo_url_large"] or "",
        source_url=record["source_url"] or "",
        youtube_url=record["youtube_url"] or "",
        photo_small=record["photo_small"],
        photo_large=record["photo_large"],
    )


class RecipesRepository:
    """Recipes stored on disk, keyed by their UUID."""

    def __init__(self, db: Database) -> None:
        self.db = db
        # SQLite takes one writer at a time.
        self._write_lock = asyncio.Lock()

    async def read_all(self) -> list[Recipe]:
        """Every stored recipe, in no particular order."""
        try:
            result = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
                LIST_RECIPES
            )
            return [recipe_from_record(r._mapping) for r in result]
        except Exception as e:
            raise StorageError("read", repr(e)) from e

    async def get(self, id: uuid.UUID) -> Recipe | None:
        try:
            result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
                GET_RECIPE, values={"id": str(id)}
            )
            return None if result is None else recipe_from_record(result._mapping)
        except Exception as e:
            raise StorageError("read", repr(e)) from e

    async def count(self) -> int:
        try:
            result = await self.db.fetch_val(  # pyright: ignore[reportUnknownMemberType]
                COUNT_RECIPES
            )
        except Exception as e:
            raise StorageError("count", repr(e)) from e
        return int(result or 0)

    async def replace_all(self, recipes: Iterable[Recipe]) -> None:
        """Swap the stored recipes for `recipes` in one transaction.

        On any failure the previous contents stay as they were.
        """
        values = [recipe_to_values(r) for r in recipes]
        try:
            async with self._write_lock, self.db.transaction():
                await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
                    DELETE_RECIPES
                )
                if values:
                    await self.db.execute_many(  # pyright: ignore[reportUnknownMemberType]
                        CREATE_RECIPE, values=values
                    )
        except Exception as e:
            raise StorageError("replace", repr(e)) from e
        logger.info("Replaced stored recipes with %d records", len(values))

    async def insert(self, recipes: Iterable[Recipe]) -> None:
        values = [recipe_to_values(r) for r in recipes]
        if not values:
            return
        try:
            async with self._write_lock, self.db.transaction():
                await self.db.execute_many(  # pyright: ignore[reportUnknownMemberType]
                    CREATE_RECIPE, values=values
                )
        except Exception as e:
            raise StorageError("insert", repr(e)) from e

    async def attach_asset(
        self,
        id: uuid.UUID,
        *,
        is_large: bool,
        payload: bytes,
    ) -> None:
        """Store an image against a recipe. Unknown ids are ignored."""
        query = ATTACH_PHOTO_LARGE if is_large else ATTACH_PHOTO_SMALL
        try:
            async with self._write_lock:
                found = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
                    GET_RECIPE, values={"id": str(id)}
                )
                if found is None:
                    logger.debug("No stored recipe %s, dropping image", id)
                    return
                await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
                    query, values={"id": str(id), "payload": payload}
                )
        except Exception as e:
            raise StorageError("attach", repr(e)) from e


PREVIEW_PHOTO = (
    "https://d3jbb8n5wk0qxi.cloudfront.net/photos/"
    "3b33a385-3e55-4ea5-9d98-13e78f840299/{size}.jpg"
)


def preview_recipes(n: int = 10) -> list[Recipe]:
    return [
        Recipe(
            id=uuid.uuid4(),
            cuisine="Canadian",
            name="BeaverTails",
            photo_url_small=PREVIEW_PHOTO.format(size="small"),
            photo_url_large=PREVIEW_PHOTO.format(size="large"),
            source_url="https://www.tastemade.com/videos/beavertails",
            youtube_url="https://www.youtube.com/watch?v=2G07UOqU2e8",
        )
        for _ in range(n)
    ]


async def seed_preview(repository: RecipesRepository, n: int = 10) -> list[Recipe]:
    """Fill the store with `n` sample recipes, for previews and tests."""
    recipes = preview_recipes(n)
    await repository.insert(recipes)
    return recipes
