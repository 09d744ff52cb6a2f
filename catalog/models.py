from dataclasses import dataclass, replace
from typing import Self
import uuid

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True)
class Recipe:
    id: uuid.UUID
    cuisine: str
    name: str
    photo_url_small: str = ""
    photo_url_large: str = ""
    source_url: str = ""
    youtube_url: str = ""
    # Cached image payloads, absent until the asset cache gets to them.
    photo_small: bytes | None = None
    photo_large: bytes | None = None

    def __repr__(self) -> str:
        return f"<Recipe(id={self.id}, name={self.name})>"

    def with_photo(self, payload: bytes, *, is_large: bool) -> Self:
        if is_large:
            return replace(self, photo_large=payload)
        return replace(self, photo_small=payload)


@dataclass(frozen=True)
class RecipeRow:
    """What a list row needs to know about a recipe."""

    id: uuid.UUID
    cuisine: str
    name: str
    photo_url_small: str

    @classmethod
    def from_recipe(cls, recipe: Recipe) -> Self:
        return cls(
            id=recipe.id,
            cuisine=recipe.cuisine,
            name=recipe.name,
            photo_url_small=recipe.photo_url_small,
        )


def parse_uuid(value: str | None) -> uuid.UUID:
    """Parse a UUID string, or make up a new one if it does not parse."""
    if not value:
        return uuid.uuid4()
    try:
        return uuid.UUID(value.lower())
    except ValueError:
        return uuid.uuid4()


class RecipeTransfer(BaseModel):
    """A recipe as it arrives over the wire."""

    model_config = ConfigDict(extra="ignore")

    cuisine: str
    name: str
    uuid: str
    photo_url_large: str | None = None
    photo_url_small: str | None = None
    source_url: str | None = None
    youtube_url: str | None = None

    def to_domain(self) -> Recipe:
        # Missing optional strings become "", so missing and empty look the same.
        return Recipe(
            id=parse_uuid(self.uuid),
            cuisine=self.cuisine,
            name=self.name,
            photo_url_small=self.photo_url_small or "",
            photo_url_large=self.photo_url_large or "",
            source_url=self.source_url or "",
            youtube_url=self.youtube_url or "",
        )


class RecipesResponse(BaseModel):
    recipes: list[RecipeTransfer]
