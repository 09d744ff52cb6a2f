from typing import Iterable

from catalog.models import Recipe


def sort_recipes(recipes: Iterable[Recipe]) -> list[Recipe]:
    """Ascending by name, ignoring case."""
    return sorted(recipes, key=lambda r: r.name.casefold())


def filter_recipes(current: list[Recipe], query: str) -> list[Recipe]:
    """Recipes whose name or cuisine contains `query`, ignoring case.

    An empty query gives back `current` itself. Order is never changed.
    """
    if not query:
        return current
    needle = query.casefold()
    return [
        r
        for r in current
        if needle in r.name.casefold() or needle in r.cuisine.casefold()
    ]
