import logging
from urllib.parse import urlsplit

import httpx
import pydantic

from catalog.errors import (
    DecodingError,
    InvalidResponseError,
    InvalidURLError,
    NetworkError,
)
from catalog.models import Recipe, RecipesResponse


logger = logging.getLogger(__name__)


DEFAULT_CATALOG_URL = "https://d3jbb8n5wk0qxi.cloudfront.net/recipes.json"


def is_valid_url(url: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    try:
        # Raises on unbalanced brackets or a non-numeric port.
        urlsplit(url).port
        parsed = httpx.URL(url)
    except (ValueError, httpx.InvalidURL):
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.host)


def decode_recipes(content: bytes | str) -> list[Recipe]:
    try:
        resp = RecipesResponse.model_validate_json(content)
    except pydantic.ValidationError as e:
        logger.error("Decoding error: %s", e)
        raise DecodingError() from e
    return [r.to_domain() for r in resp.recipes]


class RemoteCatalog:
    """Reads the whole recipe catalog from one JSON endpoint."""

    def __init__(
        self,
        *,
        url: str = DEFAULT_CATALOG_URL,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self._client = httpx.AsyncClient() if client is None else client

    async def fetch_all(self) -> list[Recipe]:
        """All recipes in the order the server lists them.

        One GET, no retries. Either every record decodes or nothing is
        returned.
        """
        if not is_valid_url(self.url):
            raise InvalidURLError(self.url)

        logger.info("Fetching recipes from %s", self.url)
        try:
            resp = await self._client.get(self.url)
        except httpx.InvalidURL as e:
            raise InvalidURLError(self.url) from e
        except httpx.HTTPError as e:
            raise NetworkError(e) from e

        if not resp.is_success:
            logger.warning("Catalog responded with HTTP %s", resp.status_code)
            raise InvalidResponseError(resp.status_code)

        return decode_recipes(resp.content)
