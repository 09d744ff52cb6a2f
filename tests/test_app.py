from pathlib import Path
from typing import Iterator
import uuid

import httpx
import pytest
from starlette.testclient import TestClient

from app.app import create_app
from app.config import Config
from tests.conftest import CATALOG_JSON


CATALOG_URL = "https://catalog.test/recipes.json"
HTML_DIR = Path(__file__).parent.parent / "assets" / "html"
APAM_BALIK_ID = "0c6ca6e7-e32a-4053-b824-1dbf749910d8"


class Server:
    def __init__(self) -> None:
        self.catalog_status = 200

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if str(request.url) == CATALOG_URL:
            return httpx.Response(self.catalog_status, content=CATALOG_JSON)
        return httpx.Response(200, content=b"jpeg")


@pytest.fixture
def server() -> Server:
    return Server()


@pytest.fixture
def client(db_url: str, server: Server) -> Iterator[TestClient]:
    cfg = Config(
        db_url=db_url,
        catalog_url=CATALOG_URL,
        html_dir=HTML_DIR,
        cache_assets=False,
    )
    app = create_app(cfg, transport=httpx.MockTransport(server))
    with TestClient(app) as client:
        yield client


def test_first_start_fills_list_from_network(client: TestClient) -> None:
    resp = client.get("/")

    assert resp.status_code == 200
    assert "Apam Balik" in resp.text
    assert "Apple &amp; Blackberry Crumble" in resp.text
    assert resp.text.index("Apam Balik") < resp.text.index("Apple &amp;")


def test_search(client: TestClient) -> None:
    resp = client.get("/", params={"q": "british"})

    assert "Apple &amp; Blackberry Crumble" in resp.text
    assert "Apam Balik" not in resp.text


def test_search_with_no_matches(client: TestClient) -> None:
    resp = client.get("/", params={"q": "sushi"})
    assert "No recipes found." in resp.text


def test_recipe_detail(client: TestClient) -> None:
    resp = client.get(f"/recipes/{APAM_BALIK_ID}")

    assert resp.status_code == 200
    assert "Apam Balik" in resp.text
    assert "Malaysian" in resp.text
    assert "https://www.youtube.com/watch?v=6R8ffRRJcrg" in resp.text


def test_unknown_recipe(client: TestClient) -> None:
    assert client.get(f"/recipes/{uuid.uuid4()}").status_code == 404


def test_photo_redirects_until_cached(client: TestClient) -> None:
    resp = client.get(
        f"/recipes/{APAM_BALIK_ID}/photo/small", follow_redirects=False
    )

    assert resp.status_code == 307
    assert resp.headers["location"] == "https://photos.test/apam/small.jpg"


def test_photo_bad_size(client: TestClient) -> None:
    resp = client.get(f"/recipes/{APAM_BALIK_ID}/photo/huge")
    assert resp.status_code == 404


def test_failed_refresh_keeps_list_and_shows_error(
    client: TestClient, server: Server
) -> None:
    server.catalog_status = 500

    resp = client.post("/refresh")

    assert resp.status_code == 200
    assert "Invalid response from server (HTTP 500)." in resp.text
    assert "Apam Balik" in resp.text


def test_refresh(client: TestClient) -> None:
    resp = client.post("/refresh", follow_redirects=False)

    assert resp.status_code == 303
    assert resp.headers["location"] == "/"
