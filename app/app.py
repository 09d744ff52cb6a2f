import contextlib
import functools
import logging
from typing import Any, AsyncIterator, Awaitable, Callable

from databases import Database
import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape
from rich.logging import RichHandler
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import HTMLResponse, RedirectResponse, Response
from starlette.routing import Route

from app import config
from app.html.recipe_detail import RecipeDetail, RecipeList
from catalog.assets import AssetCache
from catalog.errors import CatalogError
from catalog.remote import RemoteCatalog
from catalog.repository import RecipesRepository, create_db
from catalog.sync import SyncEngine


logger = logging.getLogger(__name__)


CONFIG = config.Config()


def configure_logging(cfg: config.Config) -> None:
    logging.basicConfig(
        level=cfg.log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


def aHTMLResponse(route: Callable[..., Awaitable[str | tuple[str, int]]]):
    @functools.wraps(route)
    async def wrapper(*args: Any, **kwargs: Any) -> HTMLResponse:
        resp = await route(*args, **kwargs)
        if not isinstance(resp, tuple):
            html, code = resp, 200
        else:
            html, code = resp
        return HTMLResponse(html, status_code=code)

    return wrapper


def _engine(request: Request) -> SyncEngine:
    return request.app.state.engine


@aHTMLResponse
async def homepage(request: Request) -> str:
    engine = _engine(request)
    query = request.query_params.get("q", "")
    return RecipeList(
        engine.filtered(query),
        environment=request.app.state.templates,
        query=query,
        error_message=engine.error_message,
        is_refreshing=engine.is_refreshing,
    ).render()


async def refresh(request: Request) -> RedirectResponse:
    try:
        await _engine(request).refresh()
    except CatalogError:
        # Already on the engine as error_message, the list page shows it.
        logger.info("Refresh failed, keeping the current recipes")
    return RedirectResponse("/", status_code=303)


@aHTMLResponse
async def recipe_detail(request: Request) -> str | tuple[str, int]:
    recipe = _engine(request).get(request.path_params["id"])
    if recipe is None:
        return "Recipe not found.", 404
    return RecipeDetail(recipe, environment=request.app.state.templates).render()


async def recipe_photo(request: Request) -> Response:
    recipe = _engine(request).get(request.path_params["id"])
    size = request.path_params["size"]
    if recipe is None or size not in ("small", "large"):
        return Response("Photo not found.", status_code=404)

    is_large = size == "large"
    payload = recipe.photo_large if is_large else recipe.photo_small
    if payload is not None:
        return Response(payload, media_type="image/jpeg")

    url = recipe.photo_url_large if is_large else recipe.photo_url_small
    if not url:
        return Response("Photo not found.", status_code=404)
    return RedirectResponse(url, status_code=307)


def create_app(
    cfg: config.Config | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Starlette:
    cfg = CONFIG if cfg is None else cfg

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        db = Database(cfg.db_url)
        await db.connect()
        await create_db(db)
        client = httpx.AsyncClient(transport=transport)
        repository = RecipesRepository(db)
        engine = SyncEngine(
            source=RemoteCatalog(url=cfg.catalog_url, client=client),
            store=repository,
            assets=(
                AssetCache(
                    repository,
                    client=client,
                    concurrency=cfg.asset_concurrency,
                )
                if cfg.cache_assets
                else None
            ),
        )
        app.state.engine = engine
        await engine.load()
        try:
            yield
        finally:
            await engine.aclose()
            await client.aclose()
            await db.disconnect()

    app = Starlette(
        debug=True if cfg.env == config.Env.local else False,
        routes=[
            Route("/", homepage),
            Route("/refresh", refresh, methods=["POST"]),
            Route("/recipes/{id:uuid}", recipe_detail),
            Route("/recipes/{id:uuid}/photo/{size:str}", recipe_photo),
        ],
        lifespan=lifespan,
    )
    app.state.templates = Environment(
        loader=FileSystemLoader(cfg.html_dir),
        autoescape=select_autoescape(),
    )
    return app


def main() -> Starlette:
    configure_logging(CONFIG)
    return create_app(CONFIG)


app = main()
