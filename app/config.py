from enum import Enum
from pathlib import Path

from pydantic_settings import BaseSettings

from catalog.remote import DEFAULT_CATALOG_URL


class Env(Enum):
    local = "local"
    dev = "dev"
    prod = "prod"


class Config(BaseSettings):
    env: Env = Env.local
    html_dir: Path = Path("assets/html")
    catalog_url: str = DEFAULT_CATALOG_URL
    db_url: str = "sqlite+aiosqlite:///culinary_catalog.db"
    asset_concurrency: int = 4
    cache_assets: bool = True
    log_level: str = "INFO"
