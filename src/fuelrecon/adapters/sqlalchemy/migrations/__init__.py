"""Schema migrations for the local reports database."""

from __future__ import annotations

from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from fuelrecon.config import get_database_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = getLogger(__name__)

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent


def _build_config(database_uri: str | None = None) -> Config:
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    if database_uri is not None:
        # ConfigParser interpolation treats a bare % as a reference
        config.set_main_option("sqlalchemy.url", database_uri.replace("%", "%%"))
    return config


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Bring the schema to the newest revision.

    With an ``engine`` the upgrade runs on one of its connections, so an in-memory
    SQLite database stays visible to the caller afterwards.
    """

    if engine is not None:
        config = _build_config()
        with engine.begin() as connection:
            config.attributes["connection"] = connection
            command.upgrade(config, "head")
        log.debug("Schema upgraded on %s", engine.url.render_as_string(hide_password=True))
        return

    uri = database_uri or get_database_config().uri
    command.upgrade(_build_config(uri), "head")
    log.debug("Schema upgraded at %s", uri)
