"""Alembic revisions for the registry schema, configured in code.

There is no ``alembic.ini``: :func:`build_config` points Alembic at this
package and at one SQLite file. Revisions are additive, so upgrading an
existing registry never drops or rewrites a domain row.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

_SCRIPT_LOCATION = str(Path(__file__).resolve().parent)


def db_url_for(db_path: Path) -> str:
    return f"sqlite:///{db_path}"


def build_config(db_url: str) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", _SCRIPT_LOCATION)
    cfg.set_main_option("sqlalchemy.url", db_url)
    return cfg


def head_revision(db_path: Path) -> str | None:
    """Newest revision this build of domainctl knows about."""
    return ScriptDirectory.from_config(build_config(db_url_for(db_path))).get_current_head()


def current_revision(engine: Engine) -> str | None:
    """Revision recorded in ``alembic_version``; None for an unstamped file."""
    with engine.connect() as conn:
        return MigrationContext.configure(conn).get_current_revision()


def has_pending_migrations(engine: Engine, db_path: Path) -> bool:
    return current_revision(engine) != head_revision(db_path)


def stamp_head(db_path: Path) -> None:
    """Record head without running revisions.

    Only valid for a file whose tables were just created from
    ``schema.metadata``, which already matches head.
    """
    command.stamp(build_config(db_url_for(db_path)), "head")


def upgrade_head(db_path: Path) -> None:
    command.upgrade(build_config(db_url_for(db_path)), "head")
