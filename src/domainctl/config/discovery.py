"""Locating a registry from the working directory.

A directory is a registry root when it holds ``domainctl.toml`` or an
initialized ``.domainctl/registry.db``. Commands run anywhere below the
root act on that registry, the way git finds ``.git/``.
``DOMAINCTL_CONFIG`` (or ``--config``) points at a config file directly.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import click

from domainctl.config.models import DomainConfig

CONFIG_FILENAME = "domainctl.toml"
CONFIG_ENV_VAR = "DOMAINCTL_CONFIG"
STATE_DIRNAME = ".domainctl"
DB_FILENAME = "registry.db"


def _walk_up(start: Path | None) -> Iterator[Path]:
    current = (start or Path.cwd()).resolve()
    yield current
    yield from current.parents


def find_config(start: Path | None = None) -> Path | None:
    """Return the nearest ``domainctl.toml`` at or above *start*.

    ``DOMAINCTL_CONFIG`` short-circuits the search; if it names a missing
    file there is no config at all.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        explicit = Path(env_path)
        return explicit if explicit.is_file() else None

    for directory in _walk_up(start):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def find_registry_root(start: Path | None = None) -> Path | None:
    """Return the nearest directory that already holds a registry database."""
    for directory in _walk_up(start):
        if (directory / STATE_DIRNAME / DB_FILENAME).is_file():
            return directory
    return None


def read_toml(path: Path) -> dict[str, Any]:
    """Parse *path*, reporting syntax errors as a CLI usage problem."""
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise click.ClickException(f"Invalid TOML in {path}: {exc}") from exc


def load_config(path: Path | None = None, cwd: Path | None = None) -> DomainConfig:
    """Validate the section tables of a config file.

    Without *path*, the file is discovered from *cwd*; with no file at all
    the code defaults are returned.
    """
    path = path or find_config(cwd)
    if path is None:
        return DomainConfig()
    data = read_toml(path)
    sections = {key: data[key] for key in DomainConfig.model_fields if key in data}
    return DomainConfig.model_validate(sections)
