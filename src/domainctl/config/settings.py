"""DomainSettings: one frozen object for flags, environment and config file.

Highest priority first:

1. keyword arguments (the CLI flags Click parsed)
2. ``DOMAINCTL_*`` environment variables, ``__`` for nested keys
   (``DOMAINCTL_TREASURY__RECIPIENT``)
3. ``domainctl.toml``
4. the defaults baked into :mod:`domainctl.config.models`
"""

from __future__ import annotations

import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, TomlConfigSettingsSource

from domainctl.config.discovery import (
    DB_FILENAME,
    STATE_DIRNAME,
    find_config,
    find_registry_root,
)
from domainctl.config.models import BackupConfig, RegistryConfig, TreasuryConfig

# The config file chosen by from_cli(), read while the model is built.
_toml_file: ContextVar[Path | None] = ContextVar("domainctl_toml_file", default=None)


class DomainSettings(BaseSettings):
    """Resolved settings for one CLI invocation or service session.

    Attributes:
        root: Registry directory. The database lives in ``root/.domainctl``.
        config_path: The TOML file that was loaded, if any.
        identity: Default caller identity (``--as`` overrides).
    """

    model_config = {
        "frozen": True,
        "env_prefix": "DOMAINCTL_",
        "env_nested_delimiter": "__",
    }

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None
    identity: str | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    treasury: TreasuryConfig = Field(default_factory=TreasuryConfig)
    backup: BackupConfig = Field(default_factory=BackupConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls, toml_file=_toml_file.get()),
        )

    @property
    def state_dir(self) -> Path:
        return self.root / STATE_DIRNAME

    @property
    def db_path(self) -> Path:
        return self.state_dir / DB_FILENAME

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> DomainSettings:
        """Build settings the way the CLI does.

        The root is, in order: *root*, the directory of the config file,
        the nearest ancestor that already holds a registry, then
        ``DOMAINCTL_ROOT`` or the working directory. Flags given as None
        are dropped so they do not mask the environment or the file.
        """
        if config_path:
            toml_path: Path | None = Path(config_path)
        else:
            toml_path = find_config(root)
        if toml_path is not None and not toml_path.is_file():
            toml_path = None

        kwargs = {k: v for k, v in cli_flags.items() if v is not None}
        resolved_root = root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else find_registry_root()
        if resolved_root is not None:
            kwargs["root"] = resolved_root

        token = _toml_file.set(toml_path)
        try:
            return cls(config_path=toml_path, **kwargs)
        except tomllib.TOMLDecodeError as exc:
            raise click.ClickException(f"Invalid TOML in {toml_path}: {exc}") from exc
        finally:
            _toml_file.reset(token)
