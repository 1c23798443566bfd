"""Tests for DomainSettings: priority chain and CLI construction."""

from __future__ import annotations

from pathlib import Path

import click
import pytest
from pydantic import ValidationError

from domainctl.config.settings import DomainSettings


class TestFromCli:
    def test_defaults(self, tmp_path: Path) -> None:
        settings = DomainSettings.from_cli(root=tmp_path)
        assert settings.root == tmp_path
        assert settings.config_path is None
        assert settings.identity is None
        assert settings.db_path == tmp_path / ".domainctl" / "registry.db"

    def test_toml_sections(self, tmp_path: Path) -> None:
        (tmp_path / "domainctl.toml").write_text(
            '[registry]\nadmin = "root"\n\n[treasury]\nrecipient = "0xfeed"\n',
            encoding="utf-8",
        )
        settings = DomainSettings.from_cli(root=tmp_path)
        assert settings.registry.admin == "root"
        assert settings.treasury.recipient == "0xfeed"

    def test_root_from_config_parent(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "domainctl.toml").write_text("", encoding="utf-8")
        nested = tmp_path / "sub"
        nested.mkdir()
        monkeypatch.chdir(nested)
        settings = DomainSettings.from_cli()
        assert settings.root == tmp_path

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        cfg = tmp_path / "custom.toml"
        cfg.write_text('identity = "carol"\n', encoding="utf-8")
        settings = DomainSettings.from_cli(config_path=str(cfg), root=tmp_path)
        assert settings.identity == "carol"

    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "domainctl.toml").write_text("[backup]\nmax_count = 3\n", encoding="utf-8")
        monkeypatch.setenv("DOMAINCTL_BACKUP__MAX_COUNT", "7")
        settings = DomainSettings.from_cli(root=tmp_path)
        assert settings.backup.max_count == 7

    def test_cli_identity_overrides_env(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DOMAINCTL_IDENTITY", "env-user")
        assert DomainSettings.from_cli(root=tmp_path).identity == "env-user"
        assert DomainSettings.from_cli(root=tmp_path, identity="cli-user").identity == "cli-user"

    def test_none_flag_dropped(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DOMAINCTL_IDENTITY", "env-user")
        settings = DomainSettings.from_cli(root=tmp_path, identity=None)
        assert settings.identity == "env-user"

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "domainctl.toml").write_text("[registry\n", encoding="utf-8")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            DomainSettings.from_cli(root=tmp_path)

    def test_settings_frozen(self, tmp_path: Path) -> None:
        settings = DomainSettings.from_cli(root=tmp_path)
        with pytest.raises(ValidationError):
            settings.quiet = True  # type: ignore[misc]

    def test_root_from_existing_registry(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / ".domainctl").mkdir()
        (tmp_path / ".domainctl" / "registry.db").write_bytes(b"")
        nested = tmp_path / "work"
        nested.mkdir()
        monkeypatch.chdir(nested)
        assert DomainSettings.from_cli().root == tmp_path.resolve()

    def test_root_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("DOMAINCTL_ROOT", str(tmp_path / "elsewhere"))
        assert DomainSettings.from_cli().root == tmp_path / "elsewhere"
