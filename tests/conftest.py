"""Shared pytest fixtures and test helpers for domainctl tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from domainctl.config.settings import DomainSettings
from domainctl.infrastructure.registry import Registry
from domainctl.services.telemetry import disable_telemetry

ADMIN = "admin"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's DOMAINCTL_* environment out of the tests."""
    for key in ("DOMAINCTL_CONFIG", "DOMAINCTL_IDENTITY", "DOMAINCTL_ROOT"):
        monkeypatch.delenv(key, raising=False)
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def registry_root(tmp_path: Path) -> Path:
    """Temporary registry directory.

    Single source of truth for the registry location; ``registry`` and
    ``_isolated_registry`` both build on it.
    """
    return tmp_path


@pytest.fixture
def registry(registry_root: Path) -> Iterator[Registry]:
    """Initialized registry (admin ``admin``, fee 1) on a temp directory."""
    settings = DomainSettings.from_cli(root=registry_root)
    r = Registry(settings)
    try:
        yield r
    finally:
        r.close()


@pytest.fixture
def _isolated_registry(registry_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp registry root so the CLI creates an isolated registry.

    Use via ``@pytest.mark.usefixtures("_isolated_registry")`` on command
    test classes.
    """
    monkeypatch.chdir(registry_root)


# ---------------------------------------------------------------------------
# Shared test helpers (used across service test modules)
# ---------------------------------------------------------------------------


def register_domain(
    registry: Registry, name: str, *, caller: str = "alice", payment: int = 1
) -> dict[str, Any]:
    """Register a domain via RegistrationService, asserting success."""
    from domainctl.services.register import RegistrationService

    result = RegistrationService(registry).register_domain(name, caller=caller, payment=payment)
    assert result.ok, result.error
    return result.data


def register_subdomain(
    registry: Registry,
    parent: str,
    name: str,
    *,
    caller: str = "bob",
    payment: int = 1,
) -> dict[str, Any]:
    """Register a subdomain via RegistrationService, asserting success."""
    from domainctl.services.register import RegistrationService

    result = RegistrationService(registry).register_subdomain(
        parent, name, caller=caller, payment=payment
    )
    assert result.ok, result.error
    return result.data
