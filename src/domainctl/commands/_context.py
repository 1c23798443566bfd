"""AppContext: the ``click.Context.obj`` shared by every command.

It carries the resolved settings, opens the registry on first use and
turns a ServiceResult into output and an exit code. Commands never print
directly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from domainctl.config.logging import configure_logging
from domainctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from domainctl.config.settings import DomainSettings
    from domainctl.infrastructure.registry import Registry
    from domainctl.services.result import ServiceResult


class AppContext:
    """Per-invocation state for the command tree.

    The registry is opened lazily so ``--help``, ``--version`` and
    ``--examples`` never create a database.
    """

    def __init__(self, settings: DomainSettings) -> None:
        self.settings = settings
        self._registry: Registry | None = None

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)
        if settings.verbose:
            from domainctl.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def caller(self) -> str | None:
        """Identity commands act as (``--as`` or ``DOMAINCTL_IDENTITY``)."""
        return self.settings.identity

    @property
    def output(self) -> OutputSettings:
        return OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )

    @property
    def registry(self) -> Registry:
        if self._registry is None:
            from domainctl.infrastructure.registry import Registry

            registry = Registry(self.settings)
            registry.init_plugins()
            self._registry = registry
        return self._registry

    def close(self) -> None:
        """Release the database, if this invocation opened it."""
        if self._registry is not None:
            self._registry.close()
            self._registry = None

    def emit(self, result: ServiceResult) -> None:
        """Print *result* and set the exit status.

        Success goes to stdout, with warnings on stderr (none in JSON mode,
        where they are part of the document). Failure goes to stderr and
        exits 1.
        """
        text = format_result(result, settings=self.output)
        if not result.ok:
            click.echo(text, err=True)
            raise SystemExit(1)
        click.echo(text)
        if not self.settings.json_output:
            for warning in result.warnings:
                click.echo(f"WARNING: {warning}", err=True)
