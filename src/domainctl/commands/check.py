"""Command: integrity report over the registry, or restore from backup."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from domainctl.commands._base import DomainCommand
from domainctl.services.check import SEVERITY_ERROR, SEVERITY_WARNING, CheckService

if TYPE_CHECKING:
    from domainctl.commands._context import AppContext


@click.command(
    cls=DomainCommand,
    examples="""\
  domainctl check
  domainctl check --errors-only
  domainctl --json check
  domainctl check --rollback""",
)
@click.option(
    "--min-severity",
    type=click.Choice([SEVERITY_WARNING, SEVERITY_ERROR]),
    default=SEVERITY_WARNING,
    show_default=True,
    help="Lowest severity to report.",
)
@click.option("--errors-only", is_flag=True, help="Same as --min-severity error.")
@click.option("--rollback", is_flag=True, help="Restore the newest backup instead of checking.")
@click.pass_obj
def check(app: AppContext, min_severity: str, errors_only: bool, rollback: bool) -> None:
    """Reconcile the treasury and event log against the registered names.

    Read-only unless --rollback is given.
    """
    svc = CheckService(app.registry)
    if rollback:
        result = svc.rollback()
    else:
        result = svc.check(min_severity=SEVERITY_ERROR if errors_only else min_severity)
    app.emit(result)
