"""Command: bring the registry database schema up to date."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from domainctl.commands._base import DomainCommand
from domainctl.services.upgrade import UpgradeService

if TYPE_CHECKING:
    from domainctl.commands._context import AppContext


@click.command(
    cls=DomainCommand,
    examples="""\
  domainctl upgrade --check
  domainctl upgrade
  domainctl --json upgrade --check
  domainctl upgrade --stamp   # tables already current, version row missing""",
)
@click.option("--check", "check_only", is_flag=True, help="List pending revisions only.")
@click.option("--stamp", is_flag=True, help="Mark the database as current without migrating.")
@click.pass_obj
def upgrade(app: AppContext, check_only: bool, stamp: bool) -> None:
    """Apply pending schema revisions, backing up the database first.

    Registered names, controllers and timestamps are kept as they are.
    """
    svc = UpgradeService(app.registry)
    if check_only:
        app.emit(svc.check_pending())
    elif stamp:
        app.emit(svc.stamp_current())
    else:
        app.emit(svc.apply())
