"""Command group: treasury balance and withdrawal."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from domainctl.commands._base import DomainGroup
from domainctl.services.treasury import TreasuryService

if TYPE_CHECKING:
    from domainctl.commands._context import AppContext


@click.group(
    cls=DomainGroup,
    examples="""\
  domainctl treasury balance
  domainctl --as admin treasury withdraw 0xRecipient""",
)
@click.pass_obj
def treasury(app: AppContext) -> None:
    """Inspect and withdraw collected fees."""


@treasury.command(examples="  domainctl -q treasury balance")
@click.pass_obj
def balance(app: AppContext) -> None:
    """Show the treasury balance."""
    app.emit(TreasuryService(app.registry).balance())


@treasury.command(
    examples="""\
  domainctl --as admin treasury withdraw 0xRecipient
  domainctl --as admin treasury withdraw   # uses [treasury] recipient""",
)
@click.argument("recipient", required=False)
@click.pass_obj
def withdraw(app: AppContext, recipient: str | None) -> None:
    """Pay the whole balance to RECIPIENT (admin only).

    Without RECIPIENT, the ``[treasury] recipient`` from config is used.
    """
    app.emit(TreasuryService(app.registry).withdraw(recipient, caller=app.caller))
