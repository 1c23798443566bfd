"""Command group: registration fee policy."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from domainctl.commands._base import DomainGroup
from domainctl.services.fees import FeeService

if TYPE_CHECKING:
    from domainctl.commands._context import AppContext


@click.group(
    cls=DomainGroup,
    examples="""\
  domainctl fee show
  domainctl --as admin fee set 5""",
)
@click.pass_obj
def fee(app: AppContext) -> None:
    """Show or change the registration fee."""


@fee.command(examples="  domainctl -q fee show")
@click.pass_obj
def show(app: AppContext) -> None:
    """Show the current registration fee."""
    app.emit(FeeService(app.registry).current_fee())


@fee.command(
    "set",
    examples="""\
  domainctl --as admin fee set 5
  domainctl --as admin fee set 0""",
)
@click.argument("amount", type=int)
@click.pass_obj
def set_fee(app: AppContext, amount: int) -> None:
    """Set the registration fee to AMOUNT base units (admin only)."""
    app.emit(FeeService(app.registry).set_fee(amount, caller=app.caller))
