"""Click commands for domainctl, one module per top-level command."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Attach every top-level command to *cli*.

    Command modules are imported on registration, not when this package
    is imported.
    """
    from domainctl.commands.check import check
    from domainctl.commands.fee import fee
    from domainctl.commands.query import query
    from domainctl.commands.register import register
    from domainctl.commands.treasury import treasury
    from domainctl.commands.upgrade import upgrade

    for command in (register, query, fee, treasury, check, upgrade):
        cli.add_command(command)
