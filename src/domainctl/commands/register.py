"""Command group: claim domains and subdomains."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from domainctl.commands._base import DomainGroup
from domainctl.services.fees import FeeService
from domainctl.services.register import RegistrationService

if TYPE_CHECKING:
    from domainctl.commands._context import AppContext

_REGISTER_EXAMPLES = """\
  domainctl --as alice register domain com --payment 1
  domainctl --as bob register subdomain com test --payment 1
  domainctl --as bob register subdomain com test.com"""

_PAYMENT_HELP = "Amount paid in base units (default: the current fee)."


def _resolve_payment(app: AppContext, payment: int | None) -> int:
    if payment is not None:
        return payment
    return int(FeeService(app.registry).current_fee().data["fee"])


@click.group(cls=DomainGroup, examples=_REGISTER_EXAMPLES)
@click.pass_obj
def register(app: AppContext) -> None:
    """Register names for a fee."""


@register.command(
    examples="""\
  domainctl --as alice register domain com --payment 1
  domainctl --as 0xAbC123 register domain org
  domainctl --json --as alice register domain net --payment 5"""
)
@click.argument("name")
@click.option("--payment", type=int, default=None, help=_PAYMENT_HELP)
@click.pass_obj
def domain(app: AppContext, name: str, payment: int | None) -> None:
    """Register the top-level domain NAME."""
    svc = RegistrationService(app.registry)
    app.emit(svc.register_domain(name, caller=app.caller, payment=_resolve_payment(app, payment)))


@register.command(
    examples="""\
  domainctl --as bob register subdomain com test --payment 1
  domainctl --as bob register subdomain com test.com"""
)
@click.argument("parent")
@click.argument("name")
@click.option("--payment", type=int, default=None, help=_PAYMENT_HELP)
@click.pass_obj
def subdomain(app: AppContext, parent: str, name: str, payment: int | None) -> None:
    """Register NAME under the registered domain PARENT."""
    svc = RegistrationService(app.registry)
    app.emit(
        svc.register_subdomain(
            parent,
            name,
            caller=app.caller,
            payment=_resolve_payment(app, payment),
        )
    )
