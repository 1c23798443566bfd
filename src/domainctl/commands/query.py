"""Command group: lookups, listings, the event log and metrics."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from domainctl.commands._base import DomainGroup
from domainctl.domain.types import EventKind
from domainctl.services.query import QueryService

if TYPE_CHECKING:
    from domainctl.commands._context import AppContext

_QUERY_EXAMPLES = """\
  domainctl query controller com
  domainctl query subdomain-controller com test
  domainctl query domains
  domainctl query domain com
  domainctl query events --kind domain --controller alice
  domainctl query metrics --controller alice"""

_KIND_CHOICES = {
    "domain": EventKind.DOMAIN_REGISTERED,
    "subdomain": EventKind.SUBDOMAIN_REGISTERED,
}


@click.group(cls=DomainGroup, examples=_QUERY_EXAMPLES)
@click.pass_obj
def query(app: AppContext) -> None:
    """Look up names, events and registry metrics."""


@query.command(
    examples="""\
  domainctl query controller com
  domainctl -q query controller com"""
)
@click.argument("name")
@click.pass_obj
def controller(app: AppContext, name: str) -> None:
    """Show who controls the domain NAME."""
    app.emit(QueryService(app.registry).get_controller(name))


@query.command(
    "subdomain-controller",
    examples="""\
  domainctl query subdomain-controller com test
  domainctl query subdomain-controller com test.com""",
)
@click.argument("parent")
@click.argument("name")
@click.pass_obj
def subdomain_controller(app: AppContext, parent: str, name: str) -> None:
    """Show who controls the subdomain NAME under PARENT."""
    app.emit(QueryService(app.registry).get_subdomain_controller(parent, name))


@query.command(
    examples="""\
  domainctl query domains
  domainctl --json query domains"""
)
@click.pass_obj
def domains(app: AppContext) -> None:
    """List all domains in registration order."""
    app.emit(QueryService(app.registry).list_domains())


@query.command(
    examples="""\
  domainctl query domain com"""
)
@click.argument("name")
@click.pass_obj
def domain(app: AppContext, name: str) -> None:
    """Show the full record of the domain NAME and its subdomains."""
    app.emit(QueryService(app.registry).get_domain(name))


@query.command(
    examples="""\
  domainctl query events
  domainctl query events --kind subdomain --parent com
  domainctl query events --controller alice --limit 10
  domainctl --json query events --kind domain"""
)
@click.option(
    "--kind",
    type=click.Choice(sorted(_KIND_CHOICES)),
    default=None,
    help="Only events of this kind.",
)
@click.option("--controller", default=None, help="Only events registered by this identity.")
@click.option("--parent", default=None, help="Only subdomain events under this domain.")
@click.option("--limit", type=click.IntRange(min=0), default=None, help="Most recent N only.")
@click.pass_obj
def events(
    app: AppContext,
    kind: str | None,
    controller: str | None,
    parent: str | None,
    limit: int | None,
) -> None:
    """List registration events in emission order."""
    svc = QueryService(app.registry)
    app.emit(
        svc.filter_events(
            kind=_KIND_CHOICES[kind] if kind else None,
            controller=controller,
            parent=parent,
            limit=limit,
        )
    )


@query.command(
    examples="""\
  domainctl query metrics
  domainctl query metrics --controller alice"""
)
@click.option("--controller", default=None, help="Also list names this identity registered.")
@click.pass_obj
def metrics(app: AppContext, controller: str | None) -> None:
    """Show registration totals, the fee and the treasury balance."""
    app.emit(QueryService(app.registry).metrics(controller))
