"""Typed payload contracts for query results.

These models validate payload shapes before they leave the service layer
so key regressions (for example ``events`` vs ``items``) fail fast in
tests and during development.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T", bound=BaseModel)


def dump_validated(model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="python")


class EventItem(BaseModel):
    """One registration event row."""

    model_config = ConfigDict(extra="forbid")

    seq: int
    kind: str
    name: str
    parent: str | None = None
    controller: str
    payment: int
    timestamp: str


class EventsResultData(BaseModel):
    """Payload contract for ``QueryService.filter_events``."""

    count: int
    items: list[EventItem]


class DomainListResultData(BaseModel):
    """Payload contract for ``QueryService.list_domains``."""

    count: int
    items: list[str]


class MetricsResultData(BaseModel):
    """Payload contract for ``QueryService.metrics``."""

    total_registrations: int
    domain_count: int
    subdomain_count: int
    fee: int
    balance: int
    controller: str | None = None
    owned_domains: list[str] | None = None
    owned_subdomains: list[str] | None = None
