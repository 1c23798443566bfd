"""Registry record models.

Frozen pydantic models returned by the service layer. They are read-side
projections of the database rows; the database remains the system of record.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from domainctl.domain.types import EventKind


class SubdomainRecord(BaseModel):
    """A second-level name, unique within its parent domain."""

    model_config = {"frozen": True}

    name: str
    parent: str
    controller: str
    registered_at: str

    @property
    def full_name(self) -> str:
        return f"{self.name}.{self.parent}"


class DomainRecord(BaseModel):
    """A top-level name, globally unique."""

    model_config = {"frozen": True}

    name: str
    controller: str
    registered_at: str
    subdomains: list[SubdomainRecord] = Field(default_factory=list)


class RegistrationEvent(BaseModel):
    """One immutable entry of the append-only event log."""

    model_config = {"frozen": True}

    seq: int
    kind: EventKind
    name: str
    parent: str | None = None
    controller: str
    payment: int
    timestamp: str

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
