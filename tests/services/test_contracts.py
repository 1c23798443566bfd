"""Tests for query payload contracts."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from domainctl.services.contracts import EventsResultData, MetricsResultData, dump_validated


class TestContracts:
    def test_events_contract_accepts_payload(self) -> None:
        data = dump_validated(
            EventsResultData,
            {
                "count": 1,
                "items": [
                    {
                        "seq": 1,
                        "kind": "DomainRegistered",
                        "name": "com",
                        "parent": None,
                        "controller": "alice",
                        "payment": 1,
                        "timestamp": "2026-01-01",
                    }
                ],
            },
        )
        assert data["items"][0]["name"] == "com"

    def test_events_contract_rejects_unknown_keys(self) -> None:
        with pytest.raises(ValidationError):
            dump_validated(
                EventsResultData,
                {"count": 1, "items": [{"seq": 1, "kind": "x", "extra": True}]},
            )

    def test_metrics_optional_owner_fields(self) -> None:
        data = dump_validated(
            MetricsResultData,
            {
                "total_registrations": 0,
                "domain_count": 0,
                "subdomain_count": 0,
                "fee": 1,
                "balance": 0,
            },
        )
        assert data["owned_domains"] is None
