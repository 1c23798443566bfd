"""Tests for QueryService: lookups, event filtering and metrics."""

from __future__ import annotations

import pytest

from domainctl.domain.types import EventKind
from domainctl.infrastructure.registry import Registry
from domainctl.services.query import QueryService
from tests.conftest import register_domain, register_subdomain


@pytest.fixture
def populated(registry: Registry) -> Registry:
    register_domain(registry, "com", caller="alice")
    register_domain(registry, "ua", caller="bob")
    register_domain(registry, "net", caller="carol")
    register_subdomain(registry, "com", "test", caller="bob")
    register_subdomain(registry, "com", "shop", caller="alice")
    register_subdomain(registry, "ua", "kyiv", caller="bob")
    return registry


class TestLookups:
    def test_get_controller_not_found(self, registry: Registry) -> None:
        result = QueryService(registry).get_controller("com")
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"

    def test_get_controller_normalizes(self, populated: Registry) -> None:
        assert QueryService(populated).get_controller(" COM ").data["controller"] == "alice"

    def test_get_subdomain_controller_forms(self, populated: Registry) -> None:
        svc = QueryService(populated)
        assert svc.get_subdomain_controller("com", "test").data["controller"] == "bob"
        assert svc.get_subdomain_controller("com", "test.com").data["full_name"] == "test.com"

    def test_get_subdomain_controller_not_found(self, populated: Registry) -> None:
        result = QueryService(populated).get_subdomain_controller("net", "test")
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"

    def test_get_domain_lists_subdomains_in_order(self, populated: Registry) -> None:
        data = QueryService(populated).get_domain("com").data
        assert data["controller"] == "alice"
        assert [s["name"] for s in data["subdomains"]] == ["test", "shop"]

    def test_get_domain_not_found(self, registry: Registry) -> None:
        result = QueryService(registry).get_domain("nope")
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"


class TestListDomains:
    def test_registration_order(self, populated: Registry) -> None:
        data = QueryService(populated).list_domains().data
        assert data["items"] == ["com", "ua", "net"]
        assert data["count"] == 3

    def test_empty(self, registry: Registry) -> None:
        assert QueryService(registry).list_domains().data == {"count": 0, "items": []}


class TestFilterEvents:
    def test_three_callers_scenario(self, registry: Registry) -> None:
        register_domain(registry, "com", caller="alice")
        register_domain(registry, "ua", caller="bob")
        register_domain(registry, "net", caller="carol")
        svc = QueryService(registry)
        assert svc.list_domains().data["items"] == ["com", "ua", "net"]
        assert svc.filter_events().data["count"] == 3

    def test_by_kind(self, populated: Registry) -> None:
        items = QueryService(populated).filter_events(kind=EventKind.DOMAIN_REGISTERED).data[
            "items"
        ]
        assert [e["name"] for e in items] == ["com", "ua", "net"]
        assert [e["seq"] for e in items] == sorted(e["seq"] for e in items)

    def test_by_controller(self, populated: Registry) -> None:
        items = QueryService(populated).filter_events(controller="bob").data["items"]
        assert [e["name"] for e in items] == ["ua", "test.com", "kyiv.ua"]

    def test_by_parent(self, populated: Registry) -> None:
        items = QueryService(populated).filter_events(parent="com").data["items"]
        assert [e["name"] for e in items] == ["test.com", "shop.com"]

    def test_limit_keeps_most_recent_in_order(self, populated: Registry) -> None:
        items = QueryService(populated).filter_events(limit=2).data["items"]
        assert [e["name"] for e in items] == ["shop.com", "kyiv.ua"]

    def test_negative_limit(self, registry: Registry) -> None:
        result = QueryService(registry).filter_events(limit=-1)
        assert result.error is not None
        assert result.error.code == "INVALID_AMOUNT"

    def test_unknown_kind_matches_nothing(self, populated: Registry) -> None:
        assert QueryService(populated).filter_events(kind="Nope").data["count"] == 0


class TestMetrics:
    def test_totals(self, populated: Registry) -> None:
        data = QueryService(populated).metrics().data
        assert data["total_registrations"] == 6
        assert data["domain_count"] == 3
        assert data["subdomain_count"] == 3
        assert data["fee"] == 1
        assert data["balance"] == 6
        assert data["controller"] is None

    def test_owned_by_controller(self, populated: Registry) -> None:
        data = QueryService(populated).metrics("bob").data
        assert data["controller"] == "bob"
        assert data["owned_domains"] == ["ua"]
        assert data["owned_subdomains"] == ["test.com", "kyiv.ua"]
