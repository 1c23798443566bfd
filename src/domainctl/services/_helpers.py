"""Clock helpers for the services."""

from __future__ import annotations

from datetime import UTC, datetime


def now_iso() -> str:
    """UTC now, ISO 8601 with microseconds.

    Every stamp has the same width, so string order is time order.
    """
    return datetime.now(UTC).isoformat(timespec="microseconds")


def now_compact() -> str:
    """UTC now without separators, e.g. ``20260101T120000123456``."""
    return datetime.now(UTC).strftime("%Y%m%dT%H%M%S%f")
