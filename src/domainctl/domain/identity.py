"""Caller identities and payment amounts.

Identities are opaque strings supplied by the substrate (the CLI ``--as``
flag, or the service ``caller`` argument). Hex account addresses are
case-insensitive, so ``0xAbC…`` and ``0xabc…`` are the same caller.
"""

from __future__ import annotations

import re

_HEX_ADDRESS = re.compile(r"^0[xX][0-9a-fA-F]+$")


def normalize_identity(raw: str) -> str:
    """Return the canonical form of an identity.

    Raises:
        ValueError: If the identity is empty after stripping.
    """
    identity = raw.strip()
    if not identity:
        raise ValueError("Identity cannot be empty")
    if _HEX_ADDRESS.match(identity):
        return "0x" + identity[2:].lower()
    return identity


def validate_amount(value: int) -> int:
    """Validate a payment or fee amount in base units.

    Raises:
        ValueError: If *value* is not a non-negative integer.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Amount must be an integer, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"Amount must be non-negative, got {value}")
    return value
