"""Name normalization and validation.

One explicit rule for every registrable name:

- Normalize: strip whitespace, NFKC, lowercase.
- A *label* matches ``[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?``.
- A top-level domain is exactly one label. ``business.com`` is not a
  top-level form and is rejected, never treated as a subdomain attempt.
- A subdomain is one label under an existing parent. It may be written
  bare (``test``) or qualified by its parent (``test.com`` under ``com``).

INVARIANT: normalization is fixed at registration time. Stored names are
always the normalized form, so lookups normalize their input the same way.
"""

from __future__ import annotations

import re
import unicodedata

LABEL_PATTERN: re.Pattern[str] = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")
SEPARATOR = "."


class InvalidNameError(ValueError):
    """Raised when a name does not satisfy the registrable-name rule."""


def normalize_name(raw: str) -> str:
    """Return the canonical form of *raw* (no validation)."""
    text = unicodedata.normalize("NFKC", raw.strip())
    return text.lower()


def is_valid_label(label: str) -> bool:
    """Check whether *label* is a single valid name label."""
    return LABEL_PATTERN.match(label) is not None


def validate_domain_name(raw: str) -> str:
    """Normalize and validate a top-level domain name.

    Returns:
        The normalized name.

    Raises:
        InvalidNameError: If the name is empty, contains a separator, or
            is not a valid label.
    """
    name = normalize_name(raw)
    if not name:
        raise InvalidNameError("Domain name cannot be empty")
    if SEPARATOR in name:
        raise InvalidNameError("Domain must be a top-level domain")
    if not is_valid_label(name):
        raise InvalidNameError(f"Invalid domain name: {raw!r}")
    return name


def validate_subdomain_name(raw: str, parent: str) -> str:
    """Normalize and validate a subdomain label under the normalized *parent*.

    A fully qualified ``label.parent`` form is reduced to its label.

    Examples:
        >>> validate_subdomain_name("test", "com")
        'test'
        >>> validate_subdomain_name("Test.COM", "com")
        'test'
    """
    name = normalize_name(raw)
    suffix = f"{SEPARATOR}{parent}"
    if name.endswith(suffix):
        name = name[: -len(suffix)]
    if not name:
        raise InvalidNameError("Subdomain name cannot be empty")
    if SEPARATOR in name:
        raise InvalidNameError(f"Subdomain must be a single label under {parent!r}")
    if not is_valid_label(name):
        raise InvalidNameError(f"Invalid subdomain name: {raw!r}")
    return name


def qualified_name(label: str, parent: str) -> str:
    """Join a subdomain label and its parent (``test`` + ``com`` → ``test.com``)."""
    return f"{label}{SEPARATOR}{parent}"
