"""Access control: the single administrator and caller identities.

The administrator is fixed when the registry database is created and
persisted in ``registry_state``. There is no transfer operation.
Registration and reads are open to every caller; fee changes and
withdrawals require ``caller == admin``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from domainctl.domain.identity import normalize_identity
from domainctl.domain.types import ErrorCode
from domainctl.services.result import ServiceResult, failure

if TYPE_CHECKING:
    from domainctl.infrastructure.registry import RegistryState


def resolve_caller(raw: str | None, op: str) -> tuple[str, None] | tuple[None, ServiceResult]:
    """Normalize a caller identity, or build the MISSING_IDENTITY failure."""
    try:
        return normalize_identity(raw or ""), None
    except ValueError:
        return None, failure(
            op,
            ErrorCode.MISSING_IDENTITY,
            "No caller identity given (use --as or set DOMAINCTL_IDENTITY)",
        )


def is_admin(state: RegistryState, caller: str) -> bool:
    return normalize_identity(caller) == state.admin


def require_admin(state: RegistryState, caller: str, op: str) -> ServiceResult | None:
    """Return an UNAUTHORIZED failure unless *caller* is the administrator."""
    if is_admin(state, caller):
        return None
    return failure(
        op,
        ErrorCode.UNAUTHORIZED,
        f"Caller {caller!r} is not the registry administrator",
        caller=caller,
    )
