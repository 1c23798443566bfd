"""ServiceResult and ServiceError: what every service method returns.

INVARIANT: service methods report expected failures (a taken name, an
unauthorized caller) as ``ok=False`` results, never as exceptions, and
leave the registry untouched when they do. Exceptions mean a bug or a
broken database.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator


class ServiceError(BaseModel):
    """Why an operation failed: a stable ``code`` plus context in ``detail``."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one registry operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Operation name (``"register_domain"``, ``"withdraw"``, ...);
            renderers are chosen by it.
        data: Operation payload on success.
        warnings: Problems that did not fail the operation, such as a
            plugin that raised after the change committed.
        error: Set exactly when ``ok`` is False.
        meta: Extra information such as the ``-v`` timing tree.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _error_matches_ok(self) -> ServiceResult:
        if self.ok and self.error is not None:
            raise ValueError("a successful result cannot carry an error")
        if not self.ok and self.error is None:
            raise ValueError("a failed result needs an error")
        return self

    @property
    def code(self) -> str | None:
        """The error code, or None on success."""
        return self.error.code if self.error else None


def failure(op: str, code: str, message: str, **detail: Any) -> ServiceResult:
    """Build a failed result; keyword arguments become ``error.detail``."""
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=str(code), message=message, detail=detail),
    )
