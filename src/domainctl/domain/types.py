"""Enumerations shared across the registry layers."""

from __future__ import annotations

from enum import StrEnum


class EventKind(StrEnum):
    """Kinds of entries in the append-only registration event log."""

    DOMAIN_REGISTERED = "DomainRegistered"
    SUBDOMAIN_REGISTERED = "SubdomainRegistered"


class ErrorCode(StrEnum):
    """Typed failure codes carried in ``ServiceError.code``.

    Every registry failure is recoverable: the operation is rolled back
    and the registry state is unchanged.
    """

    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    UNKNOWN_PARENT = "UNKNOWN_PARENT"
    INSUFFICIENT_PAYMENT = "INSUFFICIENT_PAYMENT"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    TRANSFER_FAILED = "TRANSFER_FAILED"
    INVALID_NAME = "INVALID_NAME"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_RECIPIENT = "INVALID_RECIPIENT"
    MISSING_IDENTITY = "MISSING_IDENTITY"

    # Maintenance (check / upgrade)
    CHECK_FAILED = "CHECK_FAILED"
    BACKUP_FAILED = "BACKUP_FAILED"
    MIGRATION_FAILED = "MIGRATION_FAILED"
    STAMP_FAILED = "STAMP_FAILED"
    NO_BACKUPS = "NO_BACKUPS"
