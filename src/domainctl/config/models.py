"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, domainctl.toml only contains overrides.
A fresh registry needs only [registry] admin.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class RegistryConfig(BaseModel):
    """[registry] section.

    ``admin`` and ``initial_fee`` are read once, when the registry database
    is first created. After that the persisted values are authoritative.
    """

    model_config = {"frozen": True}

    admin: str = "admin"
    initial_fee: int = 1
    auto_upgrade: bool = True

    @field_validator("initial_fee")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("initial_fee must be non-negative")
        return value


class TreasuryConfig(BaseModel):
    """[treasury] section."""

    model_config = {"frozen": True}

    # Fixed payout address used when `treasury withdraw` gets no recipient.
    recipient: str | None = None


class BackupConfig(BaseModel):
    """[backup] section."""

    model_config = {"frozen": True}

    max_count: int = 10


class DomainConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    treasury: TreasuryConfig = Field(default_factory=TreasuryConfig)
    backup: BackupConfig = Field(default_factory=BackupConfig)
