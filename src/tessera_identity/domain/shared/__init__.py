"""Shared building blocks for the identity domain."""

from tessera_identity.domain.shared.exceptions import (
    DomainException,
    ErrorCode,
    ValidationError,
)
from tessera_identity.domain.shared.time import ensure_tz_aware, utc_now

__all__ = [
    "DomainException",
    "ErrorCode",
    "ValidationError",
    "ensure_tz_aware",
    "utc_now",
]
