"""Repository interfaces for tessera_auth.

This package defines abstract repository interfaces that can be implemented
by different persistence technologies. The SQLAlchemy implementations live
in tessera_auth.persistence.sqlalchemy.
"""

from tessera_auth.repositories.password_reset_token_repository import (
    PasswordResetTokenData,
    PasswordResetTokenRepository,
)
from tessera_auth.repositories.refresh_token_repository import (
    RefreshTokenData,
    RefreshTokenRepository,
)

__all__ = [
    "PasswordResetTokenData",
    "PasswordResetTokenRepository",
    "RefreshTokenData",
    "RefreshTokenRepository",
]
