"""SQLAlchemy implementation for tessera_auth persistence.

Provides:
- AuthBase: Declarative base for auth models
- RefreshTokenModel / PasswordResetTokenModel: token store tables
- RefreshTokenRepositorySQLAlchemy / PasswordResetTokenRepositorySQLAlchemy

Note: The consuming application should include AuthBase.metadata
in its Alembic migrations to create the token tables.

Examples
--------
# In your Alembic env.py or migration setup:
from tessera_auth.persistence.sqlalchemy import AuthBase
target_metadata = [YourBase.metadata, AuthBase.metadata]
"""

from tessera_auth.persistence.sqlalchemy.base import AuthBase
from tessera_auth.persistence.sqlalchemy.models import (
    PasswordResetTokenModel,
    RefreshTokenModel,
)
from tessera_auth.persistence.sqlalchemy.repositories import (
    PasswordResetTokenRepositorySQLAlchemy,
    RefreshTokenRepositorySQLAlchemy,
)

__all__ = [
    "AuthBase",
    "PasswordResetTokenModel",
    "PasswordResetTokenRepositorySQLAlchemy",
    "RefreshTokenModel",
    "RefreshTokenRepositorySQLAlchemy",
]
