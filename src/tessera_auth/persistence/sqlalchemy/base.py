"""SQLAlchemy declarative base for tessera_auth models.

This provides a separate Base for auth models. The consuming application
should include AuthBase.metadata in its migration configuration.

Examples
--------
# In Alembic env.py:
from tessera_identity.infrastructure.persistence.sqlalchemy import IdentityBase
from tessera_auth.persistence.sqlalchemy import AuthBase

target_metadata = [IdentityBase.metadata, AuthBase.metadata]
"""

from sqlalchemy.orm import DeclarativeBase


class AuthBase(DeclarativeBase):
    """Declarative base for tessera_auth models."""
