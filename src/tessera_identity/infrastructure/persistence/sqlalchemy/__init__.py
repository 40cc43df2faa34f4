"""SQLAlchemy implementation for tessera_identity persistence.

Provides:
- IdentityBase: Declarative base for identity models
- UserModel: SQLAlchemy model for users
- UserRepositorySQLAlchemy: Repository implementation for users

Token tables live in tessera_auth.persistence.sqlalchemy (AuthBase).
"""

from tessera_identity.infrastructure.persistence.sqlalchemy.base import IdentityBase
from tessera_identity.infrastructure.persistence.sqlalchemy.init_db import (
    create_engine,
    create_tables,
    drop_tables,
)
from tessera_identity.infrastructure.persistence.sqlalchemy.models import UserModel
from tessera_identity.infrastructure.persistence.sqlalchemy.repositories import (
    UserRepositorySQLAlchemy,
)

__all__ = [
    "IdentityBase",
    "UserModel",
    "UserRepositorySQLAlchemy",
    "create_engine",
    "create_tables",
    "drop_tables",
]
