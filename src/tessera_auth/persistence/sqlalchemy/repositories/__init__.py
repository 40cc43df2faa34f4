from tessera_auth.persistence.sqlalchemy.repositories.password_reset_token_repository import (
    PasswordResetTokenRepositorySQLAlchemy,
)
from tessera_auth.persistence.sqlalchemy.repositories.refresh_token_repository import (
    RefreshTokenRepositorySQLAlchemy,
)

__all__ = ["PasswordResetTokenRepositorySQLAlchemy", "RefreshTokenRepositorySQLAlchemy"]
