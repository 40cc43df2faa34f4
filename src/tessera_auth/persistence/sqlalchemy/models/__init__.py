from tessera_auth.persistence.sqlalchemy.models.password_reset_token_model import (
    PasswordResetTokenModel,
)
from tessera_auth.persistence.sqlalchemy.models.refresh_token_model import (
    RefreshTokenModel,
)

__all__ = ["PasswordResetTokenModel", "RefreshTokenModel"]
