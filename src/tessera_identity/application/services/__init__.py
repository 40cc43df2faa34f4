"""Application services for identity management."""

from tessera_identity.application.services.authentication_service import (
    AuthenticationService,
    AuthResult,
)
from tessera_identity.application.services.password_reset_service import (
    PasswordResetService,
)

__all__ = ["AuthResult", "AuthenticationService", "PasswordResetService"]
