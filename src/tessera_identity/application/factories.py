"""Build identity use cases from application settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tessera_auth.factories import (
    build_jwt_service,
    build_password_policy,
    build_password_service,
)
from tessera_identity.application.services import PasswordResetService

if TYPE_CHECKING:
    from tessera_auth import RefreshTokenService
    from tessera_auth.repositories import PasswordResetTokenRepository
    from tessera_config import Settings
    from tessera_identity.application.ports import NotificationService
    from tessera_identity.domain.user import UserRepository


def build_password_reset_service(
    settings: Settings,
    user_repository: UserRepository,
    token_repository: PasswordResetTokenRepository,
    refresh_token_service: RefreshTokenService | None = None,
    notification_service: NotificationService | None = None,
) -> PasswordResetService:
    """Password reset service honouring the configured daily request limit."""
    return PasswordResetService(
        user_repository=user_repository,
        token_repository=token_repository,
        password_service=build_password_service(settings),
        policy_service=build_password_policy(settings),
        jwt_service=build_jwt_service(settings),
        refresh_token_service=refresh_token_service,
        notification_service=notification_service,
        max_resets_per_day=settings.password_reset_max_per_day,
    )
