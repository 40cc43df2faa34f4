"""Build auth services from application settings."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from tessera_auth.schemas import TokenType
from tessera_auth.services import (
    JWTService,
    PasswordHashingService,
    PasswordPolicy,
    PasswordPolicyService,
)
from tessera_auth.services.password_policy import DEFAULT_FORBIDDEN_PASSWORDS

if TYPE_CHECKING:
    from tessera_config import Settings


def token_secrets(settings: Settings) -> dict[TokenType, str | None]:
    """Map each token type to its configured signing secret."""

    def reveal(secret) -> str | None:
        return secret.get_secret_value() if secret is not None else None

    return {
        TokenType.ACCESS: reveal(settings.jwt_access_secret),
        TokenType.REFRESH: reveal(settings.jwt_refresh_secret),
        TokenType.EMAIL_VERIFICATION: reveal(settings.jwt_email_verification_secret),
        TokenType.PASSWORD_RESET: reveal(settings.jwt_password_reset_secret),
    }


def token_ttls(settings: Settings) -> dict[TokenType, timedelta]:
    return {
        TokenType.ACCESS: timedelta(minutes=settings.jwt_access_token_expire_minutes),
        TokenType.REFRESH: timedelta(days=settings.jwt_refresh_token_expire_days),
        TokenType.EMAIL_VERIFICATION: timedelta(
            hours=settings.jwt_email_verification_expire_hours
        ),
        TokenType.PASSWORD_RESET: timedelta(
            hours=settings.jwt_password_reset_expire_hours
        ),
    }


def build_jwt_service(settings: Settings) -> JWTService:
    return JWTService(
        secrets=token_secrets(settings),
        ttls=token_ttls(settings),
        issuer=settings.jwt_issuer or None,
    )


def build_password_service(settings: Settings) -> PasswordHashingService:
    return PasswordHashingService(rounds=settings.bcrypt_rounds)


def build_password_policy(settings: Settings) -> PasswordPolicyService:
    """Policy service using the configured forbidden words, if any."""
    forbidden = tuple(settings.forbidden_words) or DEFAULT_FORBIDDEN_PASSWORDS
    return PasswordPolicyService(PasswordPolicy(forbidden_passwords=forbidden))
