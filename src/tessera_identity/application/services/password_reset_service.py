import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from tessera_auth import (
    JWTService,
    PasswordHashingService,
    PasswordPolicyService,
    PasswordResetRateLimitError,
    RefreshTokenService,
    TokenExpiredError,
    TokenInvalidError,
    TokenType,
    TokenTypeMismatchError,
)
from tessera_auth.repositories import PasswordResetTokenRepository
from tessera_auth.services import hash_token
from tessera_identity.application.ports import NotificationService
from tessera_identity.domain.shared.time import utc_now
from tessera_identity.domain.user import (
    Credential,
    Email,
    InvalidEmailError,
    User,
    UserRepository,
)

logger = logging.getLogger(__name__)

INVALID_RESET_TOKEN = "Invalid or expired reset token"


class PasswordResetService:
    """Service for handling password reset requests and token validation.

    Reset tokens are signed password_reset JWTs. Their SHA-256 hash is
    stored so each token can be used once and requests can be rate
    limited per user.
    """

    MAX_RESETS_PER_DAY = 3

    def __init__(  # noqa: PLR0913
        self,
        user_repository: UserRepository,
        token_repository: PasswordResetTokenRepository,
        password_service: PasswordHashingService,
        policy_service: PasswordPolicyService,
        jwt_service: JWTService,
        refresh_token_service: RefreshTokenService | None = None,
        notification_service: NotificationService | None = None,
        max_resets_per_day: int = MAX_RESETS_PER_DAY,
        now: Callable[[], datetime] = utc_now,
    ):
        self._user_repo = user_repository
        self._token_repo = token_repository
        self._password_service = password_service
        self._policy_service = policy_service
        self._jwt_service = jwt_service
        self._refresh_service = refresh_token_service
        self._notifier = notification_service
        self._max_resets_per_day = max_resets_per_day
        self._now = now

    @property
    def max_resets_per_day(self) -> int:
        return self._max_resets_per_day

    async def request_reset(self, email: str) -> None:
        """Issue and send a reset token.

        Always returns silently so callers cannot discover registered
        emails.
        """
        try:
            address = Email(email)
        except InvalidEmailError:
            logger.debug("Password reset requested for malformed email")
            return

        user = await self._user_repo.find_by_email(address)
        if user is None or not user.is_active:
            # Silent fail to prevent email enumeration
            logger.debug("Password reset requested for unknown or inactive account")
            return

        try:
            await self._check_rate_limit(user)
        except PasswordResetRateLimitError:
            logger.warning("Rate limit exceeded for password reset: %s", user.id)
            # Still silent fail for security
            return

        raw_token = self._jwt_service.create_password_reset_token(user.id, user.email)
        expires_at = self._now() + timedelta(
            seconds=self._jwt_service.get_expiration_time(TokenType.PASSWORD_RESET),
        )

        # Invalidate old tokens and create new one
        await self._token_repo.invalidate_all_for_user(user.id)
        await self._token_repo.create(user.id, hash_token(raw_token), expires_at)
        logger.info("Password reset requested for user: %s", user.id)

        if self._notifier is None:
            return
        try:
            await self._notifier.send_password_reset(
                user.email, user.profile.first_name or "User", raw_token
            )
        except Exception:
            # The token is stored; the user can request another email
            logger.exception("Failed to send password reset for user %s", user.id)

    async def reset_password(self, token: str, new_password: str) -> None:
        """Set a new password using a reset token.

        Raises
        ------
        TokenInvalidError
            If the token is invalid, expired, already used or its user is
            gone or inactive
        InvalidPasswordError
            If the new password violates the policy
        TokenConfigurationError
            If no password reset signing secret is configured
        """
        try:
            payload = self._jwt_service.verify(TokenType.PASSWORD_RESET, token)
        except (TokenExpiredError, TokenTypeMismatchError) as e:
            raise TokenInvalidError(INVALID_RESET_TOKEN) from e

        reset_token = await self._token_repo.find_valid_by_hash(
            hash_token(token), self._now()
        )
        if reset_token is None or reset_token.user_id != payload.user_id:
            raise TokenInvalidError(INVALID_RESET_TOKEN)

        user = await self._user_repo.find_by_id(reset_token.user_id)
        if user is None or not user.is_active:
            raise TokenInvalidError(INVALID_RESET_TOKEN)

        credential = await Credential.from_plaintext_async(
            new_password,
            self._password_service,
            self._policy_service,
        )

        if not await self._token_repo.mark_used(reset_token.id):
            raise TokenInvalidError(INVALID_RESET_TOKEN)

        user.update_password(credential)
        await self._user_repo.save(user)
        if self._refresh_service is not None:
            await self._refresh_service.revoke_all_for_user(user.id)

        logger.info("Password reset completed for user: %s", user.id)
        if self._notifier is not None:
            await self._notifier.send_password_changed(
                user.email, user.profile.first_name or "User"
            )

    async def _check_rate_limit(self, user: User) -> None:
        since = self._now() - timedelta(days=1)
        count = await self._token_repo.count_recent_for_user(user.id, since)
        if count >= self._max_resets_per_day:
            raise PasswordResetRateLimitError
