"""Authentication service for login, tokens, registration and passwords."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

from tessera_auth import (
    InvalidCredentialsError,
    JWTService,
    PasswordHashingService,
    PasswordPolicyService,
    RefreshTokenService,
    TokenInvalidError,
    TokenPair,
    TokenPayload,
    TokenSubject,
    TokenType,
)
from tessera_identity.domain.user import (
    Credential,
    Email,
    EmailAlreadyExistsError,
    InvalidEmailError,
    User,
    UserNotFoundError,
    UserProfile,
)

if TYPE_CHECKING:
    from tessera_identity.application.ports import NotificationService
    from tessera_identity.domain.user import UserRepository

logger = logging.getLogger(__name__)

_DUMMY_PASSWORD = "tessera-login-placeholder"


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful login."""

    user: User
    tokens: TokenPair


def _display_name(user: User) -> str:
    return user.profile.first_name or "User"


class AuthenticationService:
    """
    Application service for user authentication.

    Orchestrates tessera_auth infrastructure (hashing, policy, JWT tokens,
    refresh token store) with the User aggregate to provide:
    - Login with password
    - Token pair issuance, access token verification, refresh rotation
    - Logout (single session or all sessions)
    - Registration and email verification
    - Password change

    Credential-facing methods never reveal whether an email is registered:
    every failure is an InvalidCredentialsError or TokenInvalidError.
    """

    def __init__(  # noqa: PLR0913
        self,
        user_repository: UserRepository,
        password_service: PasswordHashingService,
        policy_service: PasswordPolicyService,
        jwt_service: JWTService,
        refresh_token_service: RefreshTokenService,
        notification_service: NotificationService | None = None,
    ):
        self._user_repo = user_repository
        self._password_service = password_service
        self._policy_service = policy_service
        self._jwt_service = jwt_service
        self._refresh_service = refresh_token_service
        self._notifier = notification_service
        self._dummy_hash: str | None = None

    @staticmethod
    def _subject(user: User) -> TokenSubject:
        return TokenSubject(user_id=user.id, email=user.email, roles=user.role_values)

    async def _verify_against_dummy_hash(self, password: str) -> None:
        """Spend one bcrypt check at the configured cost on a failed lookup.

        Keeps unknown and inactive accounts as slow as a wrong password.
        """
        if self._dummy_hash is None:
            self._dummy_hash = await self._password_service.hash_async(
                _DUMMY_PASSWORD
            )
        await self._password_service.verify_async(
            password or _DUMMY_PASSWORD, self._dummy_hash
        )

    async def authenticate_with_password(
        self,
        email: str,
        password: str,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> AuthResult:
        """Verify email and password and issue a token pair.

        Raises
        ------
        InvalidCredentialsError
            If the email is unknown, the password is wrong or the account
            is inactive
        """
        try:
            address = Email(email)
        except InvalidEmailError as e:
            await self._verify_against_dummy_hash(password)
            raise InvalidCredentialsError from e

        user = await self._user_repo.find_by_email(address)
        if user is None:
            await self._verify_against_dummy_hash(password)
            logger.info("Failed login attempt for unknown account")
            raise InvalidCredentialsError

        if not user.is_active:
            await self._verify_against_dummy_hash(password)
            logger.info("Failed login attempt for inactive user %s", user.id)
            raise InvalidCredentialsError

        if not await user.credential.matches_async(password, self._password_service):
            logger.info("Failed login attempt for user %s", user.id)
            raise InvalidCredentialsError

        if self._password_service.needs_rehash(user.credential.hashed_value):
            new_hash = await self._password_service.hash_async(password)
            user.update_password(Credential.from_hash(new_hash))
            logger.info("Upgraded password hash for user %s", user.id)

        user.update_last_login()
        await self._user_repo.save(user)

        tokens = await self.issue_token_pair(user, user_agent, ip_address)
        logger.info("User logged in: %s", user.id)
        return AuthResult(user=user, tokens=tokens)

    async def issue_token_pair(
        self,
        user: User,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> TokenPair:
        """Mint an access token and a registered refresh token for a user."""
        subject = self._subject(user)
        access_token = self._jwt_service.issue(TokenType.ACCESS, subject)
        refresh_token = await self._refresh_service.issue(
            subject,
            user_agent=user_agent,
            ip_address=ip_address,
        )
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self._jwt_service.get_expiration_time(TokenType.ACCESS),
        )

    def verify_access_token(self, token: str) -> TokenPayload:
        return self._jwt_service.verify(TokenType.ACCESS, token)

    async def refresh_token_pair(
        self,
        refresh_token: str,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> TokenPair:
        """Exchange a refresh token for a new pair, revoking the old token.

        Raises
        ------
        TokenInvalidError
            If the token is revoked, already rotated, or its user is gone
            or inactive
        TokenExpiredError
            If the refresh token has expired
        """
        payload = self._jwt_service.verify(TokenType.REFRESH, refresh_token)

        user = await self._user_repo.find_by_id(payload.user_id)
        if user is None or not user.is_active:
            await self._refresh_service.revoke(refresh_token)
            msg = "Refresh token is no longer valid"
            raise TokenInvalidError(msg)

        subject = self._subject(user)
        _, new_refresh_token = await self._refresh_service.rotate(
            refresh_token,
            subject=subject,
            user_agent=user_agent,
            ip_address=ip_address,
        )
        logger.debug("Tokens refreshed for user: %s", user.id)
        return TokenPair(
            access_token=self._jwt_service.issue(TokenType.ACCESS, subject),
            refresh_token=new_refresh_token,
            expires_in=self._jwt_service.get_expiration_time(TokenType.ACCESS),
        )

    async def logout(self, refresh_token: str) -> bool:
        return await self._refresh_service.revoke(refresh_token)

    async def logout_all(self, user_id: UUID) -> int:
        return await self._refresh_service.revoke_all_for_user(user_id)

    async def register(
        self,
        email: str,
        password: str,
        profile: UserProfile | None = None,
    ) -> User:
        """Create a USER account and send an email verification token.

        Raises
        ------
        InvalidEmailError
            If the email is malformed
        EmailAlreadyExistsError
            If the email is already registered
        InvalidPasswordError
            If the password violates the policy
        """
        address = Email(email)
        if await self._user_repo.exists_by_email(address):
            raise EmailAlreadyExistsError(address.value)

        credential = await Credential.from_plaintext_async(
            password,
            self._password_service,
            self._policy_service,
        )
        user = User.create(address, credential, profile=profile)
        await self._user_repo.save(user)
        logger.info("User registered: %s", user.id)

        await self._send_email_verification(user)
        return user

    async def change_password(
        self,
        user_id: UUID,
        current_password: str,
        new_password: str,
    ) -> None:
        """Change a user's password and end all of their sessions.

        Raises
        ------
        InvalidCredentialsError
            If the user is unknown or the current password is wrong
        InvalidPasswordError
            If the new password violates the policy
        """
        user = await self._user_repo.find_by_id(user_id)
        if user is None:
            raise InvalidCredentialsError

        if not await user.credential.matches_async(
            current_password, self._password_service
        ):
            msg = "Current password is incorrect"
            raise InvalidCredentialsError(msg)

        credential = await Credential.from_plaintext_async(
            new_password,
            self._password_service,
            self._policy_service,
        )
        user.update_password(credential)
        await self._user_repo.save(user)
        await self._refresh_service.revoke_all_for_user(user.id)

        logger.info("Password changed for user: %s", user_id)
        if self._notifier is not None:
            await self._notifier.send_password_changed(user.email, _display_name(user))

    async def request_email_verification(self, user_id: UUID) -> str | None:
        """Send a fresh verification token; None if already verified."""
        user = await self._user_repo.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        if user.email_verified:
            return None
        return await self._send_email_verification(user)

    async def verify_email(self, token: str) -> User:
        """Mark the token's user as verified.

        Raises
        ------
        TokenInvalidError
            If the token's user no longer exists or changed email
        """
        payload = self._jwt_service.verify(TokenType.EMAIL_VERIFICATION, token)

        user = await self._user_repo.find_by_id(payload.user_id)
        if user is None or user.email != payload.email:
            msg = "Verification token is no longer valid"
            raise TokenInvalidError(msg)

        if not user.email_verified:
            user.verify_email()
            await self._user_repo.save(user)
            logger.info("Email verified for user: %s", user.id)
        return user

    async def _send_email_verification(self, user: User) -> str | None:
        if not self._jwt_service.has_secret(TokenType.EMAIL_VERIFICATION):
            logger.debug("Email verification disabled: no signing secret")
            return None

        token = self._jwt_service.create_email_verification_token(user.id, user.email)
        if self._notifier is not None:
            await self._notifier.send_email_verification(
                user.email, _display_name(user), token
            )
        return token
