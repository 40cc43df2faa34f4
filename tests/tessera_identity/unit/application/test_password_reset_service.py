"""Unit tests for PasswordResetService."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from tessera_auth import (
    InvalidPasswordError,
    PasswordPolicyService,
    PasswordResetTokenData,
    RefreshTokenService,
    TokenConfigurationError,
    TokenInvalidError,
    TokenType,
)
from tessera_auth.services import hash_token
from tessera_identity.application import NotificationService, PasswordResetService
from tests.shared.fixtures.factories import (
    OTHER_PASSWORD,
    TEST_PASSWORD,
    TEST_SECRETS,
    FrozenClock,
    UserFactory,
    fast_hasher,
    jwt_service,
)

START = datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc)


class _ResetServiceTestBase:
    def setup_method(self):
        """Set up test fixtures."""
        self.clock = FrozenClock(START)
        self.user_repo = AsyncMock()
        self.token_repo = AsyncMock()
        self.token_repo.count_recent_for_user.return_value = 0
        self.hasher = fast_hasher()
        self.jwt_service = jwt_service(now=self.clock)
        self.refresh_service = AsyncMock(spec=RefreshTokenService)
        self.notifier = AsyncMock(spec=NotificationService)

        self.service = PasswordResetService(
            user_repository=self.user_repo,
            token_repository=self.token_repo,
            password_service=self.hasher,
            policy_service=PasswordPolicyService(),
            jwt_service=self.jwt_service,
            refresh_token_service=self.refresh_service,
            notification_service=self.notifier,
            now=self.clock,
        )

    def _stored(self, token: str, user_id) -> PasswordResetTokenData:
        return PasswordResetTokenData(
            id=uuid4(),
            user_id=user_id,
            token_hash=hash_token(token),
            expires_at=START + timedelta(hours=1),
            used_at=None,
            created_at=START,
        )


class TestRequestReset(_ResetServiceTestBase):
    @pytest.mark.asyncio
    async def test_request_stores_hash_and_sends_token(self):
        user = UserFactory.user()
        self.user_repo.find_by_email.return_value = user

        await self.service.request_reset(user.email)

        self.token_repo.invalidate_all_for_user.assert_awaited_once_with(user.id)
        user_id, stored_hash, expires_at = self.token_repo.create.call_args.args
        assert user_id == user.id
        assert expires_at == START + timedelta(hours=1)

        email, name, token = self.notifier.send_password_reset.call_args.args
        assert (email, name) == (user.email, "User")
        assert stored_hash == hash_token(token)
        assert stored_hash != token
        payload = self.jwt_service.verify(TokenType.PASSWORD_RESET, token)
        assert payload.user_id == user.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email", ["ghost@example.com", "not-an-email"])
    async def test_unknown_or_malformed_email_is_silent(self, email):
        self.user_repo.find_by_email.return_value = None

        assert await self.service.request_reset(email) is None

        self.token_repo.create.assert_not_called()
        self.notifier.send_password_reset.assert_not_called()

    @pytest.mark.asyncio
    async def test_inactive_user_is_silent(self):
        self.user_repo.find_by_email.return_value = UserFactory.user(is_active=False)

        await self.service.request_reset("user@example.com")

        self.token_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_rate_limit_is_silent(self):
        user = UserFactory.user()
        self.user_repo.find_by_email.return_value = user
        self.token_repo.count_recent_for_user.return_value = 3

        await self.service.request_reset(user.email)

        self.token_repo.count_recent_for_user.assert_awaited_once_with(
            user.id, START - timedelta(days=1)
        )
        self.token_repo.create.assert_not_called()
        self.notifier.send_password_reset.assert_not_called()

    @pytest.mark.asyncio
    async def test_notifier_failure_does_not_propagate(self, caplog):
        user = UserFactory.user()
        self.user_repo.find_by_email.return_value = user
        self.notifier.send_password_reset.side_effect = ConnectionError("smtp down")

        await self.service.request_reset(user.email)

        self.token_repo.create.assert_awaited_once()
        assert "Failed to send password reset" in caplog.text


class TestResetPassword(_ResetServiceTestBase):
    @pytest.mark.asyncio
    async def test_reset_updates_password_and_revokes_sessions(self):
        user = UserFactory.user()
        token = self.jwt_service.create_password_reset_token(user.id, user.email)
        stored = self._stored(token, user.id)
        self.token_repo.find_valid_by_hash.return_value = stored
        self.token_repo.mark_used.return_value = True
        self.user_repo.find_by_id.return_value = user

        await self.service.reset_password(token, OTHER_PASSWORD)

        self.token_repo.find_valid_by_hash.assert_awaited_once_with(
            hash_token(token), START
        )
        self.token_repo.mark_used.assert_awaited_once_with(stored.id)
        assert user.credential.matches(OTHER_PASSWORD, self.hasher)
        self.user_repo.save.assert_awaited_once_with(user)
        self.refresh_service.revoke_all_for_user.assert_awaited_once_with(user.id)
        self.notifier.send_password_changed.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_used_or_unknown_token_is_rejected(self):
        user = UserFactory.user()
        token = self.jwt_service.create_password_reset_token(user.id, user.email)
        self.token_repo.find_valid_by_hash.return_value = None

        with pytest.raises(TokenInvalidError):
            await self.service.reset_password(token, OTHER_PASSWORD)

        self.user_repo.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_concurrent_second_use_is_rejected(self):
        """Only the caller that flips used_at wins."""
        user = UserFactory.user()
        token = self.jwt_service.create_password_reset_token(user.id, user.email)
        self.token_repo.find_valid_by_hash.return_value = self._stored(token, user.id)
        self.token_repo.mark_used.return_value = False
        self.user_repo.find_by_id.return_value = user

        with pytest.raises(TokenInvalidError):
            await self.service.reset_password(token, OTHER_PASSWORD)

        assert user.credential.matches(TEST_PASSWORD, self.hasher)
        self.user_repo.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_expired_token_is_invalid(self):
        user = UserFactory.user()
        token = self.jwt_service.create_password_reset_token(user.id, user.email)
        self.clock.advance(hours=1)

        with pytest.raises(TokenInvalidError):
            await self.service.reset_password(token, OTHER_PASSWORD)

        self.token_repo.find_valid_by_hash.assert_not_called()

    @pytest.mark.asyncio
    async def test_access_token_is_not_a_reset_token(self):
        user = UserFactory.user()
        token = self.jwt_service.create_access_token(user.id, user.email)

        with pytest.raises(TokenInvalidError):
            await self.service.reset_password(token, OTHER_PASSWORD)

    @pytest.mark.asyncio
    async def test_stored_token_for_other_user_is_rejected(self):
        user = UserFactory.user()
        token = self.jwt_service.create_password_reset_token(user.id, user.email)
        self.token_repo.find_valid_by_hash.return_value = self._stored(token, uuid4())

        with pytest.raises(TokenInvalidError):
            await self.service.reset_password(token, OTHER_PASSWORD)

    @pytest.mark.asyncio
    async def test_inactive_user_cannot_reset(self):
        user = UserFactory.user(is_active=False)
        token = self.jwt_service.create_password_reset_token(user.id, user.email)
        self.token_repo.find_valid_by_hash.return_value = self._stored(token, user.id)
        self.user_repo.find_by_id.return_value = user

        with pytest.raises(TokenInvalidError):
            await self.service.reset_password(token, OTHER_PASSWORD)

    @pytest.mark.asyncio
    async def test_weak_password_keeps_token_unused(self):
        user = UserFactory.user()
        token = self.jwt_service.create_password_reset_token(user.id, user.email)
        self.token_repo.find_valid_by_hash.return_value = self._stored(token, user.id)
        self.user_repo.find_by_id.return_value = user

        with pytest.raises(InvalidPasswordError):
            await self.service.reset_password(token, "weak")

        self.token_repo.mark_used.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_reset_secret_is_a_configuration_error(self):
        """A service without a reset secret fails loudly, not as a bad token."""
        user = UserFactory.user()
        token = self.jwt_service.create_password_reset_token(user.id, user.email)
        unconfigured = PasswordResetService(
            user_repository=self.user_repo,
            token_repository=self.token_repo,
            password_service=self.hasher,
            policy_service=PasswordPolicyService(),
            jwt_service=jwt_service(
                secrets={**TEST_SECRETS, TokenType.PASSWORD_RESET: None},
                now=self.clock,
            ),
            now=self.clock,
        )

        with pytest.raises(TokenConfigurationError):
            await unconfigured.reset_password(token, OTHER_PASSWORD)

        self.token_repo.find_valid_by_hash.assert_not_called()
