"""Unit tests for RefreshTokenService."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from tessera_auth.exceptions import TokenExpiredError, TokenInvalidError
from tessera_auth.repositories import RefreshTokenData
from tessera_auth.schemas import TokenSubject, TokenType
from tessera_auth.services import JWTService, RefreshTokenService, hash_token
from tests.shared.fixtures.factories import TEST_SECRETS, FrozenClock

START = datetime(2025, 3, 1, 8, 0, tzinfo=timezone.utc)


def _record(token: str, user_id, **overrides) -> RefreshTokenData:
    values = {
        "id": uuid4(),
        "user_id": user_id,
        "token_hash": hash_token(token),
        "expires_at": START + timedelta(days=7),
        "is_revoked": False,
        "created_at": START,
        "last_used_at": None,
        "user_agent": None,
        "ip_address": None,
    }
    values.update(overrides)
    return RefreshTokenData(**values)


class TestHashToken:
    def test_hash_is_sha256_hex(self):
        digest = hash_token("abc")

        assert len(digest) == 64
        assert digest == (
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )


class TestRefreshTokenServiceIssue:
    """Tests for issuing and registering refresh tokens."""

    def setup_method(self):
        """Set up test fixtures."""
        self.clock = FrozenClock(START)
        self.repo = AsyncMock()
        self.jwt = JWTService(TEST_SECRETS, now=self.clock)
        self.service = RefreshTokenService(self.jwt, self.repo, now=self.clock)
        self.subject = TokenSubject(uuid4(), "test@example.com", ("user",))

    @pytest.mark.asyncio
    async def test_issue_stores_hash_not_token(self):
        token = await self.service.issue(
            self.subject, user_agent="pytest", ip_address="127.0.0.1"
        )

        self.repo.create.assert_awaited_once()
        kwargs = self.repo.create.call_args.kwargs
        assert kwargs["user_id"] == self.subject.user_id
        assert kwargs["token_hash"] == hash_token(token)
        assert kwargs["token_hash"] != token
        assert kwargs["expires_at"] == START + timedelta(days=7)
        assert kwargs["user_agent"] == "pytest"
        assert kwargs["ip_address"] == "127.0.0.1"

    @pytest.mark.asyncio
    async def test_issued_token_is_a_refresh_token(self):
        token = await self.service.issue(self.subject)

        payload = self.jwt.verify(TokenType.REFRESH, token)

        assert payload.user_id == self.subject.user_id
        assert payload.roles == ("user",)


class TestRefreshTokenServiceVerify:
    """Tests for verification against the revocation store."""

    def setup_method(self):
        self.clock = FrozenClock(START)
        self.repo = AsyncMock()
        self.jwt = JWTService(TEST_SECRETS, now=self.clock)
        self.service = RefreshTokenService(self.jwt, self.repo, now=self.clock)
        self.subject = TokenSubject(uuid4(), "test@example.com")

    @pytest.mark.asyncio
    async def test_verify_active_token_touches_record(self):
        token = await self.service.issue(self.subject)
        record = _record(token, self.subject.user_id)
        self.repo.find_active.return_value = record

        payload = await self.service.verify(token)

        assert payload.user_id == self.subject.user_id
        self.repo.find_active.assert_awaited_once_with(hash_token(token), START)
        self.repo.touch.assert_awaited_once_with(record.id, START)

    @pytest.mark.asyncio
    async def test_verify_revoked_token_raises(self):
        """A token with a valid signature but no active record is rejected."""
        token = await self.service.issue(self.subject)
        self.repo.find_active.return_value = None

        with pytest.raises(TokenInvalidError, match="revoked"):
            await self.service.verify(token)

        self.repo.touch.assert_not_called()

    @pytest.mark.asyncio
    async def test_verify_expired_token_raises_before_store_lookup(self):
        token = await self.service.issue(self.subject)
        self.clock.advance(days=7)

        with pytest.raises(TokenExpiredError):
            await self.service.verify(token)

        self.repo.find_active.assert_not_called()

    @pytest.mark.asyncio
    async def test_verify_rejects_access_token(self):
        access = self.jwt.issue(TokenType.ACCESS, self.subject)

        with pytest.raises(TokenInvalidError):
            await self.service.verify(access)


class TestRefreshTokenServiceRotate:
    """Tests for revoke-then-reissue rotation."""

    def setup_method(self):
        self.clock = FrozenClock(START)
        self.repo = AsyncMock()
        self.jwt = JWTService(TEST_SECRETS, now=self.clock)
        self.service = RefreshTokenService(self.jwt, self.repo, now=self.clock)
        self.subject = TokenSubject(uuid4(), "test@example.com", ("user",))

    @pytest.mark.asyncio
    async def test_rotate_revokes_old_and_issues_new(self):
        old = await self.service.issue(self.subject)
        self.repo.reset_mock()
        self.repo.revoke_if_active.return_value = True

        payload, new = await self.service.rotate(old, user_agent="ua")

        assert new != old
        assert payload.user_id == self.subject.user_id
        self.repo.revoke_if_active.assert_awaited_once_with(hash_token(old), START)
        self.repo.create.assert_awaited_once()
        assert self.repo.create.call_args.kwargs["token_hash"] == hash_token(new)
        assert self.repo.create.call_args.kwargs["user_agent"] == "ua"

    @pytest.mark.asyncio
    async def test_rotate_uses_fresh_subject_when_given(self):
        old = await self.service.issue(self.subject)
        self.repo.revoke_if_active.return_value = True
        promoted = TokenSubject(self.subject.user_id, self.subject.email, ("admin",))

        _, new = await self.service.rotate(old, subject=promoted)

        assert self.jwt.verify(TokenType.REFRESH, new).roles == ("admin",)

    @pytest.mark.asyncio
    async def test_second_rotation_of_same_token_fails(self):
        """Reuse of an already rotated token is rejected without a new token."""
        old = await self.service.issue(self.subject)
        self.repo.reset_mock()
        self.repo.revoke_if_active.return_value = False

        with pytest.raises(TokenInvalidError):
            await self.service.rotate(old)

        self.repo.create.assert_not_called()


class TestRefreshTokenServiceRevocation:
    def setup_method(self):
        self.clock = FrozenClock(START)
        self.repo = AsyncMock()
        self.jwt = JWTService(TEST_SECRETS, now=self.clock)
        self.service = RefreshTokenService(self.jwt, self.repo, now=self.clock)
        self.user_id = uuid4()

    @pytest.mark.asyncio
    async def test_revoke_passes_hash(self):
        self.repo.revoke.return_value = True

        assert await self.service.revoke("raw-token") is True
        self.repo.revoke.assert_awaited_once_with(hash_token("raw-token"))

    @pytest.mark.asyncio
    async def test_revoke_all_for_user_returns_count(self):
        self.repo.revoke_all_for_user.return_value = 3

        assert await self.service.revoke_all_for_user(self.user_id) == 3

    @pytest.mark.asyncio
    async def test_unknown_token_counts_as_revoked(self):
        self.repo.find_by_hash.return_value = None

        assert await self.service.is_revoked("never-issued") is True

    @pytest.mark.asyncio
    async def test_is_revoked_reflects_record(self):
        self.repo.find_by_hash.return_value = _record("t", self.user_id)
        assert await self.service.is_revoked("t") is False

        self.repo.find_by_hash.return_value = _record(
            "t", self.user_id, is_revoked=True
        )
        assert await self.service.is_revoked("t") is True

    @pytest.mark.asyncio
    async def test_list_sessions_flags_current(self):
        current = _record("current", self.user_id, user_agent="firefox")
        other = _record("other", self.user_id, user_agent="curl")
        self.repo.list_for_user.return_value = [current, other]

        sessions = await self.service.list_sessions(self.user_id, "current")

        assert [s.is_current for s in sessions] == [True, False]
        assert sessions[1].user_agent == "curl"
        self.repo.list_for_user.assert_awaited_once_with(self.user_id, START)

    @pytest.mark.asyncio
    async def test_count_and_cleanup_use_clock(self):
        self.repo.count_active_for_user.return_value = 2
        self.repo.cleanup_expired.return_value = 5

        assert await self.service.count_active_for_user(self.user_id) == 2
        assert await self.service.cleanup_expired() == 5
        self.repo.cleanup_expired.assert_awaited_once_with(START)
