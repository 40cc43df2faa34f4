"""Refresh token lifecycle on top of the revocation store.

Refresh tokens are stateless JWTs, but every issued token is also
registered in a RefreshTokenRepository by its SHA-256 hash so it can be
revoked before it expires.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from uuid import UUID

from tessera_auth.exceptions import TokenInvalidError
from tessera_auth.repositories import RefreshTokenRepository
from tessera_auth.schemas import SessionInfo, TokenPayload, TokenSubject, TokenType
from tessera_auth.services.jwt_service import JWTService

logger = logging.getLogger(__name__)


def hash_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode()).hexdigest()


class RefreshTokenService:
    """Issues, verifies, rotates and revokes refresh tokens."""

    REVOKED_MESSAGE = "Refresh token has been revoked"

    def __init__(
        self,
        jwt_service: JWTService,
        repository: RefreshTokenRepository,
        now: Callable[[], datetime] | None = None,
    ):
        self._jwt = jwt_service
        self._repo = repository
        self._now = now or (lambda: datetime.now(tz=timezone.utc))

    async def issue(
        self,
        subject: TokenSubject,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> str:
        """Mint a refresh token and register it in the store."""
        token = self._jwt.issue(TokenType.REFRESH, subject)
        claims = self._jwt.decode_unverified(token) or {}
        expires_at = datetime.fromtimestamp(claims["exp"], tz=timezone.utc)

        await self._repo.create(
            user_id=subject.user_id,
            token_hash=hash_token(token),
            expires_at=expires_at,
            user_agent=user_agent,
            ip_address=ip_address,
        )
        return token

    async def verify(self, token: str) -> TokenPayload:
        """Verify a refresh token's signature, expiry and revocation state.

        Raises
        ------
        TokenInvalidError
            If the token is malformed, unknown or revoked
        TokenExpiredError
            If the token is past its expiry instant
        """
        payload = self._jwt.verify(TokenType.REFRESH, token)
        now = self._now()

        record = await self._repo.find_active(hash_token(token), now)
        if record is None:
            raise TokenInvalidError(self.REVOKED_MESSAGE)

        await self._repo.touch(record.id, now)
        return payload

    async def rotate(
        self,
        token: str,
        subject: TokenSubject | None = None,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> tuple[TokenPayload, str]:
        """Revoke the presented token and issue its successor.

        The revocation is a single conditional update, so of two
        concurrent rotations of the same token only one succeeds.

        Parameters
        ----------
        token
            The refresh token being exchanged
        subject
            Claims for the new token; defaults to those of the old one
        user_agent
            Client user agent recorded with the new session
        ip_address
            Client address recorded with the new session

        Returns
        -------
        The verified payload of the old token and the new refresh token
        """
        payload = self._jwt.verify(TokenType.REFRESH, token)

        revoked = await self._repo.revoke_if_active(hash_token(token), self._now())
        if not revoked:
            logger.warning("Rejected reuse of refresh token for user %s", payload.user_id)
            raise TokenInvalidError(self.REVOKED_MESSAGE)

        new_token = await self.issue(
            subject or payload.subject(),
            user_agent=user_agent,
            ip_address=ip_address,
        )
        logger.info("Rotated refresh token for user %s", payload.user_id)
        return payload, new_token

    async def revoke(self, token: str) -> bool:
        """Revoke a token regardless of its validity; True if a record changed."""
        return await self._repo.revoke(hash_token(token))

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        count = await self._repo.revoke_all_for_user(user_id)
        logger.info("Revoked %d refresh tokens for user %s", count, user_id)
        return count

    async def revoke_session(self, user_id: UUID, session_id: UUID) -> bool:
        return await self._repo.revoke_session(user_id, session_id)

    async def is_revoked(self, token: str) -> bool:
        """Unknown tokens are treated as revoked."""
        record = await self._repo.find_by_hash(hash_token(token))
        return record is None or record.is_revoked

    async def count_active_for_user(self, user_id: UUID) -> int:
        return await self._repo.count_active_for_user(user_id, self._now())

    async def list_sessions(
        self,
        user_id: UUID,
        current_token: str | None = None,
    ) -> list[SessionInfo]:
        """List the active sessions of a user, flagging the caller's own."""
        current_hash = hash_token(current_token) if current_token else None
        records = await self._repo.list_for_user(user_id, self._now())
        return [
            SessionInfo(
                id=record.id,
                created_at=record.created_at,
                last_used_at=record.last_used_at,
                user_agent=record.user_agent,
                ip_address=record.ip_address,
                is_current=record.token_hash == current_hash,
            )
            for record in records
        ]

    async def cleanup_expired(self) -> int:
        count = await self._repo.cleanup_expired(self._now())
        if count:
            logger.info("Purged %d expired or revoked refresh tokens", count)
        return count
