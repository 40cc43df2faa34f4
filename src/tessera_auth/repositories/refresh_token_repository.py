"""Revocation store for refresh tokens.

Only a hash of each refresh token is stored. Implementations must run
``find_active`` and ``revoke_if_active`` as single statements so that
expiry and revocation are decided in one read.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class RefreshTokenData:
    id: UUID
    user_id: UUID
    token_hash: str
    expires_at: datetime
    is_revoked: bool
    created_at: datetime
    last_used_at: datetime | None = None
    user_agent: str | None = None
    ip_address: str | None = None

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def is_active(self, now: datetime) -> bool:
        return not self.is_revoked and not self.is_expired(now)


class RefreshTokenRepository(ABC):
    @abstractmethod
    async def create(  # noqa: PLR0913
        self,
        user_id: UUID,
        token_hash: str,
        expires_at: datetime,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> UUID:
        pass

    @abstractmethod
    async def find_by_hash(self, token_hash: str) -> RefreshTokenData | None:
        """Find a record regardless of its state."""

    @abstractmethod
    async def find_active(
        self,
        token_hash: str,
        now: datetime,
    ) -> RefreshTokenData | None:
        """Find a record that is not revoked and expires after ``now``."""

    @abstractmethod
    async def touch(self, token_id: UUID, now: datetime) -> None:
        pass

    @abstractmethod
    async def revoke(self, token_hash: str) -> bool:
        pass

    @abstractmethod
    async def revoke_if_active(self, token_hash: str, now: datetime) -> bool:
        """Revoke the record only if it is still active.

        Returns True when this call performed the revocation.
        """

    @abstractmethod
    async def revoke_all_for_user(self, user_id: UUID) -> int:
        pass

    @abstractmethod
    async def revoke_session(self, user_id: UUID, session_id: UUID) -> bool:
        pass

    @abstractmethod
    async def count_active_for_user(self, user_id: UUID, now: datetime) -> int:
        pass

    @abstractmethod
    async def list_for_user(
        self,
        user_id: UUID,
        now: datetime,
    ) -> list[RefreshTokenData]:
        """Active records for a user, most recently used first."""

    @abstractmethod
    async def cleanup_expired(self, now: datetime) -> int:
        """Delete expired and revoked records."""
