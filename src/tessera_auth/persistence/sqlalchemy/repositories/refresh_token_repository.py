"""SQLAlchemy implementation of RefreshTokenRepository.

Revocation and expiry are always checked in the same statement, so a
concurrent rotation cannot let one token be exchanged twice.
"""

import logging
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tessera_auth.persistence.sqlalchemy.models import RefreshTokenModel
from tessera_auth.repositories import RefreshTokenData, RefreshTokenRepository

logger = logging.getLogger(__name__)


class RefreshTokenRepositorySQLAlchemy(RefreshTokenRepository):
    """SQLAlchemy implementation of the refresh token revocation store."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session.

        Parameters
        ----------
        session
            SQLAlchemy async session
        """
        self._session = session

    def _to_data(self, model: RefreshTokenModel) -> RefreshTokenData:
        """Map SQLAlchemy model to data transfer object."""
        return RefreshTokenData(
            id=UUID(model.id),
            user_id=UUID(model.user_id),
            token_hash=model.token_hash,
            expires_at=model.expires_at,
            is_revoked=model.is_revoked,
            created_at=model.created_at,
            last_used_at=model.last_used_at,
            user_agent=model.user_agent,
            ip_address=model.ip_address,
        )

    @staticmethod
    def _active(now: datetime):
        return (
            RefreshTokenModel.is_revoked.is_(False),
            RefreshTokenModel.expires_at > now,
        )

    async def create(  # noqa: PLR0913
        self,
        user_id: UUID,
        token_hash: str,
        expires_at: datetime,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> UUID:
        token_id = uuid4()
        model = RefreshTokenModel(
            id=str(token_id),
            user_id=str(user_id),
            token_hash=token_hash,
            expires_at=expires_at,
            is_revoked=False,
            user_agent=user_agent,
            ip_address=ip_address,
        )
        self._session.add(model)
        await self._session.flush()
        logger.debug("Stored refresh token %s for user %s", token_id, user_id)
        return token_id

    async def find_by_hash(self, token_hash: str) -> RefreshTokenData | None:
        stmt = select(RefreshTokenModel).where(
            RefreshTokenModel.token_hash == token_hash,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_data(model) if model else None

    async def find_active(
        self,
        token_hash: str,
        now: datetime,
    ) -> RefreshTokenData | None:
        stmt = select(RefreshTokenModel).where(
            RefreshTokenModel.token_hash == token_hash,
            *self._active(now),
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_data(model) if model else None

    async def touch(self, token_id: UUID, now: datetime) -> None:
        stmt = (
            update(RefreshTokenModel)
            .where(RefreshTokenModel.id == str(token_id))
            .values(last_used_at=now)
        )
        await self._session.execute(stmt)
        await self._session.flush()

    async def revoke(self, token_hash: str) -> bool:
        stmt = (
            update(RefreshTokenModel)
            .where(
                RefreshTokenModel.token_hash == token_hash,
                RefreshTokenModel.is_revoked.is_(False),
            )
            .values(is_revoked=True)
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount > 0  # type: ignore[attr-defined]

    async def revoke_if_active(self, token_hash: str, now: datetime) -> bool:
        stmt = (
            update(RefreshTokenModel)
            .where(
                RefreshTokenModel.token_hash == token_hash,
                *self._active(now),
            )
            .values(is_revoked=True, last_used_at=now)
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount == 1  # type: ignore[attr-defined]

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        stmt = (
            update(RefreshTokenModel)
            .where(
                RefreshTokenModel.user_id == str(user_id),
                RefreshTokenModel.is_revoked.is_(False),
            )
            .values(is_revoked=True)
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount  # type: ignore[attr-defined]

    async def revoke_session(self, user_id: UUID, session_id: UUID) -> bool:
        stmt = (
            update(RefreshTokenModel)
            .where(
                RefreshTokenModel.id == str(session_id),
                RefreshTokenModel.user_id == str(user_id),
                RefreshTokenModel.is_revoked.is_(False),
            )
            .values(is_revoked=True)
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount > 0  # type: ignore[attr-defined]

    async def count_active_for_user(self, user_id: UUID, now: datetime) -> int:
        stmt = (
            select(func.count())
            .select_from(RefreshTokenModel)
            .where(
                RefreshTokenModel.user_id == str(user_id),
                *self._active(now),
            )
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def list_for_user(
        self,
        user_id: UUID,
        now: datetime,
    ) -> list[RefreshTokenData]:
        stmt = (
            select(RefreshTokenModel)
            .where(
                RefreshTokenModel.user_id == str(user_id),
                *self._active(now),
            )
            .order_by(
                func.coalesce(
                    RefreshTokenModel.last_used_at,
                    RefreshTokenModel.created_at,
                ).desc()
            )
        )
        result = await self._session.execute(stmt)
        return [self._to_data(model) for model in result.scalars().all()]

    async def cleanup_expired(self, now: datetime) -> int:
        stmt = delete(RefreshTokenModel).where(
            or_(
                RefreshTokenModel.expires_at <= now,
                RefreshTokenModel.is_revoked.is_(True),
            ),
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount  # type: ignore[attr-defined]
