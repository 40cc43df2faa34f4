"""SQLAlchemy implementation of UserRepository."""

import logging
from typing import Union
from uuid import UUID

from sqlalchemy import Select, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tessera_identity.domain.user import (
    Credential,
    Email,
    EmailAlreadyExistsError,
    User,
    UserPage,
    UserProfile,
    UserQuery,
    UserRepository,
)
from tessera_identity.infrastructure.persistence.sqlalchemy.models import UserModel

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "created_at": UserModel.created_at,
    "updated_at": UserModel.updated_at,
    "email": UserModel.email,
    "last_login_at": UserModel.last_login_at,
}


class UserRepositorySQLAlchemy(UserRepository):
    """SQLAlchemy implementation of the UserRepository interface."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_id(self, user_id: UUID) -> User | None:
        model = await self._find_model_by_id(user_id)

        if model is None:
            return None

        return self._map_to_domain(model)

    async def find_by_email(self, email: Union[str, Email]) -> User | None:
        email_value = email.value if isinstance(email, Email) else Email(email).value

        stmt = select(UserModel).where(UserModel.email == email_value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._map_to_domain(model)

    async def exists_by_email(
        self,
        email: Union[str, Email],
        exclude_id: UUID | None = None,
    ) -> bool:
        email_value = email.value if isinstance(email, Email) else Email(email).value

        stmt = select(func.count()).select_from(UserModel).where(
            UserModel.email == email_value,
        )
        if exclude_id is not None:
            stmt = stmt.where(UserModel.id != exclude_id)
        result = await self._session.execute(stmt)
        return result.scalar_one() > 0

    async def save(self, user: User) -> None:
        existing = await self._find_model_by_id(user.id)

        try:
            if existing:
                self._update_model(existing, user)
                logger.debug("Updated user: %s", user.id)
            else:
                model = self._map_to_model(user)
                self._session.add(model)
                logger.info("Created user: %s", user.id)

            await self._session.flush()
        except IntegrityError as e:
            if "UNIQUE constraint failed" in str(e) or "unique" in str(e).lower():
                raise EmailAlreadyExistsError(user.email) from e
            raise

    async def find_many(self, query: UserQuery) -> UserPage:
        stmt = self._apply_filters(select(UserModel), query)
        count_stmt = self._apply_filters(
            select(func.count()).select_from(UserModel), query
        )

        column = SORTABLE_COLUMNS.get(query.sort_by, UserModel.created_at)
        stmt = (
            stmt.order_by(column.desc() if query.descending else column.asc())
            .offset(query.offset)
            .limit(query.limit)
        )

        total = (await self._session.execute(count_stmt)).scalar_one()
        models = (await self._session.execute(stmt)).scalars().all()
        return UserPage(
            items=[self._map_to_domain(model) for model in models],
            total=total,
            page=query.page,
            limit=query.limit,
        )

    async def delete(self, user_id: UUID) -> bool:
        model = await self._find_model_by_id(user_id)

        if model is None:
            return False

        await self._session.delete(model)
        await self._session.flush()
        logger.info("Deleted user: %s", user_id)
        return True

    async def count(self) -> int:
        stmt = select(func.count()).select_from(UserModel)
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def _find_model_by_id(self, user_id: UUID) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.id == user_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _apply_filters(stmt: Select, query: UserQuery) -> Select:
        if query.search:
            pattern = f"%{query.search.strip()}%"
            stmt = stmt.where(
                or_(
                    UserModel.email.ilike(pattern),
                    UserModel.first_name.ilike(pattern),
                    UserModel.last_name.ilike(pattern),
                )
            )
        if query.role is not None:
            role = query.role.value
            stmt = stmt.where(
                or_(
                    UserModel.roles == role,
                    UserModel.roles.like(f"{role},%"),
                    UserModel.roles.like(f"%,{role}"),
                    UserModel.roles.like(f"%,{role},%"),
                )
            )
        if query.is_active is not None:
            stmt = stmt.where(UserModel.is_active.is_(query.is_active))
        if query.email_verified is not None:
            stmt = stmt.where(UserModel.email_verified.is_(query.email_verified))
        return stmt

    def _map_to_domain(self, model: UserModel) -> User:
        return User.reconstitute(
            id=model.id,
            email=model.email,
            credential=Credential.from_hash(model.password_hash),
            roles=[r for r in model.roles.split(",") if r],
            profile=UserProfile(
                first_name=model.first_name,
                last_name=model.last_name,
                avatar=model.avatar,
                phone=model.phone,
                date_of_birth=model.date_of_birth,
            ),
            email_verified=model.email_verified,
            is_active=model.is_active,
            created_at=model.created_at,
            updated_at=model.updated_at,
            last_login_at=model.last_login_at,
            created_by=model.created_by,
        )

    def _map_to_model(self, user: User) -> UserModel:
        model = UserModel(id=user.id, created_at=user.created_at)
        self._update_model(model, user)
        return model

    def _update_model(self, model: UserModel, user: User) -> None:
        profile = user.profile
        model.email = user.email
        model.password_hash = user.credential.hashed_value
        model.roles = ",".join(user.role_values)
        model.first_name = profile.first_name
        model.last_name = profile.last_name
        model.avatar = profile.avatar
        model.phone = profile.phone
        model.date_of_birth = profile.date_of_birth
        model.email_verified = user.email_verified
        model.is_active = user.is_active
        model.last_login_at = user.last_login_at
        model.created_by = user.created_by
        model.updated_at = user.updated_at
