import logging
from typing import Union
from uuid import UUID

from tessera_identity.domain.user import (
    InvalidOperationError,
    User,
    UserDomainService,
    UserNotFoundError,
    UserRepository,
    UserRole,
)

logger = logging.getLogger(__name__)


class AssignRoleCommand:
    """Command to grant or withdraw a role."""

    def __init__(
        self,
        user_repository: UserRepository,
        user_domain_service: UserDomainService | None = None,
    ):
        self._user_repo = user_repository
        self._domain_service = user_domain_service or UserDomainService()

    async def execute(
        self,
        manager: User,
        user_id: UUID,
        role: Union[str, UserRole],
        remove: bool = False,
    ) -> User:
        role = UserRole.from_string(role)

        if remove and manager.id == user_id:
            msg = "Users cannot remove their own roles"
            raise InvalidOperationError(msg, {"role": role.value})

        user = await self._user_repo.find_by_id(user_id)
        if not user:
            raise UserNotFoundError(user_id)

        if not manager.is_self(user):
            self._domain_service.validate_user_hierarchy(manager, user)
        self._domain_service.can_assign_role(user, role, manager)

        if remove:
            user.remove_role(role)
        else:
            user.add_role(role)
        await self._user_repo.save(user)

        logger.info(
            "Role %s %s user %s by %s",
            role.value,
            "removed from" if remove else "granted to",
            user.id,
            manager.id,
        )
        return user
