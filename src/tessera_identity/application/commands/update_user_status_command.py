import logging
from typing import Union
from uuid import UUID

from tessera_auth import RefreshTokenService
from tessera_identity.domain.user import (
    User,
    UserDomainService,
    UserNotFoundError,
    UserRepository,
    UserStatus,
)

logger = logging.getLogger(__name__)


class UpdateUserStatusCommand:
    """Command to activate or deactivate a user.

    Deactivation also revokes every refresh token of the user.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        user_domain_service: UserDomainService | None = None,
        refresh_token_service: RefreshTokenService | None = None,
    ):
        self._user_repo = user_repository
        self._domain_service = user_domain_service or UserDomainService()
        self._refresh_service = refresh_token_service

    async def execute(
        self,
        manager: User,
        user_id: UUID,
        new_status: Union[str, UserStatus],
    ) -> User:
        new_status = UserStatus(new_status)

        user = await self._user_repo.find_by_id(user_id)
        if not user:
            raise UserNotFoundError(user_id)

        self._domain_service.validate_status_transition(user, new_status, manager)

        if new_status is UserStatus.ACTIVE:
            user.activate()
        else:
            user.deactivate()
        await self._user_repo.save(user)

        if new_status is UserStatus.INACTIVE and self._refresh_service is not None:
            await self._refresh_service.revoke_all_for_user(user.id)

        logger.info("User %s set to %s by %s", user.id, new_status.value, manager.id)
        return user
