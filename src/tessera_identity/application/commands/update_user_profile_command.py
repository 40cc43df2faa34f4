from typing import Any
from uuid import UUID

from tessera_identity.domain.authorization import Action, AuthorizationService, Resource
from tessera_identity.domain.user import User, UserNotFoundError, UserRepository


class UpdateUserProfileCommand:
    """Command to update a user's own or a managed user's profile."""

    def __init__(
        self,
        user_repository: UserRepository,
        authorization_service: AuthorizationService | None = None,
    ):
        self._user_repo = user_repository
        self._authz = authorization_service or AuthorizationService()

    async def execute(self, actor: User, user_id: UUID, **changes: Any) -> User:
        user = await self._user_repo.find_by_id(user_id)
        if not user:
            raise UserNotFoundError(user_id)

        self._authz.authorize_management(actor, Action.UPDATE, Resource.PROFILE, user)

        user.update_profile(**changes)
        await self._user_repo.save(user)
        return user
