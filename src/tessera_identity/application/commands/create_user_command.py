from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Union

from tessera_auth import PasswordHashingService, PasswordPolicyService
from tessera_identity.domain.authorization import Action, AuthorizationService, Resource
from tessera_identity.domain.user import (
    Credential,
    Email,
    EmailAlreadyExistsError,
    User,
    UserDomainService,
    UserProfile,
    UserRepository,
    UserRole,
)

logger = logging.getLogger(__name__)


class CreateUserCommand:
    """Command for an administrator to create a new user."""

    def __init__(  # noqa: PLR0913
        self,
        user_repository: UserRepository,
        password_service: PasswordHashingService,
        policy_service: PasswordPolicyService,
        authorization_service: AuthorizationService | None = None,
        user_domain_service: UserDomainService | None = None,
    ):
        self._user_repo = user_repository
        self._password_service = password_service
        self._policy_service = policy_service
        self._domain_service = user_domain_service or UserDomainService()
        self._authz = authorization_service or AuthorizationService(self._domain_service)

    async def execute(  # noqa: PLR0913
        self,
        creator: User,
        email: str,
        password: str,
        roles: Iterable[Union[str, UserRole]] | None = None,
        profile: UserProfile | None = None,
    ) -> User:
        self._authz.authorize(creator, Action.CREATE, Resource.USER)

        address = Email(email)
        if await self._user_repo.exists_by_email(address):
            raise EmailAlreadyExistsError(address.value)

        credential = await Credential.from_plaintext_async(
            password,
            self._password_service,
            self._policy_service,
        )
        user = User.create(
            address,
            credential,
            roles=roles,
            profile=profile,
            created_by=creator.id,
        )
        self._domain_service.validate_user_creation(user, creator)

        await self._user_repo.save(user)
        logger.info(
            "User %s created by %s with roles %s",
            user.id,
            creator.id,
            ",".join(user.role_values),
        )
        return user
