"""Role-based authorization decisions.

The service answers whether an actor may perform an action on a
resource. Rules follow the role hierarchy; hierarchy checks between two
concrete users live in UserDomainService and are combined in
``authorize_management``.
"""

import logging
from typing import Union
from uuid import UUID

from tessera_identity.domain.authorization.permissions import Action, Resource
from tessera_identity.domain.user import (
    InsufficientPermissionsError,
    User,
    UserDomainService,
    UserRole,
)

logger = logging.getLogger(__name__)


class AuthorizationService:
    """Decides whether a user may perform an action on a resource."""

    def __init__(self, user_domain_service: UserDomainService | None = None):
        self._user_domain_service = user_domain_service or UserDomainService()

    def can(
        self,
        actor: User,
        action: Union[str, Action],
        resource: Union[str, Resource],
        target_user_id: UUID | None = None,
    ) -> bool:
        """Return whether actor may perform action; never raises."""
        try:
            action = Action(action)
            resource = Resource(resource)
        except ValueError:
            return False

        if not actor.is_active:
            return False

        if resource is Resource.USER:
            return self._check_user(actor, action, target_user_id)
        if resource is Resource.PROFILE:
            return self._check_profile(actor, action, target_user_id)
        if resource is Resource.AUDIT:
            return self._check_audit(actor, action)
        return actor.is_system_admin

    def authorize(
        self,
        actor: User,
        action: Union[str, Action],
        resource: Union[str, Resource],
        target_user_id: UUID | None = None,
    ) -> None:
        """Raise unless actor may perform action on resource.

        Raises
        ------
        InsufficientPermissionsError
            If the action is not permitted
        """
        if self.can(actor, action, resource, target_user_id):
            return

        action_value = action.value if isinstance(action, Action) else str(action)
        resource_value = (
            resource.value if isinstance(resource, Resource) else str(resource)
        )
        logger.info(
            "Denied %s on %s for user %s", action_value, resource_value, actor.id
        )
        raise InsufficientPermissionsError(
            action_value,
            resource_value,
            {
                "user_id": str(actor.id),
                "target_user_id": str(target_user_id) if target_user_id else None,
                "user_roles": list(actor.role_values),
            },
        )

    def authorize_management(
        self,
        actor: User,
        action: Union[str, Action],
        resource: Union[str, Resource],
        target: User,
    ) -> None:
        """Authorize an action on another user, including the hierarchy check."""
        self.authorize(actor, action, resource, target.id)
        if not actor.is_self(target):
            self._user_domain_service.validate_user_hierarchy(actor, target)

    @staticmethod
    def _is_admin_or_above(actor: User) -> bool:
        return actor.highest_role.level >= UserRole.ADMIN.level

    def _check_user(
        self,
        actor: User,
        action: Action,
        target_user_id: UUID | None,
    ) -> bool:
        is_self = target_user_id is not None and actor.is_self(target_user_id)

        if action in (Action.CREATE, Action.MANAGE):
            return self._is_admin_or_above(actor)
        # read/update/delete; for ADMIN the hierarchy check is the caller's job
        return self._is_admin_or_above(actor) or is_self

    def _check_profile(
        self,
        actor: User,
        action: Action,
        target_user_id: UUID | None,
    ) -> bool:
        if action not in (Action.READ, Action.UPDATE, Action.DELETE):
            return False
        is_self = target_user_id is not None and actor.is_self(target_user_id)
        return self._is_admin_or_above(actor) or is_self

    def _check_audit(self, actor: User, action: Action) -> bool:
        if action is Action.READ:
            return self._is_admin_or_above(actor)
        return action is Action.CREATE
