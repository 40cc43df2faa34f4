"""Role-based access control."""

from tessera_identity.domain.authorization.authorization_service import (
    AuthorizationService,
)
from tessera_identity.domain.authorization.permissions import (
    ROLE_PERMISSIONS,
    Action,
    Resource,
    effective_permissions,
    effective_permissions_for,
    has_permission,
)

__all__ = [
    "ROLE_PERMISSIONS",
    "Action",
    "AuthorizationService",
    "Resource",
    "effective_permissions",
    "effective_permissions_for",
    "has_permission",
]
