"""Value objects for the user domain."""

from tessera_identity.domain.user.value_objects.credential import Credential
from tessera_identity.domain.user.value_objects.email import Email
from tessera_identity.domain.user.value_objects.user_profile import UserProfile
from tessera_identity.domain.user.value_objects.user_role import UserRole
from tessera_identity.domain.user.value_objects.user_status import UserStatus

__all__ = [
    "Credential",
    "Email",
    "UserProfile",
    "UserRole",
    "UserStatus",
]
