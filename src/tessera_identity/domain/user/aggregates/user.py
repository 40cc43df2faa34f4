"""User aggregate for identity concerns."""

from datetime import datetime
from typing import Any, Iterable, Union
from uuid import UUID, uuid4

from tessera_identity.domain.shared.time import ensure_tz_aware, utc_now
from tessera_identity.domain.user.exceptions import InvalidOperationError
from tessera_identity.domain.user.value_objects import (
    Credential,
    Email,
    UserProfile,
    UserRole,
)


def _to_roles(roles: Iterable[Union[str, UserRole]] | None) -> frozenset[UserRole]:
    parsed = frozenset(UserRole.from_string(r) for r in (roles or ()))
    return parsed or frozenset({UserRole.USER})


class User:
    """
    User aggregate root.

    Owns identity (email, credential), role membership, profile and
    account state. Every mutation advances ``updated_at``, which never
    moves backwards. The role set is never empty.
    """

    def __init__(  # noqa: PLR0913
        self,
        email: Union[str, Email],
        credential: Credential,
        roles: Iterable[Union[str, UserRole]] | None = None,
        profile: UserProfile | None = None,
        id: UUID | None = None,
        email_verified: bool = False,
        is_active: bool = True,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
        last_login_at: datetime | None = None,
        created_by: UUID | None = None,
    ):
        now = utc_now()
        self._id = id or uuid4()
        self._email = email if isinstance(email, Email) else Email(email)
        self._credential = credential
        self._roles = _to_roles(roles)
        self._profile = profile or UserProfile()
        self._email_verified = email_verified
        self._is_active = is_active
        self._created_at = ensure_tz_aware(created_at) if created_at else now
        self._updated_at = ensure_tz_aware(updated_at) if updated_at else self._created_at
        self._last_login_at = ensure_tz_aware(last_login_at) if last_login_at else None
        self._created_by = created_by

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def email(self) -> str:
        return self._email.value

    @property
    def email_obj(self) -> Email:
        return self._email

    @property
    def credential(self) -> Credential:
        return self._credential

    @property
    def roles(self) -> frozenset[UserRole]:
        return self._roles

    @property
    def role_values(self) -> tuple[str, ...]:
        """Role values ordered from most to least privileged."""
        return tuple(r.value for r in sorted(self._roles, key=lambda r: -r.level))

    @property
    def profile(self) -> UserProfile:
        return self._profile

    @property
    def email_verified(self) -> bool:
        return self._email_verified

    @property
    def is_active(self) -> bool:
        return self._is_active

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    @property
    def last_login_at(self) -> datetime | None:
        return self._last_login_at

    @property
    def created_by(self) -> UUID | None:
        return self._created_by

    @property
    def highest_role(self) -> UserRole:
        return max(self._roles, key=lambda r: r.level)

    @property
    def is_admin(self) -> bool:
        """True for ADMIN and SYSTEM_ADMIN."""
        return self.highest_role.level >= UserRole.ADMIN.level

    @property
    def is_system_admin(self) -> bool:
        return UserRole.SYSTEM_ADMIN in self._roles

    def has_role(self, role: Union[str, UserRole]) -> bool:
        return UserRole.from_string(role) in self._roles

    def is_self(self, other: "User | UUID") -> bool:
        other_id = other.id if isinstance(other, User) else other
        return self._id == other_id

    def can_manage_user(self, target: "User") -> bool:
        """SYSTEM_ADMIN manages anyone, ADMIN manages plain users, others only themselves."""
        if self.is_system_admin:
            return True
        if self.has_role(UserRole.ADMIN):
            return not target.is_admin
        return self.is_self(target)

    def _touch(self, at: datetime | None = None) -> None:
        self._updated_at = max(at or utc_now(), self._updated_at)

    def update_profile(self, **changes: Any) -> None:
        """Merge profile fields.

        Raises
        ------
        ValidationError
            If a field is unknown or the merged profile breaks a rule
        """
        profile = self._profile.merge(**changes)
        profile.validate()
        self._profile = profile
        self._touch()

    def update_password(self, credential: Credential) -> None:
        self._credential = credential
        self._touch()

    def verify_email(self) -> None:
        self._email_verified = True
        self._touch()

    def activate(self) -> None:
        self._is_active = True
        self._touch()

    def deactivate(self) -> None:
        self._is_active = False
        self._touch()

    def add_role(self, role: Union[str, UserRole]) -> None:
        role = UserRole.from_string(role)
        if role in self._roles:
            return
        self._roles = self._roles | {role}
        self._touch()

    def remove_role(self, role: Union[str, UserRole]) -> None:
        role = UserRole.from_string(role)
        if role not in self._roles:
            return
        if self._roles == {role}:
            msg = "A user must keep at least one role"
            raise InvalidOperationError(msg, {"role": role.value})
        self._roles = self._roles - {role}
        self._touch()

    def update_last_login(self) -> None:
        now = utc_now()
        self._last_login_at = now
        self._touch(now)

    @classmethod
    def create(
        cls,
        email: Union[str, Email],
        credential: Credential,
        roles: Iterable[Union[str, UserRole]] | None = None,
        profile: UserProfile | None = None,
        created_by: UUID | None = None,
    ) -> "User":
        if profile is not None:
            profile.validate()
        return cls(
            email=email,
            credential=credential,
            roles=roles,
            profile=profile,
            created_by=created_by,
        )

    @classmethod
    def reconstitute(  # noqa: PLR0913
        cls,
        id: UUID,
        email: Union[str, Email],
        credential: Credential,
        roles: Iterable[Union[str, UserRole]],
        profile: UserProfile,
        email_verified: bool,
        is_active: bool,
        created_at: datetime,
        updated_at: datetime,
        last_login_at: datetime | None = None,
        created_by: UUID | None = None,
    ) -> "User":
        return cls(
            id=id,
            email=email,
            credential=credential,
            roles=roles,
            profile=profile,
            email_verified=email_verified,
            is_active=is_active,
            created_at=created_at,
            updated_at=updated_at,
            last_login_at=last_login_at,
            created_by=created_by,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return (
            f"User(id={self._id}, email={self._email.value}, "
            f"roles={sorted(r.value for r in self._roles)}, active={self._is_active})"
        )
