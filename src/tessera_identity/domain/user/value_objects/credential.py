"""Credential value object.

Wraps a one-way password hash. The hash is never rendered by str(),
repr() or pydantic serialization; read it only via ``hashed_value``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic_core import core_schema

from tessera_auth.services.password_service import PasswordHashingService
from tessera_identity.domain.shared.exceptions import ValidationError

if TYPE_CHECKING:
    from pydantic import GetCoreSchemaHandler

    from tessera_auth.services import PasswordPolicyService

MASK = "********"


@dataclass(frozen=True)
class Credential:
    """A stored password hash."""

    hashed_value: str = field(repr=False)

    def __post_init__(self) -> None:
        if not self.hashed_value or not self.hashed_value.strip():
            msg = "Credential hash cannot be empty"
            raise ValidationError(msg)
        if not PasswordHashingService.is_hashed(self.hashed_value):
            msg = "Credential is not a supported password hash"
            raise ValidationError(msg)

    @classmethod
    def from_hash(cls, hashed_value: str) -> Credential:
        return cls(hashed_value)

    @classmethod
    def from_plaintext(
        cls,
        plaintext: str,
        hasher: PasswordHashingService,
        policy: PasswordPolicyService,
    ) -> Credential:
        """Enforce the password policy, then hash.

        Raises
        ------
        InvalidPasswordError
            If the plaintext violates the policy
        """
        policy.enforce_or_raise(plaintext)
        return cls(hasher.hash(plaintext))

    @classmethod
    async def from_plaintext_async(
        cls,
        plaintext: str,
        hasher: PasswordHashingService,
        policy: PasswordPolicyService,
    ) -> Credential:
        policy.enforce_or_raise(plaintext)
        return cls(await hasher.hash_async(plaintext))

    def matches(self, plaintext: str, hasher: PasswordHashingService) -> bool:
        return hasher.verify(plaintext, self.hashed_value)

    async def matches_async(
        self,
        plaintext: str,
        hasher: PasswordHashingService,
    ) -> bool:
        return await hasher.verify_async(plaintext, self.hashed_value)

    def __str__(self) -> str:
        return MASK

    def __repr__(self) -> str:
        return f"Credential({MASK})"

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,
        handler: GetCoreSchemaHandler,
    ) -> core_schema.CoreSchema:
        return core_schema.is_instance_schema(
            cls,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda _: MASK,
            ),
        )
