"""Auth schemas and data structures.

These are simple data classes used for transferring token and
credential data between components.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID


class TokenType(str, Enum):
    """Closed set of token types. Each type has its own secret and TTL."""

    ACCESS = "access"
    REFRESH = "refresh"
    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"

    @property
    def carries_roles(self) -> bool:
        return self in (TokenType.ACCESS, TokenType.REFRESH)


@dataclass(frozen=True)
class TokenSubject:
    """Claims describing who a token is issued for."""

    user_id: UUID
    email: str
    roles: tuple[str, ...] = ()


@dataclass(frozen=True)
class TokenPayload:
    """Decoded and verified token payload.

    Attributes
    ----------
    user_id
        The unique identifier of the user
    email
        The user's email address
    roles
        Role values at issuance time (empty for purpose-scoped tokens)
    token_type
        One of the TokenType values
    issued_at
        Token issuance timestamp
    expires_at
        Token expiration timestamp (exclusive)
    token_id
        Unique token identifier (jti claim)
    """

    user_id: UUID
    email: str
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime
    roles: tuple[str, ...] = ()
    token_id: str | None = None

    def is_expired(self, now: datetime) -> bool:
        """A token checked at exactly its expiry instant is expired."""
        return now >= self.expires_at

    def is_access_token(self) -> bool:
        return self.token_type == TokenType.ACCESS

    def is_refresh_token(self) -> bool:
        return self.token_type == TokenType.REFRESH

    def subject(self) -> TokenSubject:
        return TokenSubject(user_id=self.user_id, email=self.email, roles=self.roles)


@dataclass(frozen=True)
class TokenPair:
    """Access and refresh token handed to a client after authentication."""

    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = field(default="bearer")


@dataclass(frozen=True)
class HashInfo:
    """Introspection result for a stored credential hash."""

    algorithm: str
    cost: int


@dataclass(frozen=True)
class SessionInfo:
    """An active refresh-token session as shown to its owner."""

    id: UUID
    created_at: datetime
    last_used_at: datetime | None
    user_agent: str | None
    ip_address: str | None
    is_current: bool = False
