"""JWT token service.

Provides JWT token creation and verification for the four token types.
Every type is signed with its own secret, so a token minted for one
purpose cannot be replayed for another.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID, uuid4

import jwt

from tessera_auth.exceptions import (
    TokenConfigurationError,
    TokenExpiredError,
    TokenInvalidError,
    TokenTypeMismatchError,
)
from tessera_auth.schemas import TokenPair, TokenPayload, TokenSubject, TokenType

logger = logging.getLogger(__name__)

DEFAULT_TTLS: dict[TokenType, timedelta] = {
    TokenType.ACCESS: timedelta(minutes=15),
    TokenType.REFRESH: timedelta(days=7),
    TokenType.EMAIL_VERIFICATION: timedelta(hours=24),
    TokenType.PASSWORD_RESET: timedelta(hours=1),
}

_REQUIRED_CLAIMS = ["sub", "type", "iat", "exp", "jti"]


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class JWTService:
    """Service for JWT token creation and verification.

    Expiry is evaluated against the injected ``now`` clock rather than
    PyJWT's wall clock, and is exclusive: a token checked at exactly
    its ``exp`` instant is expired.

    Examples
    --------
    >>> service = JWTService({TokenType.ACCESS: "your-secret-key"})
    >>> token = service.create_access_token(user_id, "user@example.com")
    >>> payload = service.verify(TokenType.ACCESS, token)
    >>> print(payload.user_id)
    """

    ALGORITHM = "HS256"

    def __init__(
        self,
        secrets: Mapping[TokenType, str | None],
        ttls: Mapping[TokenType, timedelta] | None = None,
        issuer: str | None = None,
        now: Callable[[], datetime] = _utc_now,
    ):
        """Initialize the JWT service.

        Parameters
        ----------
        secrets
            Signing secret per token type. Types without a secret cannot be
            issued or verified.
        ttls
            Lifetime per token type; missing entries fall back to defaults
        issuer
            Optional ``iss`` claim added to and required on every token
        now
            Clock returning the current timezone-aware UTC time
        """
        if not secrets.get(TokenType.ACCESS):
            msg = "JWT access secret cannot be empty"
            raise ValueError(msg)

        self._secrets = {TokenType(k): v for k, v in secrets.items() if v}
        self._ttls = {**DEFAULT_TTLS, **{TokenType(k): v for k, v in (ttls or {}).items()}}
        self._issuer = issuer
        self._now = now

    def has_secret(self, token_type: TokenType) -> bool:
        return token_type in self._secrets

    def get_expiration_time(self, token_type: TokenType = TokenType.ACCESS) -> int:
        """Lifetime of the given token type in seconds."""
        return int(self._ttls[token_type].total_seconds())

    def issue(self, token_type: TokenType, subject: TokenSubject) -> str:
        """Create a signed token of the given type.

        Parameters
        ----------
        token_type
            Which kind of token to mint
        subject
            User the token is issued for

        Returns
        -------
        The encoded JWT token string

        Raises
        ------
        TokenConfigurationError
            If no secret is configured for the token type
        """
        token_type = TokenType(token_type)
        secret = self._secret_for(token_type)

        issued_at = int(self._now().timestamp())
        expires_at = issued_at + self.get_expiration_time(token_type)

        payload: dict[str, Any] = {
            "sub": str(subject.user_id),
            "email": subject.email,
            "type": token_type.value,
            "iat": issued_at,
            "exp": expires_at,
            "jti": uuid4().hex,
        }
        if token_type.carries_roles:
            payload["roles"] = list(subject.roles)
        if self._issuer:
            payload["iss"] = self._issuer

        logger.debug("Issued %s token for user %s", token_type.value, subject.user_id)
        return jwt.encode(payload, secret, algorithm=self.ALGORITHM)

    def verify(self, token_type: TokenType, token: str) -> TokenPayload:
        """Verify and decode a token of the expected type.

        Checks run in order: signature, type tag, expiry.

        Parameters
        ----------
        token_type
            The type the caller expects
        token
            The JWT token string to verify

        Returns
        -------
        TokenPayload containing the decoded data

        Raises
        ------
        TokenInvalidError
            If the signature, shape or claims are invalid
        TokenTypeMismatchError
            If the token was minted for a different purpose
        TokenExpiredError
            If the token is at or past its expiry instant
        TokenConfigurationError
            If no secret is configured for the expected type
        """
        token_type = TokenType(token_type)
        secret = self._secret_for(token_type)

        try:
            claims = jwt.decode(
                token,
                secret,
                algorithms=[self.ALGORITHM],
                issuer=self._issuer,
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": _REQUIRED_CLAIMS,
                },
            )
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError(f"Invalid token: {e}") from e

        actual_type = claims.get("type")
        if actual_type != token_type.value:
            raise TokenTypeMismatchError(token_type.value, actual_type)

        payload = self._to_payload(claims, token_type)
        if payload.is_expired(self._now()):
            raise TokenExpiredError
        return payload

    def decode_unverified(self, token: str) -> dict[str, Any] | None:
        """Read claims without checking the signature.

        For diagnostics only, never for trust decisions.
        """
        try:
            return jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError:
            return None

    def create_access_token(
        self,
        user_id: UUID,
        email: str,
        roles: tuple[str, ...] = (),
    ) -> str:
        """Create a short-lived access token."""
        return self.issue(TokenType.ACCESS, TokenSubject(user_id, email, tuple(roles)))

    def create_refresh_token(
        self,
        user_id: UUID,
        email: str,
        roles: tuple[str, ...] = (),
    ) -> str:
        """Create a long-lived refresh token.

        Refresh tokens are used to obtain new access tokens without
        requiring the user to log in again.
        """
        return self.issue(TokenType.REFRESH, TokenSubject(user_id, email, tuple(roles)))

    def create_email_verification_token(self, user_id: UUID, email: str) -> str:
        return self.issue(TokenType.EMAIL_VERIFICATION, TokenSubject(user_id, email))

    def create_password_reset_token(self, user_id: UUID, email: str) -> str:
        return self.issue(TokenType.PASSWORD_RESET, TokenSubject(user_id, email))

    def create_token_pair(self, subject: TokenSubject) -> TokenPair:
        """Mint an access and a refresh token for the same subject.

        The refresh token is not registered with any revocation store;
        use RefreshTokenService for that.
        """
        return TokenPair(
            access_token=self.issue(TokenType.ACCESS, subject),
            refresh_token=self.issue(TokenType.REFRESH, subject),
            expires_in=self.get_expiration_time(TokenType.ACCESS),
        )

    def _secret_for(self, token_type: TokenType) -> str:
        secret = self._secrets.get(token_type)
        if not secret:
            raise TokenConfigurationError(token_type.value)
        return secret

    @staticmethod
    def _to_payload(claims: dict[str, Any], token_type: TokenType) -> TokenPayload:
        try:
            roles = claims.get("roles") or []
            if not isinstance(roles, list):
                msg = "roles claim must be a list"
                raise ValueError(msg)
            return TokenPayload(
                user_id=UUID(claims["sub"]),
                email=claims.get("email", ""),
                token_type=token_type,
                issued_at=datetime.fromtimestamp(claims["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
                roles=tuple(str(r) for r in roles),
                token_id=claims.get("jti"),
            )
        except (KeyError, ValueError, TypeError, OverflowError) as e:
            raise TokenInvalidError(f"Malformed token payload: {e}") from e
