"""Unit tests for JWTService."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
import pytest

from tessera_auth.exceptions import (
    TokenConfigurationError,
    TokenExpiredError,
    TokenInvalidError,
    TokenTypeMismatchError,
)
from tessera_auth.schemas import TokenSubject, TokenType
from tessera_auth.services import JWTService
from tests.shared.fixtures.factories import TEST_SECRETS, FrozenClock

START = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


class TestJWTServiceInit:
    """Tests for JWTService initialization."""

    def test_init_with_access_secret_only(self):
        service = JWTService({TokenType.ACCESS: "test-secret-key"})

        assert service.has_secret(TokenType.ACCESS)
        assert not service.has_secret(TokenType.REFRESH)

    def test_init_without_access_secret_raises(self):
        """Test that empty secret raises ValueError."""
        with pytest.raises(ValueError, match="cannot be empty"):
            JWTService({TokenType.ACCESS: ""})

        with pytest.raises(ValueError, match="cannot be empty"):
            JWTService({TokenType.REFRESH: "refresh-only"})

    def test_default_expiration_times(self):
        service = JWTService(TEST_SECRETS)

        assert service.get_expiration_time() == 15 * 60
        assert service.get_expiration_time(TokenType.REFRESH) == 7 * 24 * 3600
        assert service.get_expiration_time(TokenType.EMAIL_VERIFICATION) == 24 * 3600
        assert service.get_expiration_time(TokenType.PASSWORD_RESET) == 3600

    def test_custom_ttls_override_defaults(self):
        service = JWTService(
            TEST_SECRETS,
            ttls={TokenType.ACCESS: timedelta(hours=1)},
        )

        assert service.get_expiration_time(TokenType.ACCESS) == 3600
        assert service.get_expiration_time(TokenType.PASSWORD_RESET) == 3600


class TestAccessTokens:
    """Tests for access token creation and verification."""

    def setup_method(self):
        """Set up test fixtures."""
        self.clock = FrozenClock(START)
        self.service = JWTService(TEST_SECRETS, now=self.clock)
        self.user_id = uuid4()
        self.email = "test@example.com"

    def test_verify_valid_access_token(self):
        token = self.service.create_access_token(
            user_id=self.user_id,
            email=self.email,
            roles=("admin", "user"),
        )

        payload = self.service.verify(TokenType.ACCESS, token)

        assert payload.user_id == self.user_id
        assert payload.email == self.email
        assert payload.roles == ("admin", "user")
        assert payload.token_type is TokenType.ACCESS
        assert payload.is_access_token()
        assert not payload.is_refresh_token()
        assert payload.issued_at == START
        assert payload.expires_at == START + timedelta(minutes=15)
        assert payload.token_id

    def test_claims_are_integer_seconds(self):
        token = self.service.create_access_token(self.user_id, self.email)
        claims = self.service.decode_unverified(token)

        assert claims["iat"] == int(START.timestamp())
        assert claims["exp"] == int(START.timestamp()) + 900
        assert claims["type"] == "access"
        assert claims["sub"] == str(self.user_id)
        assert "iss" not in claims

    def test_each_token_has_unique_jti(self):
        first = self.service.create_access_token(self.user_id, self.email)
        second = self.service.create_access_token(self.user_id, self.email)

        assert first != second
        assert (
            self.service.decode_unverified(first)["jti"]
            != self.service.decode_unverified(second)["jti"]
        )

    def test_token_is_valid_just_before_expiry(self):
        token = self.service.create_access_token(self.user_id, self.email)
        self.clock.advance(minutes=15, seconds=-1)

        payload = self.service.verify(TokenType.ACCESS, token)

        assert payload.user_id == self.user_id

    def test_token_is_expired_at_exact_expiry_instant(self):
        token = self.service.create_access_token(self.user_id, self.email)
        self.clock.advance(minutes=15)

        with pytest.raises(TokenExpiredError):
            self.service.verify(TokenType.ACCESS, token)

    def test_tampered_token_raises_invalid(self):
        token = self.service.create_access_token(self.user_id, self.email)
        header, body, signature = token.split(".")
        tampered = f"{header}.{body}.{signature[:-4]}AAAA"

        with pytest.raises(TokenInvalidError):
            self.service.verify(TokenType.ACCESS, tampered)

    def test_garbage_raises_invalid(self):
        with pytest.raises(TokenInvalidError):
            self.service.verify(TokenType.ACCESS, "not.a.token")

    def test_token_signed_with_other_secret_raises_invalid(self):
        other = JWTService({TokenType.ACCESS: "another-secret"}, now=self.clock)
        token = other.create_access_token(self.user_id, self.email)

        with pytest.raises(TokenInvalidError):
            self.service.verify(TokenType.ACCESS, token)

    def test_missing_required_claim_raises_invalid(self):
        token = jwt.encode(
            {"sub": str(self.user_id), "type": "access", "iat": 1, "exp": 2},
            TEST_SECRETS[TokenType.ACCESS],
            algorithm="HS256",
        )

        with pytest.raises(TokenInvalidError):
            self.service.verify(TokenType.ACCESS, token)

    def test_non_uuid_subject_raises_invalid(self):
        now = int(START.timestamp())
        token = jwt.encode(
            {
                "sub": "not-a-uuid",
                "type": "access",
                "iat": now,
                "exp": now + 60,
                "jti": "x",
            },
            TEST_SECRETS[TokenType.ACCESS],
            algorithm="HS256",
        )

        with pytest.raises(TokenInvalidError, match="Malformed"):
            self.service.verify(TokenType.ACCESS, token)


class TestTokenTypes:
    """Tests for the per-type secrets and type tags."""

    def setup_method(self):
        self.clock = FrozenClock(START)
        self.service = JWTService(TEST_SECRETS, now=self.clock)
        self.subject = TokenSubject(uuid4(), "test@example.com", ("user",))

    def test_refresh_token_rejected_as_access_token(self):
        token = self.service.issue(TokenType.REFRESH, self.subject)

        # Different secrets: the signature check fails first
        with pytest.raises(TokenInvalidError):
            self.service.verify(TokenType.ACCESS, token)

    def test_type_mismatch_with_shared_secret(self):
        """With one secret for every type, the type tag still separates them."""
        shared = {t: "same-secret" for t in TokenType}
        service = JWTService(shared, now=self.clock)
        token = service.issue(TokenType.REFRESH, self.subject)

        with pytest.raises(TokenTypeMismatchError) as exc_info:
            service.verify(TokenType.ACCESS, token)

        assert exc_info.value.expected == "access"
        assert exc_info.value.actual == "refresh"

    def test_purpose_tokens_carry_no_roles(self):
        token = self.service.create_password_reset_token(
            self.subject.user_id, self.subject.email
        )

        claims = self.service.decode_unverified(token)
        payload = self.service.verify(TokenType.PASSWORD_RESET, token)

        assert "roles" not in claims
        assert payload.roles == ()
        assert payload.expires_at == START + timedelta(hours=1)

    def test_email_verification_token_roundtrip(self):
        token = self.service.create_email_verification_token(
            self.subject.user_id, self.subject.email
        )

        payload = self.service.verify(TokenType.EMAIL_VERIFICATION, token)

        assert payload.token_type is TokenType.EMAIL_VERIFICATION
        assert payload.user_id == self.subject.user_id

    def test_missing_secret_raises_configuration_error(self):
        service = JWTService({TokenType.ACCESS: "access-only"})

        with pytest.raises(TokenConfigurationError) as exc_info:
            service.issue(TokenType.PASSWORD_RESET, self.subject)

        assert exc_info.value.token_type == "password_reset"

        with pytest.raises(TokenConfigurationError):
            service.verify(TokenType.REFRESH, "whatever")

    def test_create_token_pair(self):
        pair = self.service.create_token_pair(self.subject)

        assert pair.token_type == "bearer"
        assert pair.expires_in == 900
        access = self.service.verify(TokenType.ACCESS, pair.access_token)
        refresh = self.service.verify(TokenType.REFRESH, pair.refresh_token)

        assert access.roles == ("user",)
        assert refresh.is_refresh_token()


class TestIssuer:
    def setup_method(self):
        self.clock = FrozenClock(START)
        self.subject = TokenSubject(uuid4(), "test@example.com")

    def test_issuer_is_set_and_required(self):
        service = JWTService(TEST_SECRETS, issuer="tessera", now=self.clock)
        token = service.issue(TokenType.ACCESS, self.subject)

        assert service.decode_unverified(token)["iss"] == "tessera"
        assert service.verify(TokenType.ACCESS, token).user_id == self.subject.user_id

    def test_wrong_issuer_raises_invalid(self):
        issuer_a = JWTService(TEST_SECRETS, issuer="a", now=self.clock)
        issuer_b = JWTService(TEST_SECRETS, issuer="b", now=self.clock)
        token = issuer_a.issue(TokenType.ACCESS, self.subject)

        with pytest.raises(TokenInvalidError):
            issuer_b.verify(TokenType.ACCESS, token)


class TestDecodeUnverified:
    def test_returns_none_for_garbage(self):
        service = JWTService(TEST_SECRETS)

        assert service.decode_unverified("garbage") is None


@pytest.mark.parametrize("token_type", list(TokenType))
def test_issue_then_verify_roundtrip_for_every_type(token_type):
    service = JWTService(TEST_SECRETS, now=FrozenClock(START))
    subject = TokenSubject(uuid4(), "roundtrip@example.com", ("user",))

    payload = service.verify(token_type, service.issue(token_type, subject))

    assert payload.user_id == subject.user_id
    assert payload.token_type is token_type
    assert payload.roles == (("user",) if token_type.carries_roles else ())
