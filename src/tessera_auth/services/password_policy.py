"""Password policy enforcement and strength scoring.

Rules are evaluated in a fixed order and stop at the first failure:
length, character classes, forbidden words, common patterns.
"""

from __future__ import annotations

import re
import secrets
from dataclasses import dataclass, field, replace
from typing import Any

from tessera_auth.exceptions import InvalidPasswordError

SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'

DEFAULT_FORBIDDEN_PASSWORDS: tuple[str, ...] = (
    "password",
    "123456",
    "123456789",
    "qwerty",
    "abc123",
    "password123",
    "admin",
    "letmein",
    "welcome",
    "monkey",
)

DEFAULT_COMMON_PATTERNS: tuple[str, ...] = (
    "123",
    "abc",
    "qwerty",
    "asdf",
    "password",
    "admin",
    "user",
)

_UPPERCASE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_LOWERCASE = "abcdefghijklmnopqrstuvwxyz"
_DIGITS = "0123456789"
_GENERATOR_SYMBOLS = "!@#$%^&*()"

_REPEATING_CHARS = re.compile(r"(.)\1{2,}")

MAX_GENERATION_ATTEMPTS = 100


@dataclass(frozen=True)
class PasswordPolicy:
    """Immutable set of password rules."""

    min_length: int = 8
    max_length: int = 128
    require_uppercase: bool = True
    require_lowercase: bool = True
    require_digit: bool = True
    require_symbol: bool = True
    forbidden_passwords: tuple[str, ...] = DEFAULT_FORBIDDEN_PASSWORDS
    common_patterns: tuple[str, ...] = DEFAULT_COMMON_PATTERNS
    symbols: str = SPECIAL_CHARACTERS

    @property
    def required_class_count(self) -> int:
        return sum(
            (
                self.require_uppercase,
                self.require_lowercase,
                self.require_digit,
                self.require_symbol,
            )
        )


@dataclass(frozen=True)
class PolicyOk:
    """The password satisfies every rule."""

    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class PolicyViolation:
    """The first rule the password failed."""

    reason: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)
    ok: bool = field(default=False, init=False)

    def to_error(self) -> InvalidPasswordError:
        return InvalidPasswordError(self.reason, self.message, self.details)


PolicyResult = PolicyOk | PolicyViolation


class PasswordPolicyService:
    """Validates, scores and generates passwords against a policy.

    Examples
    --------
    >>> service = PasswordPolicyService()
    >>> service.enforce("Tr0ub4dor&3!").ok
    True
    >>> service.enforce("short").reason
    'too_short'
    """

    def __init__(self, policy: PasswordPolicy | None = None):
        self._policy = policy or PasswordPolicy()

    @property
    def policy(self) -> PasswordPolicy:
        return self._policy

    def enforce(
        self,
        password: str,
        policy: PasswordPolicy | None = None,
    ) -> PolicyResult:
        """Check a password against the policy.

        Parameters
        ----------
        password
            Plaintext password to check
        policy
            Optional policy overriding the service default for this call

        Returns
        -------
        PolicyOk, or a PolicyViolation describing the first failing rule
        """
        active = policy or self._policy

        if len(password) < active.min_length:
            return PolicyViolation(
                "too_short",
                f"Password must be at least {active.min_length} characters long",
                {"min_length": active.min_length},
            )
        if len(password) > active.max_length:
            return PolicyViolation(
                "too_long",
                f"Password must not exceed {active.max_length} characters",
                {"max_length": active.max_length},
            )

        if active.require_uppercase and not _contains_any(password, _UPPERCASE):
            return PolicyViolation(
                "uppercase", "Password must contain at least one uppercase letter"
            )
        if active.require_lowercase and not _contains_any(password, _LOWERCASE):
            return PolicyViolation(
                "lowercase", "Password must contain at least one lowercase letter"
            )
        if active.require_digit and not _contains_any(password, _DIGITS):
            return PolicyViolation("digit", "Password must contain at least one number")
        if active.require_symbol and not _contains_any(password, active.symbols):
            return PolicyViolation(
                "special_character",
                "Password must contain at least one special character",
                {"allowed": active.symbols},
            )

        lowered = password.lower()
        if any(word.lower() in lowered for word in active.forbidden_passwords):
            return PolicyViolation(
                "forbidden_pattern", "Password contains forbidden patterns"
            )
        if _has_common_pattern(lowered, active.common_patterns):
            return PolicyViolation("common_pattern", "Password contains common patterns")

        return PolicyOk()

    def enforce_or_raise(
        self,
        password: str,
        policy: PasswordPolicy | None = None,
    ) -> None:
        """Raise InvalidPasswordError if the password violates the policy."""
        result = self.enforce(password, policy)
        if isinstance(result, PolicyViolation):
            raise result.to_error()

    def score(self, password: str) -> int:
        """Score password strength from 0 to 100."""
        score = 0

        length = len(password)
        if length >= 8:
            score += 10
        if length >= 12:
            score += 10
        if length >= 16:
            score += 10

        if _contains_any(password, _LOWERCASE):
            score += 10
        if _contains_any(password, _UPPERCASE):
            score += 10
        if _contains_any(password, _DIGITS):
            score += 10
        if _contains_any(password, SPECIAL_CHARACTERS):
            score += 15

        if not _REPEATING_CHARS.search(password):
            score += 10
        if not _has_ascending_sequence(password):
            score += 10
        if not _has_common_pattern(password.lower(), self._policy.common_patterns):
            score += 15

        return min(score, 100)

    def generate_compliant(self, length: int = 12) -> str:
        """Generate a random password that passes the policy.

        Parameters
        ----------
        length
            Desired password length

        Returns
        -------
        A password built with the ``secrets`` CSPRNG

        Raises
        ------
        ValueError
            If length cannot satisfy the policy
        """
        policy = self._policy
        if length < max(policy.required_class_count, policy.min_length):
            msg = (
                f"Password length must be at least "
                f"{max(policy.required_class_count, policy.min_length)}"
            )
            raise ValueError(msg)
        if length > policy.max_length:
            msg = f"Password length must not exceed {policy.max_length}"
            raise ValueError(msg)

        symbols = "".join(c for c in _GENERATOR_SYMBOLS if c in policy.symbols)
        symbols = symbols or policy.symbols

        required: list[str] = []
        if policy.require_uppercase:
            required.append(_UPPERCASE)
        if policy.require_lowercase:
            required.append(_LOWERCASE)
        if policy.require_digit:
            required.append(_DIGITS)
        if policy.require_symbol:
            required.append(symbols)
        alphabet = _UPPERCASE + _LOWERCASE + _DIGITS + symbols

        for _ in range(MAX_GENERATION_ATTEMPTS):
            chars = [secrets.choice(pool) for pool in required]
            chars.extend(secrets.choice(alphabet) for _ in range(length - len(chars)))
            _shuffle(chars)
            candidate = "".join(chars)
            if isinstance(self.enforce(candidate), PolicyOk):
                return candidate

        msg = "Could not generate a password satisfying the policy"
        raise RuntimeError(msg)

    def requirements(self, policy: PasswordPolicy | None = None) -> list[str]:
        """Human-readable list of the policy rules."""
        active = policy or self._policy
        rules = [
            f"At least {active.min_length} characters long",
            f"At most {active.max_length} characters long",
        ]
        if active.require_uppercase:
            rules.append("Contains at least one uppercase letter")
        if active.require_lowercase:
            rules.append("Contains at least one lowercase letter")
        if active.require_digit:
            rules.append("Contains at least one number")
        if active.require_symbol:
            rules.append(f"Contains at least one special character ({active.symbols})")
        rules.append("Does not contain common patterns or forbidden words")
        return rules

    def with_overrides(self, **overrides: Any) -> PasswordPolicy:
        """Return a copy of the service policy with some fields replaced."""
        return replace(self._policy, **overrides)


def _contains_any(value: str, alphabet: str) -> bool:
    return any(c in alphabet for c in value)


def _has_common_pattern(lowered: str, patterns: tuple[str, ...]) -> bool:
    return any(pattern in lowered for pattern in patterns)


def _has_ascending_sequence(value: str) -> bool:
    for a, b, c in zip(value, value[1:], value[2:]):
        if ord(b) == ord(a) + 1 and ord(c) == ord(b) + 1:
            return True
    return False


def _shuffle(chars: list[str]) -> None:
    # Fisher-Yates driven by the CSPRNG
    for i in range(len(chars) - 1, 0, -1):
        j = secrets.randbelow(i + 1)
        chars[i], chars[j] = chars[j], chars[i]
