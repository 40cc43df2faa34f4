"""Password hashing service using bcrypt.

Provides one-way credential hashing and verification with a
configurable work factor, plus introspection helpers for hash
upgrade tooling.
"""

import asyncio
import re

import bcrypt

from tessera_auth.exceptions import MalformedCredentialError
from tessera_auth.schemas import HashInfo

BCRYPT_HASH_PATTERN = re.compile(r"^\$2[abxy]\$\d{2}\$.{53}$")
_BCRYPT_PREFIX_PATTERN = re.compile(r"^\$2([abxy])\$(\d{2})\$")

# bcrypt only consumes the first 72 bytes of a secret
BCRYPT_MAX_BYTES = 72


class PasswordHashingService:
    """Service for secure password hashing and verification.

    Uses bcrypt for password hashing with configurable work factor.
    The service is stateless and safe to share between concurrent
    requests. Use the ``*_async`` variants from async code so the
    CPU-bound work runs in a worker thread.

    bcrypt only reads the first 72 UTF-8 bytes of a password. Longer
    input is truncated before hashing and verifying, so two passwords
    sharing their first 72 bytes verify against the same hash. The
    password policy allows up to 128 characters; nothing past the 72nd
    byte adds strength.

    Examples
    --------
    >>> service = PasswordHashingService()
    >>> hashed = service.hash("my_secure_password")
    >>> service.verify("my_secure_password", hashed)
    True
    >>> service.verify("wrong_password", hashed)
    False
    """

    DEFAULT_ROUNDS = 12
    MIN_ROUNDS = 4
    MAX_ROUNDS = 31

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        """Initialize the password hashing service.

        Parameters
        ----------
        rounds
            The bcrypt work factor (log2 of iterations). Default is 12.
            Higher values are more secure but slower.
        """
        if not self.MIN_ROUNDS <= rounds <= self.MAX_ROUNDS:
            msg = f"bcrypt rounds must be between {self.MIN_ROUNDS} and {self.MAX_ROUNDS}"
            raise ValueError(msg)
        self._rounds = rounds

    @property
    def rounds(self) -> int:
        return self._rounds

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:BCRYPT_MAX_BYTES]

    def hash(self, password: str) -> str:
        """Hash a plaintext password with a fresh random salt.

        Parameters
        ----------
        password
            The plaintext password to hash

        Returns
        -------
        The bcrypt hash as a string

        Raises
        ------
        ValueError
            If password is empty
        """
        if not password:
            msg = "Password cannot be empty"
            raise ValueError(msg)
        salt = bcrypt.gensalt(rounds=self._rounds)
        hashed = bcrypt.hashpw(self._encode(password), salt)
        return hashed.decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against a hash.

        Parameters
        ----------
        password
            The plaintext password to check
        password_hash
            The bcrypt hash to verify against

        Returns
        -------
        True if password matches, False otherwise

        Raises
        ------
        MalformedCredentialError
            If password_hash is not structurally a bcrypt hash
        """
        if not self.is_hashed(password_hash):
            raise MalformedCredentialError
        if not password:
            return False

        try:
            return bcrypt.checkpw(
                self._encode(password),
                password_hash.encode("utf-8"),
            )
        except (ValueError, TypeError):
            # Well-formed prefix but undecodable salt/digest
            return False

    compare = verify

    async def hash_async(self, password: str) -> str:
        """Hash in a worker thread so the event loop is not blocked."""
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, password: str, password_hash: str) -> bool:
        """Verify in a worker thread so the event loop is not blocked."""
        return await asyncio.to_thread(self.verify, password, password_hash)

    @staticmethod
    def is_hashed(value: str) -> bool:
        """Check whether a value looks like a bcrypt hash."""
        return bool(value) and BCRYPT_HASH_PATTERN.match(value) is not None

    @staticmethod
    def describe(password_hash: str) -> HashInfo | None:
        """Return algorithm and cost of a bcrypt hash, or None if unrecognised."""
        if not PasswordHashingService.is_hashed(password_hash):
            return None
        match = _BCRYPT_PREFIX_PATTERN.match(password_hash)
        return HashInfo(
            algorithm=f"bcrypt-2{match.group(1)}",
            cost=int(match.group(2)),
        )

    def needs_rehash(self, password_hash: str) -> bool:
        """Check if a password hash needs to be rehashed.

        This is useful when upgrading the work factor. After changing
        the rounds setting, existing hashes can be identified for
        rehashing on next login.

        Parameters
        ----------
        password_hash
            The existing hash to check

        Returns
        -------
        True if the hash should be regenerated
        """
        info = self.describe(password_hash)
        if info is None:
            return True
        return info.cost != self._rounds
