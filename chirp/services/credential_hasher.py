"""
Credential Hasher

bcrypt password hashing with lazy cost-factor migration.

Hashes created before the cost upgrade (BCRYPT_LEGACY_ROUNDS) keep
verifying; on the next successful login the auth layer
re-hashes the secret and persists the result at BCRYPT_ROUNDS.

hash/compare are deliberately slow. From async code use the *_async
variants so the event loop is not blocked.
"""
import asyncio
import logging
import re
from typing import Optional

import bcrypt

from chirp.core.config import settings
from chirp.core.exceptions import (
    EmptySecretError,
    InvalidHashFormatError,
    MalformedHashError,
    MissingInputError,
)

logger = logging.getLogger(__name__)

BCRYPT_HASH_LENGTH = 60
BCRYPT_HASH_PREFIX = re.compile(r"^\$2[aby]\$\d{2}\$")

# bcrypt only reads the first 72 bytes of a secret
BCRYPT_MAX_SECRET_BYTES = 72


class CredentialHasher:
    """
    Salted bcrypt hashing at a fixed target cost.

    Holds no mutable state; safe to share across threads.
    """

    def __init__(self, current_cost: int = 12, legacy_cost: int = 10):
        if legacy_cost >= current_cost:
            raise ValueError(
                f"legacy_cost ({legacy_cost}) must be lower than current_cost ({current_cost})"
            )
        self._current_cost = current_cost
        self._legacy_cost = legacy_cost

    @property
    def current_cost(self) -> int:
        return self._current_cost

    @property
    def legacy_cost(self) -> int:
        return self._legacy_cost

    # ============================================================
    # Hashing
    # ============================================================

    def hash(self, secret: str) -> str:
        """
        Hash a secret at the current cost with a fresh salt.

        Raises:
            EmptySecretError: If secret is empty or None
        """
        if not secret:
            raise EmptySecretError()

        return bcrypt.hashpw(
            self._encode(secret),
            bcrypt.gensalt(rounds=self._current_cost)
        ).decode("utf-8")

    def compare(self, secret: str, hashed: str) -> bool:
        """
        Check a secret against a stored hash.

        bcrypt.checkpw compares in constant time.

        Raises:
            MissingInputError: If either argument is empty
            MalformedHashError: If the hash is not a 60-char $2a/$2b/$2y
                hash, or bcrypt cannot verify it
        """
        if not secret or not hashed:
            raise MissingInputError()

        if not self.is_valid_hash(hashed):
            logger.warning("Rejected malformed password hash")
            raise MalformedHashError()

        try:
            return bcrypt.checkpw(self._encode(secret), hashed.encode("utf-8"))
        except Exception as e:
            logger.warning(f"bcrypt could not verify hash: {type(e).__name__}")
            raise MalformedHashError() from e

    def generate_salt(self) -> str:
        """Fresh bcrypt salt at the current cost."""
        return bcrypt.gensalt(rounds=self._current_cost).decode("utf-8")

    # ============================================================
    # Migration
    # ============================================================

    def needs_migration(self, hashed: Optional[str]) -> bool:
        """
        True if the hash was produced below the current cost.

        An unparseable hash also needs migration. Empty input does not.
        """
        if not hashed:
            return False

        try:
            cost = self.extract_cost_factor(hashed)
        except InvalidHashFormatError:
            return True

        return cost < self._current_cost

    def migrate_hash(self, secret: str, hashed: str) -> Optional[str]:
        """
        Re-hash a secret at the current cost.

        Returns None when either input is missing, the hash is already
        current, or the secret does not match. Never modifies the given
        hash; persisting the new value is the caller's job.

        Raises:
            MalformedHashError: If the stored hash cannot be verified
        """
        if not secret or not hashed:
            return None

        if not self.needs_migration(hashed):
            return None

        if not self.compare(secret, hashed):
            return None

        return self.hash(secret)

    def extract_cost_factor(self, hashed: str) -> int:
        """
        Read the cost factor out of "$2b$NN$...".

        Raises:
            InvalidHashFormatError: Fewer than 4 "$" segments or a
                non-integer cost segment
        """
        parts = hashed.split("$")
        if len(parts) < 4:
            raise InvalidHashFormatError()

        try:
            return int(parts[2], 10)
        except ValueError as e:
            raise InvalidHashFormatError("Invalid cost factor in hash") from e

    @staticmethod
    def is_valid_hash(hashed: Optional[str]) -> bool:
        return (
            isinstance(hashed, str)
            and len(hashed) == BCRYPT_HASH_LENGTH
            and BCRYPT_HASH_PREFIX.match(hashed) is not None
        )

    # ============================================================
    # Async wrappers
    # ============================================================

    async def hash_async(self, secret: str) -> str:
        return await asyncio.to_thread(self.hash, secret)

    async def compare_async(self, secret: str, hashed: str) -> bool:
        return await asyncio.to_thread(self.compare, secret, hashed)

    async def migrate_hash_async(self, secret: str, hashed: str) -> Optional[str]:
        return await asyncio.to_thread(self.migrate_hash, secret, hashed)

    @staticmethod
    def _encode(secret: str) -> bytes:
        # Newer bcrypt releases reject secrets past 72 bytes instead of truncating
        return secret.encode("utf-8")[:BCRYPT_MAX_SECRET_BYTES]


_hasher: Optional[CredentialHasher] = None


def get_credential_hasher() -> CredentialHasher:
    """Shared hasher configured from settings."""
    global _hasher
    if _hasher is None:
        _hasher = CredentialHasher(
            current_cost=settings.BCRYPT_ROUNDS,
            legacy_cost=settings.BCRYPT_LEGACY_ROUNDS,
        )
    return _hasher
