"""
Auth Service

Registration and login.

- Every registration field is sanitized before the uniqueness checks, so
  lookups and inserts see the same value.
- Hashing runs off the event loop.
- Login failures are indistinguishable to the caller; the real cause is
  only logged.
- Hashes below the current bcrypt cost are upgraded on successful login.
"""
import logging
from typing import Optional

from chirp.core.exceptions import (
    CredentialError,
    EmailTakenError,
    InvalidCredentialsError,
    InvalidRegistrationFieldError,
    UsernameTakenError,
)
from chirp.repositories import UserRepository
from chirp.schemas.schemas import LoginInput, RegisterInput, UserRecord
from chirp.services.credential_hasher import CredentialHasher, get_credential_hasher
from chirp.services.sanitization import SanitizationEngine, get_sanitizer

logger = logging.getLogger(__name__)


class AuthService:
    """
    Service for account registration and authentication.

    Features:
    - Field sanitization before persistence
    - bcrypt hashing at the configured cost
    - Lazy hash migration on login
    """

    def __init__(
        self,
        users: UserRepository,
        sanitizer: Optional[SanitizationEngine] = None,
        hasher: Optional[CredentialHasher] = None,
    ):
        self.users = users
        self.sanitizer = sanitizer or get_sanitizer()
        self.hasher = hasher or get_credential_hasher()

    # ============================================================
    # Registration
    # ============================================================

    async def register(self, data: RegisterInput) -> UserRecord:
        """
        Create a new account.

        Args:
            data: Raw registration fields

        Returns:
            The stored user

        Raises:
            InvalidRegistrationFieldError: A field is empty once sanitized
            UsernameTakenError: Sanitized username already registered
            EmailTakenError: Sanitized email already registered
            EmptySecretError: Password is empty
        """
        username = self.sanitizer.sanitize_username(data.username)
        email = self.sanitizer.sanitize_email(data.email)
        display_name = self.sanitizer.sanitize_display_name(data.display_name)

        for field, value in (
            ("username", username),
            ("email", email),
            ("display_name", display_name),
        ):
            if not value:
                raise InvalidRegistrationFieldError(field)

        if await self.users.get_by_username(username):
            raise UsernameTakenError()

        if await self.users.get_by_email(email):
            raise EmailTakenError()

        password_hash = await self.hasher.hash_async(data.password)

        user = await self.users.create(
            username=username,
            email=email,
            display_name=display_name,
            password_hash=password_hash,
        )
        logger.info(f"Registered user {user.id}")
        return user

    # ============================================================
    # Login
    # ============================================================

    async def login(self, data: LoginInput) -> UserRecord:
        """
        Verify credentials.

        Args:
            data: Email and password as submitted

        Returns:
            The authenticated user (with the upgraded hash if migrated)

        Raises:
            InvalidCredentialsError: Unknown email, wrong password, or a
                stored hash that cannot be verified
        """
        email = self.sanitizer.sanitize_email(data.email)
        user = await self.users.get_by_email(email) if email else None
        if user is None:
            logger.info("Login failed: unknown email")
            raise InvalidCredentialsError()

        try:
            is_valid = await self.hasher.compare_async(data.password, user.password_hash)
        except CredentialError as e:
            # Corrupted hash column or empty password - never reported as such
            logger.error(f"Login failed for user {user.id}: {e.code}")
            raise InvalidCredentialsError() from e

        if not is_valid:
            logger.info(f"Login failed for user {user.id}: wrong password")
            raise InvalidCredentialsError()

        return await self._upgrade_hash(user, data.password)

    async def _upgrade_hash(self, user: UserRecord, password: str) -> UserRecord:
        """
        Re-hash at the current cost if needed. Failures never block the login.

        Only called once the password has been verified, so the hash is
        recomputed directly instead of through migrate_hash().
        """
        if not self.hasher.needs_migration(user.password_hash):
            return user

        try:
            new_hash = await self.hasher.hash_async(password)
            await self.users.update_password_hash(user.id, new_hash)
        except Exception as e:
            logger.error(f"Password hash migration failed for user {user.id}: {type(e).__name__}: {e}")
            return user

        logger.info(f"Migrated password hash for user {user.id} to cost {self.hasher.current_cost}")
        return user.model_copy(update={"password_hash": new_hash})
