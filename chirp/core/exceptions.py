"""
Chirp Exception Hierarchy

Structured exception classes for credential handling, authentication,
registration and tweet publishing. All exceptions carry code, message and
details so the auth layer can log the real cause while returning a
generic message to the client.

Exception Hierarchy:
    ChirpBaseError
    ├── CredentialError
    │   ├── EmptySecretError
    │   ├── MissingInputError
    │   ├── MalformedHashError
    │   └── InvalidHashFormatError
    ├── AuthenticationError
    │   └── InvalidCredentialsError
    ├── RegistrationError
    │   ├── InvalidRegistrationFieldError
    │   ├── UsernameTakenError
    │   └── EmailTakenError
    └── TweetError
        ├── EmptyTweetError
        ├── TweetTooLongError
        └── AuthorNotFoundError
"""
import logging
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class ChirpBaseError(Exception):
    """
    Base exception for all Chirp custom errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context for debugging/audit
        severity: P0-P3 severity level
    """

    default_code: str = "CHIRP_ERROR"
    default_severity: str = "P2"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[str] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        self.severity = severity or self.default_severity
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


# =============================================================================
# CREDENTIAL ERRORS
# =============================================================================

class CredentialError(ChirpBaseError):
    """Base exception for password hashing failures."""
    default_code = "CREDENTIAL_ERROR"
    default_severity = "P1"


class EmptySecretError(CredentialError):
    """Attempted to hash an empty secret."""
    default_code = "EMPTY_SECRET"
    default_severity = "P2"

    def __init__(self, message: str = "Password cannot be empty", **kwargs):
        super().__init__(message, **kwargs)


class MissingInputError(CredentialError):
    """Secret or hash missing on comparison."""
    default_code = "MISSING_INPUT"
    default_severity = "P2"

    def __init__(self, message: str = "Both password and hash are required", **kwargs):
        super().__init__(message, **kwargs)


class MalformedHashError(CredentialError):
    """Stored hash cannot be verified - possible data corruption."""
    default_code = "MALFORMED_HASH"
    default_severity = "P0"  # A corrupted credential store is critical

    def __init__(self, message: str = "Invalid hash format", **kwargs):
        super().__init__(message, **kwargs)


class InvalidHashFormatError(CredentialError):
    """Cost factor could not be parsed out of a hash."""
    default_code = "INVALID_HASH_FORMAT"

    def __init__(self, message: str = "Invalid bcrypt hash format", **kwargs):
        super().__init__(message, **kwargs)


# =============================================================================
# AUTHENTICATION ERRORS
# =============================================================================

class AuthenticationError(ChirpBaseError):
    """Base exception for login failures."""
    default_code = "AUTH_ERROR"
    default_severity = "P2"


class InvalidCredentialsError(AuthenticationError):
    """
    Login rejected.

    Deliberately identical for unknown user, wrong password and
    unverifiable hash.
    """
    default_code = "INVALID_CREDENTIALS"

    def __init__(self, message: str = "Invalid credentials", **kwargs):
        super().__init__(message, **kwargs)


# =============================================================================
# REGISTRATION ERRORS
# =============================================================================

class RegistrationError(ChirpBaseError):
    """Base exception for account registration failures."""
    default_code = "REGISTRATION_ERROR"
    default_severity = "P3"


class InvalidRegistrationFieldError(RegistrationError):
    """A registration field was empty once sanitized."""
    default_code = "INVALID_REGISTRATION_FIELD"

    def __init__(self, field: str, message: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        details["field"] = field
        super().__init__(message or f"Invalid {field}", details=details, **kwargs)


class UsernameTakenError(RegistrationError):
    """Username already registered."""
    default_code = "USERNAME_TAKEN"

    def __init__(self, message: str = "Username already exists", **kwargs):
        super().__init__(message, **kwargs)


class EmailTakenError(RegistrationError):
    """Email already registered."""
    default_code = "EMAIL_TAKEN"

    def __init__(self, message: str = "Email already exists", **kwargs):
        super().__init__(message, **kwargs)


# =============================================================================
# TWEET ERRORS
# =============================================================================

class TweetError(ChirpBaseError):
    """Base exception for tweet publishing failures."""
    default_code = "TWEET_ERROR"
    default_severity = "P3"


class EmptyTweetError(TweetError):
    """Tweet body blank before or after sanitization."""
    default_code = "TWEET_EMPTY"

    def __init__(self, message: str = "Tweet content cannot be empty", **kwargs):
        super().__init__(message, **kwargs)


class TweetTooLongError(TweetError):
    """Raw tweet body over the length limit."""
    default_code = "TWEET_TOO_LONG"

    def __init__(
        self,
        max_length: int,
        length: Optional[int] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details.update({
            "max_length": max_length,
            "length": length,
        })
        super().__init__(
            f"Tweet content cannot exceed {max_length} characters",
            details=details,
            **kwargs
        )


class AuthorNotFoundError(TweetError):
    """Tweet author does not exist."""
    default_code = "AUTHOR_NOT_FOUND"
    default_severity = "P2"

    def __init__(self, author_id: Optional[Any] = None, **kwargs):
        details = kwargs.pop("details", {})
        details["author_id"] = author_id
        super().__init__("User not found", details=details, **kwargs)


# =============================================================================
# EXCEPTION CATALOG
# =============================================================================

EXCEPTION_CATALOG = {
    "EMPTY_SECRET": {"class": EmptySecretError, "severity": "P2"},
    "MISSING_INPUT": {"class": MissingInputError, "severity": "P2"},
    "MALFORMED_HASH": {"class": MalformedHashError, "severity": "P0"},
    "INVALID_HASH_FORMAT": {"class": InvalidHashFormatError, "severity": "P1"},
    "INVALID_CREDENTIALS": {"class": InvalidCredentialsError, "severity": "P2"},
    "INVALID_REGISTRATION_FIELD": {"class": InvalidRegistrationFieldError, "severity": "P3"},
    "USERNAME_TAKEN": {"class": UsernameTakenError, "severity": "P3"},
    "EMAIL_TAKEN": {"class": EmailTakenError, "severity": "P3"},
    "TWEET_EMPTY": {"class": EmptyTweetError, "severity": "P3"},
    "TWEET_TOO_LONG": {"class": TweetTooLongError, "severity": "P3"},
    "AUTHOR_NOT_FOUND": {"class": AuthorNotFoundError, "severity": "P2"},
}
