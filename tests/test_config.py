"""
Tests for settings validation and the exception hierarchy.
"""
import pytest
from pydantic import ValidationError

from chirp.core.config import Settings, settings
from chirp.core.exceptions import (
    EXCEPTION_CATALOG,
    AuthorNotFoundError,
    ChirpBaseError,
    CredentialError,
    InvalidCredentialsError,
    InvalidRegistrationFieldError,
    MalformedHashError,
    TweetTooLongError,
)


class TestSettings:

    def test_test_environment_loaded(self):
        assert settings.ENVIRONMENT == "test"

    def test_defaults(self):
        s = Settings(ENVIRONMENT="development")
        assert s.APP_NAME == "Chirp"
        assert s.DEBUG is False
        assert s.BCRYPT_ROUNDS == 12
        assert s.BCRYPT_LEGACY_ROUNDS == 10
        assert s.USERNAME_MAX_LENGTH == 20
        assert s.DISPLAY_NAME_MAX_LENGTH == 50
        assert s.TWEET_MAX_LENGTH == 280

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("TWEET_MAX_LENGTH", "500")
        monkeypatch.setenv("BCRYPT_ROUNDS", "13")
        s = Settings()
        assert s.TWEET_MAX_LENGTH == 500
        assert s.BCRYPT_ROUNDS == 13

    @pytest.mark.parametrize("rounds", [3, 32])
    def test_rounds_out_of_range(self, rounds):
        with pytest.raises(ValidationError, match="cost factor must be between"):
            Settings(ENVIRONMENT="development", BCRYPT_ROUNDS=rounds, BCRYPT_LEGACY_ROUNDS=3)

    def test_legacy_must_be_lower(self):
        with pytest.raises(ValidationError, match="must be lower than"):
            Settings(ENVIRONMENT="development", BCRYPT_ROUNDS=10, BCRYPT_LEGACY_ROUNDS=10)

    def test_production_rejects_debug(self):
        with pytest.raises(ValidationError, match="DEBUG=True is forbidden"):
            Settings(ENVIRONMENT="production", DEBUG=True)

    def test_production_rejects_weak_rounds(self):
        with pytest.raises(ValidationError, match="too weak for production"):
            Settings(ENVIRONMENT="production", BCRYPT_ROUNDS=10, BCRYPT_LEGACY_ROUNDS=8)

    def test_production_lists_every_violation(self):
        with pytest.raises(ValidationError) as exc_info:
            Settings(ENVIRONMENT="production", DEBUG=True, BCRYPT_ROUNDS=10, BCRYPT_LEGACY_ROUNDS=8)
        message = str(exc_info.value)
        assert "PRODUCTION SECURITY VIOLATIONS" in message
        assert "DEBUG=True" in message
        assert "BCRYPT_ROUNDS=10" in message

    def test_low_rounds_allowed_outside_production(self):
        s = Settings(ENVIRONMENT="development", DEBUG=True, BCRYPT_ROUNDS=5, BCRYPT_LEGACY_ROUNDS=4)
        assert s.BCRYPT_ROUNDS == 5


class TestExceptions:

    def test_to_dict(self):
        error = MalformedHashError()
        assert error.to_dict() == {
            "error_type": "MalformedHashError",
            "code": "MALFORMED_HASH",
            "message": "Invalid hash format",
            "severity": "P0",
            "details": {},
        }

    def test_hierarchy(self):
        assert issubclass(MalformedHashError, CredentialError)
        assert issubclass(CredentialError, ChirpBaseError)
        assert issubclass(InvalidCredentialsError, ChirpBaseError)

    def test_str_is_message(self):
        assert str(InvalidCredentialsError()) == "Invalid credentials"

    def test_overrides(self):
        error = InvalidCredentialsError("nope", code="CUSTOM", severity="P1", details={"a": 1})
        assert error.code == "CUSTOM"
        assert error.severity == "P1"
        assert error.details == {"a": 1}

    def test_field_error_details(self):
        error = InvalidRegistrationFieldError("email")
        assert error.message == "Invalid email"
        assert error.details == {"field": "email"}

    def test_tweet_too_long_details(self):
        error = TweetTooLongError(max_length=280, length=300)
        assert error.details == {"max_length": 280, "length": 300}

    def test_author_not_found_details(self):
        assert AuthorNotFoundError("u-1").details == {"author_id": "u-1"}

    def test_catalog_consistent(self):
        for code, entry in EXCEPTION_CATALOG.items():
            cls = entry["class"]
            assert cls.default_code == code
            assert issubclass(cls, ChirpBaseError)
            assert entry["severity"] == cls.default_severity
