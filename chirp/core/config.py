"""
Application configuration

SECURITY: Defaults are fail-safe for production.
- DEBUG defaults to False
- BCRYPT_ROUNDS defaults to the current target cost (12)
- Runtime validation catches insecure configurations
"""
import logging

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# bcrypt accepts cost factors in this range
MIN_BCRYPT_ROUNDS = 4
MAX_BCRYPT_ROUNDS = 31

# Lowest cost accepted when ENVIRONMENT=production
PRODUCTION_MIN_BCRYPT_ROUNDS = 12


class Settings(BaseSettings):
    # App - defaults are PRODUCTION safe
    APP_NAME: str = "Chirp"
    DEBUG: bool = False  # SECURE DEFAULT: off in production
    ENVIRONMENT: str = "production"  # Explicit env marker

    # Credential hashing
    BCRYPT_ROUNDS: int = 12  # target cost for new hashes
    BCRYPT_LEGACY_ROUNDS: int = 10  # cost of hashes created before the upgrade

    # Field limits
    USERNAME_MAX_LENGTH: int = 20
    DISPLAY_NAME_MAX_LENGTH: int = 50
    TWEET_MAX_LENGTH: int = 280

    @field_validator("BCRYPT_ROUNDS", "BCRYPT_LEGACY_ROUNDS")
    @classmethod
    def validate_rounds(cls, v: int) -> int:
        if not MIN_BCRYPT_ROUNDS <= v <= MAX_BCRYPT_ROUNDS:
            raise ValueError(
                f"bcrypt cost factor must be between {MIN_BCRYPT_ROUNDS} and {MAX_BCRYPT_ROUNDS}, got {v}"
            )
        return v

    @model_validator(mode="after")
    def validate_hashing_config(self):
        """Legacy cost must sit below the current cost or migration never triggers."""
        if self.BCRYPT_LEGACY_ROUNDS >= self.BCRYPT_ROUNDS:
            raise ValueError(
                f"BCRYPT_LEGACY_ROUNDS ({self.BCRYPT_LEGACY_ROUNDS}) must be lower than "
                f"BCRYPT_ROUNDS ({self.BCRYPT_ROUNDS})"
            )
        return self

    @model_validator(mode="after")
    def validate_production_config(self):
        """Runtime validation to catch insecure production configurations."""
        if self.ENVIRONMENT == "production":
            errors = []

            if self.DEBUG:
                errors.append(
                    "DEBUG=True is forbidden in production. "
                    "Set DEBUG=false or ENVIRONMENT=development"
                )

            if self.BCRYPT_ROUNDS < PRODUCTION_MIN_BCRYPT_ROUNDS:
                errors.append(
                    f"BCRYPT_ROUNDS={self.BCRYPT_ROUNDS} is too weak for production. "
                    f"Use at least {PRODUCTION_MIN_BCRYPT_ROUNDS}"
                )

            if errors:
                raise ValueError(
                    "PRODUCTION SECURITY VIOLATIONS:\n" + "\n".join(f"  - {e}" for e in errors)
                )

        return self

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
