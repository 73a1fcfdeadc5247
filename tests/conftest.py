"""
Pytest configuration and fixtures for Chirp tests.
"""
import os
import pytest
from unittest.mock import AsyncMock

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "test"

from chirp.repositories import TweetRepository, UserRepository  # noqa: E402
from chirp.schemas.schemas import TweetRecord, UserRecord  # noqa: E402
from chirp.services.credential_hasher import CredentialHasher  # noqa: E402
from chirp.services.sanitization import SanitizationEngine  # noqa: E402


@pytest.fixture
def sanitizer() -> SanitizationEngine:
    return SanitizationEngine()


@pytest.fixture
def hasher() -> CredentialHasher:
    """Production costs: current 12, legacy 10."""
    return CredentialHasher(current_cost=12, legacy_cost=10)


@pytest.fixture
def fast_hasher() -> CredentialHasher:
    """Minimum costs so service tests stay quick."""
    return CredentialHasher(current_cost=5, legacy_cost=4)


@pytest.fixture
def mock_user_repository() -> AsyncMock:
    """User repository with nothing stored."""
    repo = AsyncMock(spec=UserRepository)
    repo.get_by_id.return_value = None
    repo.get_by_username.return_value = None
    repo.get_by_email.return_value = None
    repo.update_password_hash.return_value = None

    async def create(username, email, display_name, password_hash):
        return UserRecord(
            id="user-1",
            username=username,
            email=email,
            display_name=display_name,
            password_hash=password_hash,
        )

    repo.create.side_effect = create
    return repo


@pytest.fixture
def mock_tweet_repository() -> AsyncMock:
    repo = AsyncMock(spec=TweetRepository)

    async def create(author_id, content):
        return TweetRecord(id="tweet-1", author_id=author_id, content=content)

    repo.create.side_effect = create
    return repo


@pytest.fixture
def sample_user_data() -> dict:
    return {
        "id": "user-42",
        "username": "john_doe",
        "email": "john.doe@example.com",
        "display_name": "John Doe",
    }
