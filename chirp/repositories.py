"""
Repository ports

Persistence contracts consumed by the services. Implementations live with
the storage layer; the services only ever see these interfaces.
"""
from abc import ABC, abstractmethod
from typing import Optional

from chirp.schemas.schemas import TweetRecord, UserRecord


class UserRepository(ABC):
    """Port for user storage."""

    @abstractmethod
    async def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        pass

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[UserRecord]:
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        pass

    @abstractmethod
    async def create(
        self,
        username: str,
        email: str,
        display_name: str,
        password_hash: str,
    ) -> UserRecord:
        """Persist a new user and return it with its assigned id."""
        pass

    @abstractmethod
    async def update_password_hash(self, user_id: str, password_hash: str) -> None:
        """Replace the stored hash (used by lazy cost migration)."""
        pass


class TweetRepository(ABC):
    """Port for tweet storage."""

    @abstractmethod
    async def create(self, author_id: str, content: str) -> TweetRecord:
        pass
