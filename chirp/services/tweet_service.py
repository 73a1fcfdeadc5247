"""
Tweet Service

Validates, sanitizes and stores new tweets.
"""
import logging
from typing import Optional

from chirp.core.exceptions import AuthorNotFoundError, EmptyTweetError, TweetTooLongError
from chirp.repositories import TweetRepository, UserRepository
from chirp.schemas.schemas import CreateTweetInput, TweetRecord
from chirp.services.sanitization import SanitizationEngine, get_sanitizer

logger = logging.getLogger(__name__)


class TweetService:

    def __init__(
        self,
        tweets: TweetRepository,
        users: UserRepository,
        sanitizer: Optional[SanitizationEngine] = None,
    ):
        self.tweets = tweets
        self.users = users
        self.sanitizer = sanitizer or get_sanitizer()

    async def create_tweet(self, author_id: str, data: CreateTweetInput) -> TweetRecord:
        """
        Publish a tweet.

        The raw body is length-checked first, then sanitized; a body that
        sanitizes to nothing is rejected.

        Raises:
            EmptyTweetError: Blank body, before or after sanitization
            TweetTooLongError: Raw body over the tweet length limit
            AuthorNotFoundError: Author does not exist
        """
        if not data.content or not data.content.strip():
            raise EmptyTweetError()

        max_length = self.sanitizer.tweet_max_length
        if len(data.content) > max_length:
            raise TweetTooLongError(max_length=max_length, length=len(data.content))

        content = self.sanitizer.sanitize_tweet_content(data.content)
        if not content:
            logger.info(f"Tweet from {author_id} rejected: empty after sanitization")
            raise EmptyTweetError()

        author = await self.users.get_by_id(author_id)
        if author is None:
            raise AuthorNotFoundError(author_id)

        tweet = await self.tweets.create(author_id=author.id, content=content)
        logger.debug(f"Tweet {tweet.id} created by {author.id}")
        return tweet
