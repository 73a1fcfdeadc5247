"""
Tests for TweetService.
"""
import pytest

from chirp.core.exceptions import AuthorNotFoundError, EmptyTweetError, TweetTooLongError
from chirp.schemas.schemas import CreateTweetInput, UserRecord
from chirp.services.tweet_service import TweetService


@pytest.fixture
def author(sample_user_data):
    return UserRecord(password_hash="$2b$12$" + "a" * 53, **sample_user_data)


@pytest.fixture
def tweet_service(mock_tweet_repository, mock_user_repository, sanitizer, author):
    mock_user_repository.get_by_id.return_value = author
    return TweetService(mock_tweet_repository, mock_user_repository, sanitizer=sanitizer)


class TestCreateTweet:

    @pytest.mark.asyncio
    async def test_creates_tweet(self, tweet_service, mock_tweet_repository):
        tweet = await tweet_service.create_tweet("user-42", CreateTweetInput(content="Hello World!"))

        assert tweet.id == "tweet-1"
        assert tweet.author_id == "user-42"
        assert tweet.content == "Hello World!"
        mock_tweet_repository.create.assert_awaited_once_with(author_id="user-42", content="Hello World!")

    @pytest.mark.asyncio
    async def test_content_sanitized(self, tweet_service, mock_tweet_repository):
        tweet = await tweet_service.create_tweet(
            "user-42",
            CreateTweetInput(content='   <script>alert(1)</script>Hello<World:User"Name|File?*   '),
        )
        assert tweet.content == "HelloWorldUserNameFile"

    @pytest.mark.asyncio
    async def test_html_payload_stripped(self, tweet_service):
        tweet = await tweet_service.create_tweet(
            "user-42", CreateTweetInput(content="<b>bold</b> and <i>italic</i> #tag")
        )
        assert tweet.content == "bold and italic #tag"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", "   ", "\n\t"])
    async def test_blank_content(self, tweet_service, mock_user_repository, mock_tweet_repository, content):
        with pytest.raises(EmptyTweetError) as exc_info:
            await tweet_service.create_tweet("user-42", CreateTweetInput(content=content))

        assert exc_info.value.message == "Tweet content cannot be empty"
        mock_user_repository.get_by_id.assert_not_awaited()
        mock_tweet_repository.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_after_sanitization(self, tweet_service, mock_tweet_repository):
        with pytest.raises(EmptyTweetError):
            await tweet_service.create_tweet("user-42", CreateTweetInput(content="<script>alert(1)</script>"))
        mock_tweet_repository.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_too_long(self, tweet_service, mock_tweet_repository):
        with pytest.raises(TweetTooLongError) as exc_info:
            await tweet_service.create_tweet("user-42", CreateTweetInput(content="a" * 281))

        assert exc_info.value.details == {"max_length": 280, "length": 281}
        assert exc_info.value.message == "Tweet content cannot exceed 280 characters"
        mock_tweet_repository.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_exactly_at_limit(self, tweet_service):
        tweet = await tweet_service.create_tweet("user-42", CreateTweetInput(content="a" * 280))
        assert len(tweet.content) == 280

    @pytest.mark.asyncio
    async def test_length_checked_before_sanitization(self, tweet_service):
        # Would fit once the markup is gone, but the raw body is over the limit
        content = "<script>" + "x" * 280 + "</script>ok"
        with pytest.raises(TweetTooLongError):
            await tweet_service.create_tweet("user-42", CreateTweetInput(content=content))

    @pytest.mark.asyncio
    async def test_author_not_found(self, tweet_service, mock_user_repository, mock_tweet_repository):
        mock_user_repository.get_by_id.return_value = None

        with pytest.raises(AuthorNotFoundError) as exc_info:
            await tweet_service.create_tweet("ghost", CreateTweetInput(content="Hello"))

        assert exc_info.value.message == "User not found"
        assert exc_info.value.details["author_id"] == "ghost"
        mock_tweet_repository.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_custom_limit(self, mock_tweet_repository, mock_user_repository, author):
        from chirp.services.sanitization import SanitizationEngine

        mock_user_repository.get_by_id.return_value = author
        service = TweetService(
            mock_tweet_repository,
            mock_user_repository,
            sanitizer=SanitizationEngine(tweet_max_length=10),
        )
        with pytest.raises(TweetTooLongError) as exc_info:
            await service.create_tweet("user-42", CreateTweetInput(content="hello world"))
        assert exc_info.value.details["max_length"] == 10
