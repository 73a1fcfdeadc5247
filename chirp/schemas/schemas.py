from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

# Raw input bounds, checked before any sanitizer sees the value
RAW_NAME_MAX_LENGTH = 255
RAW_EMAIL_MAX_LENGTH = 254
RAW_PASSWORD_MAX_LENGTH = 1024


# ============================================================================
# AUTH SCHEMAS
# ============================================================================
class RegisterInput(BaseModel):
    username: str = Field(..., max_length=RAW_NAME_MAX_LENGTH)
    email: str = Field(..., max_length=RAW_EMAIL_MAX_LENGTH)
    password: str = Field(..., max_length=RAW_PASSWORD_MAX_LENGTH)
    display_name: str = Field(..., max_length=RAW_NAME_MAX_LENGTH)


class LoginInput(BaseModel):
    email: str = Field(..., max_length=RAW_EMAIL_MAX_LENGTH)
    password: str = Field(..., max_length=RAW_PASSWORD_MAX_LENGTH)


# ============================================================================
# USER SCHEMAS
# ============================================================================
class UserRecord(BaseModel):
    """User as stored by the repository, password hash included."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    display_name: str
    password_hash: str


# ============================================================================
# TWEET SCHEMAS
# ============================================================================
class CreateTweetInput(BaseModel):
    # Length limits are enforced by TweetService so the error carries a code
    content: str


class TweetRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    author_id: str
    content: str
    created_at: Optional[datetime] = None
