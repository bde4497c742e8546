"""
User model for the Taskboard API
Defines the user entity and its public/auth schemas
"""
import re
from datetime import datetime
from typing import Optional

from pydantic import Field as PydanticField, field_validator
from sqlalchemy import DateTime, Index, func
from sqlmodel import Field, SQLModel

from .base import CamelModel
from ..utils.timeutils import utcnow

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")


class User(SQLModel, table=True):
    """User model for database table"""
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(max_length=255, unique=True, index=True, nullable=False)
    username: str = Field(max_length=30, nullable=False)
    hashed_password: str = Field(nullable=False)
    avatar: Optional[str] = Field(default=None, max_length=500)
    is_active: bool = Field(default=True)
    last_login: Optional[datetime] = Field(default=None, sa_type=DateTime)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, sa_column_kwargs={"onupdate": utcnow})


# Usernames are unique regardless of case
Index("uq_user_username_lower", func.lower(User.__table__.c.username), unique=True)


class UserCreate(CamelModel):
    """Schema for user registration"""
    email: str
    username: str = PydanticField(min_length=3, max_length=30)
    password: str = PydanticField(min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Please enter a valid email")
        return v

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v):
        return v.strip() if isinstance(v, str) else v


class UserLogin(CamelModel):
    """Schema for user login"""
    email: str
    password: str = PydanticField(min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class PasswordChange(CamelModel):
    """Schema for changing the current user's password"""
    current_password: str = PydanticField(min_length=1)
    new_password: str = PydanticField(min_length=6, max_length=128)


class UserPublic(CamelModel):
    """Public representation of a user (never includes the hash)"""
    id: int
    email: str
    username: str
    avatar: Optional[str] = None
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime


class AuthPayload(CamelModel):
    """User profile plus a freshly issued access token"""
    user: UserPublic
    token: str
