import uuid
from datetime import datetime, timezone
from typing import List, Optional, TYPE_CHECKING

from pydantic import field_validator
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel, Relationship

from .topic import PostsTopics, TopicPublic, validate_slug

if TYPE_CHECKING:
    from .topic import Topic


class PostBase(SQLModel):
    title: str = Field(max_length=255)
    slug: str = Field(max_length=255, index=True)
    summary: Optional[str] = Field(default=None)
    body: Optional[str] = Field(default=None)
    published_at: Optional[datetime] = Field(default=None)


class Post(PostBase, table=True):
    __tablename__ = "posts"
    __table_args__ = (UniqueConstraint("slug", "user_id"),)

    id: uuid.UUID = Field(primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    deleted_at: Optional[datetime] = Field(default=None, index=True)

    topics: List["Topic"] = Relationship(back_populates="posts", link_model=PostsTopics)


class PostPublic(PostBase):
    id: uuid.UUID
    user_id: int
    created_at: datetime
    updated_at: datetime
    topics: List[TopicPublic] = []


class PostWrite(SQLModel):
    id: Optional[uuid.UUID] = None
    title: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=255)
    summary: Optional[str] = None
    body: Optional[str] = None
    published_at: Optional[datetime] = None
    # None leaves the topic set untouched, [] clears it
    topics: Optional[List[uuid.UUID]] = None

    @field_validator("slug")
    @classmethod
    def slug_is_url_token(cls, value: str) -> str:
        return validate_slug(value)
