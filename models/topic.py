import re
import uuid
from datetime import datetime, timezone
from typing import List, TYPE_CHECKING

from pydantic import field_validator
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field, Relationship

if TYPE_CHECKING:
    from .post import Post

SLUG_PATTERN = re.compile(r"[A-Za-z0-9-]+")


def validate_slug(value: str) -> str:
    if not SLUG_PATTERN.fullmatch(value):
        raise ValueError("The slug may only contain letters, numbers, and dashes.")
    return value


class PostsTopics(SQLModel, table=True):
    __tablename__ = "posts_topics"

    post_id: uuid.UUID = Field(foreign_key="posts.id", primary_key=True, ondelete="CASCADE")
    topic_id: uuid.UUID = Field(foreign_key="topics.id", primary_key=True, ondelete="CASCADE")


class TopicBase(SQLModel):
    name: str = Field(max_length=255)
    slug: str = Field(max_length=255, index=True)


class Topic(TopicBase, table=True):
    __tablename__ = "topics"
    # Trashed rows keep their slug, so they still count towards uniqueness
    __table_args__ = (UniqueConstraint("slug", "user_id"),)

    id: uuid.UUID = Field(primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    deleted_at: datetime | None = Field(default=None, index=True)

    posts: List["Post"] = Relationship(
        back_populates="topics",
        link_model=PostsTopics
    )


class TopicPublic(TopicBase):
    id: uuid.UUID
    user_id: int
    created_at: datetime
    updated_at: datetime


class TopicWithPostsCount(TopicPublic):
    posts_count: int = 0


class TopicWrite(SQLModel):
    # The path id is authoritative; a body id is accepted and ignored
    id: uuid.UUID | None = None
    name: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("The name field is required.")
        return value.strip()

    @field_validator("slug")
    @classmethod
    def slug_is_url_token(cls, value: str) -> str:
        return validate_slug(value)
