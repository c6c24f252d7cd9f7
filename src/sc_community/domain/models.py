"""Domain models for sc_community — pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Post:
    id: str
    author_id: str
    author_name: str
    category: str
    title: str
    content: str
    tags: list[str] = field(default_factory=list)
    attachments: list[str] = field(default_factory=list)
    status: str = "active"
    view_count: int = 0
    comment_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Comment:
    """A comment on a post. Replies are one level deep: parent_id is always a top-level comment."""

    id: str
    post_id: str
    author_id: str
    author_name: str
    content: str
    parent_id: str | None = None
    status: str = "active"
    like_count: int = 0
    edited_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
