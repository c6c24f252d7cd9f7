"""Repository Protocols for posts and comments."""

from datetime import datetime
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sc_community.domain.models import Comment, Post


class PostRepositoryProtocol(Protocol):
    async def insert_post(self, db: AsyncSession, post: Post) -> Post: ...

    async def get_post(self, db: AsyncSession, post_id: str) -> Post | None: ...

    async def update_post(self, db: AsyncSession, post_id: str, fields: dict[str, Any]) -> Post | None: ...

    async def set_status(self, db: AsyncSession, post_id: str, status: str) -> Post | None: ...

    async def increment_views(self, db: AsyncSession, post_id: str) -> None: ...

    async def adjust_comment_count(self, db: AsyncSession, post_id: str, delta: int) -> None: ...

    async def list_posts(
        self,
        db: AsyncSession,
        category: str | None,
        author_id: str | None,
        cursor_ts: datetime | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Post]: ...

    async def count_by_category(self, db: AsyncSession) -> dict[str, int]: ...


class CommentRepositoryProtocol(Protocol):
    async def insert_comment(self, db: AsyncSession, comment: Comment) -> Comment: ...

    async def get_comment(self, db: AsyncSession, comment_id: str) -> Comment | None: ...

    async def set_status(self, db: AsyncSession, comment_id: str, status: str) -> Comment | None: ...

    async def list_for_post(self, db: AsyncSession, post_id: str) -> list[Comment]: ...

    async def update_content(self, db: AsyncSession, comment_id: str, content: str) -> Comment | None: ...

    async def insert_like(self, db: AsyncSession, comment_id: str, user_id: str) -> bool: ...

    async def delete_like(self, db: AsyncSession, comment_id: str, user_id: str) -> bool: ...

    async def adjust_like_count(self, db: AsyncSession, comment_id: str, delta: int) -> int | None: ...
