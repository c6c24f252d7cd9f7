"""CommunityApplicationService — posts and one-level comment threads.

Posts and comments are soft-deleted (status ``deleted``); the author or an
admin may edit or delete. A reply to a reply is attached to the top-level
comment so threads never nest deeper than one level. Editing a comment
keeps the previous text in its edit history. A like is one row per user,
so liking twice changes nothing. New comments, replies and likes notify
the author of the post or comment in the same transaction.
"""

import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.sc_common.cursor import cursor_decode, cursor_encode
from src.sc_common.enums import PostCategory, PostStatus
from src.sc_common.errors import (
    CommentNotFoundError,
    EmptyUpdateError,
    PostAccessDeniedError,
    PostNotFoundError,
)
from src.sc_common.id_generator import generate_id
from src.sc_community.application.schemas import (
    CommentLikeResponse,
    CommentListResponse,
    CommentOut,
    CommentThreadOut,
    PostCountsResponse,
    PostListResponse,
    PostOut,
)
from src.sc_community.domain.models import Comment, Post
from src.sc_community.domain.repository import CommentRepositoryProtocol, PostRepositoryProtocol
from src.sc_community.infrastructure.persistence import CommentRepository, PostRepository
from src.sc_gateway.auth.caller import Caller
from src.sc_notification.application.service import NotificationApplicationService
from src.sc_validation.access import is_admin, is_owner
from src.sc_validation.validators import parse_comment_data, parse_post_data, parse_post_update

logger = logging.getLogger("sc.community")

_ANONYMOUS_NAME = "익명"


def _can_manage(caller: Caller, author_id: str) -> bool:
    return is_owner(caller, author_id) or is_admin(caller)


class CommunityApplicationService:
    def __init__(
        self,
        post_repo: PostRepositoryProtocol | None = None,
        comment_repo: CommentRepositoryProtocol | None = None,
        notifications: NotificationApplicationService | None = None,
        id_factory: Callable[[str], str] = generate_id,
    ) -> None:
        self._posts: PostRepositoryProtocol = post_repo or PostRepository()
        self._comments: CommentRepositoryProtocol = comment_repo or CommentRepository()
        self._notifications = notifications or NotificationApplicationService(id_factory=id_factory)
        self._new_id = id_factory

    async def _active_post(self, db: AsyncSession, post_id: str) -> Post:
        post = await self._posts.get_post(db, post_id)
        if post is None or post.status != PostStatus.ACTIVE.value:
            raise PostNotFoundError(post_id)
        return post

    async def _active_comment(self, db: AsyncSession, post_id: str, comment_id: str) -> Comment:
        comment = await self._comments.get_comment(db, comment_id)
        if comment is None or comment.post_id != post_id or comment.status != PostStatus.ACTIVE.value:
            raise CommentNotFoundError(comment_id)
        return comment

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    async def create_post(self, db: AsyncSession, caller: Caller, payload: Any) -> PostOut:
        data = parse_post_data(payload)
        post = Post(
            id=self._new_id("pst_"),
            author_id=caller.uid,  # type: ignore[arg-type]
            author_name=caller.display_name or _ANONYMOUS_NAME,
            category=data.category.value,
            title=data.title,
            content=data.content,
            tags=list(data.tags),
            attachments=list(data.attachments),
            status=PostStatus.ACTIVE.value,
        )
        try:
            created = await self._posts.insert_post(db, post)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Post %s created by %s", created.id, caller.uid)
        return PostOut.from_domain(created)

    async def get_post(
        self, db: AsyncSession, post_id: str, increment_views: bool = False
    ) -> PostOut:
        post = await self._active_post(db, post_id)
        if increment_views:
            try:
                await self._posts.increment_views(db, post_id)
                await db.commit()
            except SQLAlchemyError:
                await db.rollback()
                logger.warning("Could not increment views for post %s", post_id, exc_info=True)
        return PostOut.from_domain(post)

    async def list_posts(
        self,
        db: AsyncSession,
        category: str | None = None,
        author_id: str | None = None,
        cursor: str | None = None,
        limit: int = 20,
    ) -> PostListResponse:
        cursor_ts, cursor_id = cursor_decode(cursor)
        posts = await self._posts.list_posts(db, category, author_id, cursor_ts, cursor_id, limit + 1)
        has_more = len(posts) > limit
        page = posts[:limit]
        next_cursor = None
        if has_more and page and page[-1].created_at is not None:
            next_cursor = cursor_encode(page[-1].created_at, page[-1].id)
        return PostListResponse(
            items=[PostOut.from_domain(p) for p in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    async def post_counts(self, db: AsyncSession) -> PostCountsResponse:
        counted = await self._posts.count_by_category(db)
        counts = {c.value: counted.get(c.value, 0) for c in PostCategory}
        return PostCountsResponse(counts=counts, total=sum(counts.values()))

    async def update_post(
        self, db: AsyncSession, caller: Caller, post_id: str, payload: Any
    ) -> PostOut:
        post = await self._active_post(db, post_id)
        if not _can_manage(caller, post.author_id):
            raise PostAccessDeniedError("수정 권한이 없습니다.")

        data = parse_post_update(payload)
        fields = data.model_dump(exclude_none=True)
        if "category" in fields:
            fields["category"] = data.category.value  # type: ignore[union-attr]
        if not fields:
            raise EmptyUpdateError()

        try:
            updated = await self._posts.update_post(db, post_id, fields)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if updated is None:
            raise PostNotFoundError(post_id)
        logger.info("Post %s updated by %s", post_id, caller.uid)
        return PostOut.from_domain(updated)

    async def delete_post(self, db: AsyncSession, caller: Caller, post_id: str) -> PostOut:
        post = await self._active_post(db, post_id)
        if not _can_manage(caller, post.author_id):
            raise PostAccessDeniedError("삭제 권한이 없습니다.")
        try:
            deleted = await self._posts.set_status(db, post_id, PostStatus.DELETED.value)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if deleted is None:
            raise PostNotFoundError(post_id)
        logger.info("Post %s deleted by %s", post_id, caller.uid)
        return PostOut.from_domain(deleted)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    async def create_comment(
        self, db: AsyncSession, caller: Caller, post_id: str, payload: Any
    ) -> CommentOut:
        post = await self._active_post(db, post_id)
        data = parse_comment_data(payload)

        parent = None
        parent_id = None
        if data.parent_id:
            parent = await self._comments.get_comment(db, data.parent_id)
            if (
                parent is None
                or parent.post_id != post_id
                or parent.status != PostStatus.ACTIVE.value
            ):
                raise CommentNotFoundError(data.parent_id)
            parent_id = parent.parent_id or parent.id

        comment = Comment(
            id=self._new_id("cmt_"),
            post_id=post_id,
            author_id=caller.uid,  # type: ignore[arg-type]
            author_name=caller.display_name or _ANONYMOUS_NAME,
            content=data.content,
            parent_id=parent_id,
            status=PostStatus.ACTIVE.value,
        )
        try:
            created = await self._comments.insert_comment(db, comment)
            await self._posts.adjust_comment_count(db, post_id, 1)
            if parent is not None:
                await self._notifications.notify_comment_reply(db, parent, created)
            else:
                await self._notifications.notify_new_comment(db, post, created)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Comment %s on post %s by %s", created.id, post_id, caller.uid)
        return CommentOut.from_domain(created)

    async def delete_comment(
        self, db: AsyncSession, caller: Caller, post_id: str, comment_id: str
    ) -> CommentOut:
        comment = await self._active_comment(db, post_id, comment_id)
        if not _can_manage(caller, comment.author_id):
            raise PostAccessDeniedError("삭제 권한이 없습니다.")
        try:
            deleted = await self._comments.set_status(db, comment_id, PostStatus.DELETED.value)
            await self._posts.adjust_comment_count(db, post_id, -1)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if deleted is None:
            raise CommentNotFoundError(comment_id)
        return CommentOut.from_domain(deleted)

    async def update_comment(
        self, db: AsyncSession, caller: Caller, post_id: str, comment_id: str, payload: Any
    ) -> CommentOut:
        comment = await self._active_comment(db, post_id, comment_id)
        if not _can_manage(caller, comment.author_id):
            raise PostAccessDeniedError("수정 권한이 없습니다.")
        data = parse_comment_data(payload)
        try:
            updated = await self._comments.update_content(db, comment_id, data.content)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if updated is None:
            raise CommentNotFoundError(comment_id)
        logger.info("Comment %s edited by %s", comment_id, caller.uid)
        return CommentOut.from_domain(updated)

    async def like_comment(
        self, db: AsyncSession, caller: Caller, post_id: str, comment_id: str
    ) -> CommentLikeResponse:
        comment = await self._active_comment(db, post_id, comment_id)
        like_count = comment.like_count
        try:
            if await self._comments.insert_like(db, comment_id, caller.uid):  # type: ignore[arg-type]
                counted = await self._comments.adjust_like_count(db, comment_id, 1)
                if counted is not None:
                    like_count = counted
                await self._notifications.notify_comment_like(
                    db, comment, caller.uid, caller.display_name or _ANONYMOUS_NAME  # type: ignore[arg-type]
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return CommentLikeResponse(comment_id=comment_id, liked=True, like_count=like_count)

    async def unlike_comment(
        self, db: AsyncSession, caller: Caller, post_id: str, comment_id: str
    ) -> CommentLikeResponse:
        comment = await self._active_comment(db, post_id, comment_id)
        like_count = comment.like_count
        try:
            if await self._comments.delete_like(db, comment_id, caller.uid):  # type: ignore[arg-type]
                counted = await self._comments.adjust_like_count(db, comment_id, -1)
                if counted is not None:
                    like_count = counted
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return CommentLikeResponse(comment_id=comment_id, liked=False, like_count=like_count)

    async def list_comments(self, db: AsyncSession, post_id: str) -> CommentListResponse:
        """Active comments grouped into threads, oldest first.

        A reply whose parent is no longer active is listed as a thread of its own.
        """
        await self._active_post(db, post_id)
        comments = await self._comments.list_for_post(db, post_id)

        threads: dict[str, CommentThreadOut] = {}
        for c in comments:
            if c.parent_id is None:
                threads[c.id] = CommentThreadOut(**CommentOut.from_domain(c).model_dump())
        for c in comments:
            if c.parent_id is None:
                continue
            thread = threads.get(c.parent_id)
            if thread is None:
                threads[c.id] = CommentThreadOut(**CommentOut.from_domain(c).model_dump())
            else:
                thread.replies.append(CommentOut.from_domain(c))

        items = sorted(threads.values(), key=lambda t: (t.created_at or "", t.id))
        return CommentListResponse(post_id=post_id, items=items, total=len(comments))
