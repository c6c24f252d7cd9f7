"""NotificationApplicationService — community activity notifications.

The ``notify_*`` helpers write inside the caller's transaction and never
commit; a comment and the notification about it land together or not at
all. Nobody is notified about their own activity. The inbox operations act
only on the caller's own notifications: anyone else's is reported as not
found.
"""

import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from src.sc_common.cursor import cursor_decode, cursor_encode
from src.sc_common.enums import NotificationStatus, NotificationType
from src.sc_common.errors import NotificationNotFoundError
from src.sc_common.id_generator import generate_id
from src.sc_community.domain.models import Comment, Post
from src.sc_gateway.auth.caller import Caller
from src.sc_notification.application.schemas import (
    NotificationCountsResponse,
    NotificationListResponse,
    NotificationOut,
    NotificationReadAllResponse,
)
from src.sc_notification.domain.models import Notification
from src.sc_notification.domain.repository import NotificationRepositoryProtocol
from src.sc_notification.infrastructure.persistence import NotificationRepository

logger = logging.getLogger("sc.notification")


def post_url(post_id: str) -> str:
    return f"/community/{post_id}"


def comment_url(post_id: str, comment_id: str) -> str:
    return f"{post_url(post_id)}#comment-{comment_id}"


class NotificationApplicationService:
    def __init__(
        self,
        repo: NotificationRepositoryProtocol | None = None,
        id_factory: Callable[[str], str] = generate_id,
    ) -> None:
        self._repo: NotificationRepositoryProtocol = repo or NotificationRepository()
        self._new_id = id_factory

    async def _owned(self, db: AsyncSession, caller: Caller, notification_id: str) -> Notification:
        notification = await self._repo.get_notification(db, notification_id)
        if (
            notification is None
            or notification.recipient_id != caller.uid
            or notification.status != NotificationStatus.ACTIVE.value
        ):
            raise NotificationNotFoundError(notification_id)
        return notification

    # ------------------------------------------------------------------
    # Creation (no commit)
    # ------------------------------------------------------------------

    async def notify(
        self,
        db: AsyncSession,
        recipient_id: str,
        type_: NotificationType,
        title: str,
        message: str,
        actor_id: str | None = None,
        actor_name: str | None = None,
        post_id: str | None = None,
        comment_id: str | None = None,
        action_url: str | None = None,
    ) -> Notification | None:
        """Queue a notification in the current transaction. None when the recipient is the actor."""
        if actor_id is not None and recipient_id == actor_id:
            return None
        notification = Notification(
            id=self._new_id("ntf_"),
            recipient_id=recipient_id,
            type=type_.value,
            title=title,
            message=message,
            related_post_id=post_id,
            related_comment_id=comment_id,
            related_user_id=actor_id,
            related_user_name=actor_name,
            action_url=action_url,
        )
        created = await self._repo.insert_notification(db, notification)
        logger.debug("Notification %s (%s) for %s", created.id, type_.value, recipient_id)
        return created

    async def notify_new_comment(
        self, db: AsyncSession, post: Post, comment: Comment
    ) -> Notification | None:
        return await self.notify(
            db,
            post.author_id,
            NotificationType.NEW_COMMENT,
            "새 댓글",
            f"{comment.author_name}님이 회원님의 게시글에 댓글을 남겼습니다.",
            actor_id=comment.author_id,
            actor_name=comment.author_name,
            post_id=post.id,
            comment_id=comment.id,
            action_url=comment_url(post.id, comment.id),
        )

    async def notify_comment_reply(
        self, db: AsyncSession, parent: Comment, reply: Comment
    ) -> Notification | None:
        return await self.notify(
            db,
            parent.author_id,
            NotificationType.COMMENT_REPLY,
            "댓글 답글",
            f"{reply.author_name}님이 회원님의 댓글에 답글을 남겼습니다.",
            actor_id=reply.author_id,
            actor_name=reply.author_name,
            post_id=reply.post_id,
            comment_id=reply.id,
            action_url=comment_url(reply.post_id, reply.id),
        )

    async def notify_comment_like(
        self, db: AsyncSession, comment: Comment, liker_id: str, liker_name: str
    ) -> Notification | None:
        return await self.notify(
            db,
            comment.author_id,
            NotificationType.COMMENT_LIKE,
            "댓글 좋아요",
            f"{liker_name}님이 회원님의 댓글을 좋아합니다.",
            actor_id=liker_id,
            actor_name=liker_name,
            post_id=comment.post_id,
            comment_id=comment.id,
            action_url=comment_url(comment.post_id, comment.id),
        )

    # ------------------------------------------------------------------
    # Inbox
    # ------------------------------------------------------------------

    async def list_notifications(
        self,
        db: AsyncSession,
        caller: Caller,
        unread_only: bool = False,
        cursor: str | None = None,
        limit: int = 20,
    ) -> NotificationListResponse:
        cursor_ts, cursor_id = cursor_decode(cursor)
        rows = await self._repo.list_for_recipient(
            db, caller.uid, unread_only, cursor_ts, cursor_id, limit + 1  # type: ignore[arg-type]
        )
        has_more = len(rows) > limit
        page = rows[:limit]
        next_cursor = None
        if has_more and page and page[-1].created_at is not None:
            next_cursor = cursor_encode(page[-1].created_at, page[-1].id)
        counts = await self._repo.count_for_recipient(db, caller.uid)  # type: ignore[arg-type]
        return NotificationListResponse(
            items=[NotificationOut.from_domain(n) for n in page],
            unread_count=counts.unread,
            next_cursor=next_cursor,
            has_more=has_more,
        )

    async def get_counts(self, db: AsyncSession, caller: Caller) -> NotificationCountsResponse:
        counts = await self._repo.count_for_recipient(db, caller.uid)  # type: ignore[arg-type]
        return NotificationCountsResponse(total=counts.total, unread=counts.unread)

    async def mark_read(
        self, db: AsyncSession, caller: Caller, notification_id: str
    ) -> NotificationOut:
        notification = await self._owned(db, caller, notification_id)
        if notification.is_read:
            return NotificationOut.from_domain(notification)
        try:
            updated = await self._repo.mark_read(db, notification_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if updated is None:
            raise NotificationNotFoundError(notification_id)
        return NotificationOut.from_domain(updated)

    async def mark_all_read(self, db: AsyncSession, caller: Caller) -> NotificationReadAllResponse:
        try:
            updated = await self._repo.mark_all_read(db, caller.uid)  # type: ignore[arg-type]
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Marked %d notifications read for %s", updated, caller.uid)
        return NotificationReadAllResponse(updated=updated)

    async def delete_notification(
        self, db: AsyncSession, caller: Caller, notification_id: str
    ) -> NotificationOut:
        await self._owned(db, caller, notification_id)
        try:
            deleted = await self._repo.set_status(db, notification_id, NotificationStatus.DELETED.value)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if deleted is None:
            raise NotificationNotFoundError(notification_id)
        return NotificationOut.from_domain(deleted)
