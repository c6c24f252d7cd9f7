"""Notification repository — raw text() SQL over ``notifications``."""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sc_notification.domain.models import Notification, NotificationCounts

_COLUMNS = """
    id, recipient_id, type, title, message, related_post_id, related_comment_id,
    related_user_id, related_user_name, action_url, is_read, read_at, status,
    created_at, updated_at
"""

_INSERT_SQL = text(f"""
    INSERT INTO notifications
        (id, recipient_id, type, title, message, related_post_id, related_comment_id,
         related_user_id, related_user_name, action_url)
    VALUES
        (:id, :recipient_id, :type, :title, :message, :related_post_id, :related_comment_id,
         :related_user_id, :related_user_name, :action_url)
    RETURNING {_COLUMNS}
""")

_GET_SQL = text(f"SELECT {_COLUMNS} FROM notifications WHERE id = :notification_id")

_LIST_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM notifications
    WHERE recipient_id = :recipient_id
      AND status = 'active'
      AND (NOT CAST(:unread_only AS BOOLEAN) OR is_read = FALSE)
      AND (
          CAST(:cursor_ts AS TIMESTAMPTZ) IS NULL
          OR (created_at, id) < (CAST(:cursor_ts AS TIMESTAMPTZ), CAST(:cursor_id AS TEXT))
      )
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_COUNT_SQL = text("""
    SELECT COUNT(*) AS total,
           COUNT(*) FILTER (WHERE is_read = FALSE) AS unread
    FROM notifications
    WHERE recipient_id = :recipient_id AND status = 'active'
""")

# read_at keeps the first read time
_MARK_READ_SQL = text(f"""
    UPDATE notifications
    SET is_read = TRUE, read_at = COALESCE(read_at, NOW())
    WHERE id = :notification_id
    RETURNING {_COLUMNS}
""")

_MARK_ALL_READ_SQL = text("""
    UPDATE notifications
    SET is_read = TRUE, read_at = NOW()
    WHERE recipient_id = :recipient_id AND status = 'active' AND is_read = FALSE
""")

_SET_STATUS_SQL = text(f"""
    UPDATE notifications SET status = :status
    WHERE id = :notification_id
    RETURNING {_COLUMNS}
""")


def _row_to_notification(row: Any) -> Notification:
    return Notification(
        id=row.id,
        recipient_id=row.recipient_id,
        type=row.type,
        title=row.title,
        message=row.message,
        related_post_id=row.related_post_id,
        related_comment_id=row.related_comment_id,
        related_user_id=row.related_user_id,
        related_user_name=row.related_user_name,
        action_url=row.action_url,
        is_read=row.is_read,
        read_at=row.read_at,
        status=row.status,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class NotificationRepository:
    async def insert_notification(self, db: AsyncSession, notification: Notification) -> Notification:
        result = await db.execute(
            _INSERT_SQL,
            {
                "id": notification.id,
                "recipient_id": notification.recipient_id,
                "type": notification.type,
                "title": notification.title,
                "message": notification.message,
                "related_post_id": notification.related_post_id,
                "related_comment_id": notification.related_comment_id,
                "related_user_id": notification.related_user_id,
                "related_user_name": notification.related_user_name,
                "action_url": notification.action_url,
            },
        )
        return _row_to_notification(result.fetchone())

    async def get_notification(self, db: AsyncSession, notification_id: str) -> Notification | None:
        row = (await db.execute(_GET_SQL, {"notification_id": notification_id})).fetchone()
        return _row_to_notification(row) if row else None

    async def list_for_recipient(
        self,
        db: AsyncSession,
        recipient_id: str,
        unread_only: bool,
        cursor_ts: datetime | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Notification]:
        result = await db.execute(
            _LIST_SQL,
            {
                "recipient_id": recipient_id,
                "unread_only": unread_only,
                "cursor_ts": cursor_ts,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_notification(row) for row in result.fetchall()]

    async def count_for_recipient(self, db: AsyncSession, recipient_id: str) -> NotificationCounts:
        row = (await db.execute(_COUNT_SQL, {"recipient_id": recipient_id})).fetchone()
        if row is None:
            return NotificationCounts(total=0, unread=0)
        return NotificationCounts(total=row.total or 0, unread=row.unread or 0)

    async def mark_read(self, db: AsyncSession, notification_id: str) -> Notification | None:
        row = (await db.execute(_MARK_READ_SQL, {"notification_id": notification_id})).fetchone()
        return _row_to_notification(row) if row else None

    async def mark_all_read(self, db: AsyncSession, recipient_id: str) -> int:
        result = await db.execute(_MARK_ALL_READ_SQL, {"recipient_id": recipient_id})
        return result.rowcount or 0

    async def set_status(self, db: AsyncSession, notification_id: str, status: str) -> Notification | None:
        row = (
            await db.execute(_SET_STATUS_SQL, {"notification_id": notification_id, "status": status})
        ).fetchone()
        return _row_to_notification(row) if row else None
