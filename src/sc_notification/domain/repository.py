"""Repository Protocol for notifications."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sc_notification.domain.models import Notification, NotificationCounts


class NotificationRepositoryProtocol(Protocol):
    async def insert_notification(self, db: AsyncSession, notification: Notification) -> Notification: ...

    async def get_notification(self, db: AsyncSession, notification_id: str) -> Notification | None: ...

    async def list_for_recipient(
        self,
        db: AsyncSession,
        recipient_id: str,
        unread_only: bool,
        cursor_ts: datetime | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Notification]: ...

    async def count_for_recipient(self, db: AsyncSession, recipient_id: str) -> NotificationCounts: ...

    async def mark_read(self, db: AsyncSession, notification_id: str) -> Notification | None: ...

    async def mark_all_read(self, db: AsyncSession, recipient_id: str) -> int: ...

    async def set_status(self, db: AsyncSession, notification_id: str, status: str) -> Notification | None: ...
