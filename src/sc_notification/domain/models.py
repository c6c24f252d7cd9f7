"""Domain models for sc_notification — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Notification:
    """Something a user should see about activity on their posts and comments."""

    id: str
    recipient_id: str
    type: str
    title: str
    message: str
    related_post_id: str | None = None
    related_comment_id: str | None = None
    related_user_id: str | None = None
    related_user_name: str | None = None
    action_url: str | None = None
    is_read: bool = False
    read_at: datetime | None = None
    status: str = "active"
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class NotificationCounts:
    total: int
    unread: int
