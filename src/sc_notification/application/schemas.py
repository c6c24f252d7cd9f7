"""Response schemas for sc_notification."""

from pydantic import BaseModel, Field

from src.sc_common.datetime_utils import iso_or_none
from src.sc_common.enums import NOTIFICATION_TYPE_LABELS, NotificationType
from src.sc_notification.domain.models import Notification


class NotificationOut(BaseModel):
    id: str
    type: str
    type_label: str | None
    title: str
    message: str
    related_post_id: str | None
    related_comment_id: str | None
    related_user_id: str | None
    related_user_name: str | None
    action_url: str | None
    is_read: bool
    read_at: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, notification: Notification) -> "NotificationOut":
        try:
            label = NOTIFICATION_TYPE_LABELS.get(NotificationType(notification.type))
        except ValueError:
            label = None
        return cls(
            id=notification.id,
            type=notification.type,
            type_label=label,
            title=notification.title,
            message=notification.message,
            related_post_id=notification.related_post_id,
            related_comment_id=notification.related_comment_id,
            related_user_id=notification.related_user_id,
            related_user_name=notification.related_user_name,
            action_url=notification.action_url,
            is_read=notification.is_read,
            read_at=iso_or_none(notification.read_at),
            created_at=iso_or_none(notification.created_at),
        )


class NotificationListResponse(BaseModel):
    items: list[NotificationOut]
    unread_count: int = Field(ge=0)
    next_cursor: str | None
    has_more: bool


class NotificationCountsResponse(BaseModel):
    total: int = Field(ge=0)
    unread: int = Field(ge=0)


class NotificationReadAllResponse(BaseModel):
    updated: int = Field(ge=0)
