"""Domain models for sc_inquiry — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Inquiry:
    """A buyer–seller conversation about one marketplace item."""

    id: str
    item_id: str
    item_title: str
    item_image: str | None
    buyer_id: str
    buyer_name: str
    seller_id: str
    seller_name: str
    status: str
    last_message: str
    last_message_at: datetime | None
    last_sender_id: str | None
    unread_buyer: int = 0
    unread_seller: int = 0
    message_count: int = 0
    buyer_last_read_at: datetime | None = None
    seller_last_read_at: datetime | None = None
    # bumped by every status change; compare-and-set guard
    version: int = 0
    reported_by: str | None = None
    report_reason: str | None = None
    reported_at: datetime | None = None
    closed_by: str | None = None
    closed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class InquiryMessage:
    id: str
    inquiry_id: str
    sender_id: str
    sender_name: str
    sender_type: str          # buyer | seller
    message_type: str
    content: str
    image_url: str | None = None
    proposed_price: int | None = None
    original_price: int | None = None
    is_read: bool = False
    created_at: datetime | None = None
