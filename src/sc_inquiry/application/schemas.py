"""Pydantic schemas for sc_inquiry requests and responses.

Request bodies only fix the shape; content rules (non-empty, length,
positive price proposal) are enforced by the service so that the
localized messages match the rest of the marketplace.
"""

from pydantic import BaseModel

from src.sc_common.datetime_utils import iso_or_none
from src.sc_common.enums import INQUIRY_STATUS_LABELS, InquiryMessageType, InquiryStatus
from src.sc_inquiry.domain.models import Inquiry, InquiryMessage

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateInquiryRequest(BaseModel):
    item_id: str
    message: str
    message_type: str = InquiryMessageType.TEXT.value
    proposed_price: int | None = None


class SendMessageRequest(BaseModel):
    content: str
    message_type: str = InquiryMessageType.TEXT.value
    image_url: str | None = None
    proposed_price: int | None = None


class UpdateInquiryStatusRequest(BaseModel):
    status: str
    reason: str | None = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class UnreadOut(BaseModel):
    buyer: int
    seller: int


class InquiryOut(BaseModel):
    id: str
    item_id: str
    item_title: str
    item_image: str | None
    buyer_id: str
    buyer_name: str
    seller_id: str
    seller_name: str
    status: str
    status_label: str | None
    last_message: str
    last_message_at: str | None
    last_sender_id: str | None
    unread_count: UnreadOut
    message_count: int
    version: int
    reported_by: str | None
    report_reason: str | None
    reported_at: str | None
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, inq: Inquiry) -> "InquiryOut":
        try:
            label = INQUIRY_STATUS_LABELS.get(InquiryStatus(inq.status))
        except ValueError:
            label = None
        return cls(
            id=inq.id,
            item_id=inq.item_id,
            item_title=inq.item_title,
            item_image=inq.item_image,
            buyer_id=inq.buyer_id,
            buyer_name=inq.buyer_name,
            seller_id=inq.seller_id,
            seller_name=inq.seller_name,
            status=inq.status,
            status_label=label,
            last_message=inq.last_message,
            last_message_at=iso_or_none(inq.last_message_at),
            last_sender_id=inq.last_sender_id,
            unread_count=UnreadOut(buyer=inq.unread_buyer, seller=inq.unread_seller),
            message_count=inq.message_count,
            version=inq.version,
            reported_by=inq.reported_by,
            report_reason=inq.report_reason,
            reported_at=iso_or_none(inq.reported_at),
            created_at=iso_or_none(inq.created_at),
            updated_at=iso_or_none(inq.updated_at),
        )


class MessageOut(BaseModel):
    id: str
    inquiry_id: str
    sender_id: str
    sender_name: str
    sender_type: str
    message_type: str
    content: str
    image_url: str | None
    proposed_price: int | None
    original_price: int | None
    is_read: bool
    created_at: str | None

    @classmethod
    def from_domain(cls, msg: InquiryMessage) -> "MessageOut":
        return cls(
            id=msg.id,
            inquiry_id=msg.inquiry_id,
            sender_id=msg.sender_id,
            sender_name=msg.sender_name,
            sender_type=msg.sender_type,
            message_type=msg.message_type,
            content=msg.content,
            image_url=msg.image_url,
            proposed_price=msg.proposed_price,
            original_price=msg.original_price,
            is_read=msg.is_read,
            created_at=iso_or_none(msg.created_at),
        )


class InquiryListResponse(BaseModel):
    items: list[InquiryOut]
    page: int
    page_size: int
    has_next: bool


class MessageListResponse(BaseModel):
    messages: list[MessageOut]
    page: int
    page_size: int
    has_next: bool
