"""Inquiry and message repositories — raw text() SQL.

Status changes are a single conditional UPDATE keyed on (status, version).
Zero rows back means another request changed the inquiry first; the
service turns that into InquiryConflictError instead of overwriting.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import TextClause, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sc_inquiry.domain.models import Inquiry, InquiryMessage

_INQUIRY_COLUMNS = """
    id, item_id, item_title, item_image, buyer_id, buyer_name,
    seller_id, seller_name, status, last_message, last_message_at, last_sender_id,
    unread_buyer, unread_seller, message_count,
    buyer_last_read_at, seller_last_read_at, version,
    reported_by, report_reason, reported_at, closed_by, closed_at,
    created_at, updated_at
"""

_MESSAGE_COLUMNS = """
    id, inquiry_id, sender_id, sender_name, sender_type, message_type,
    content, image_url, proposed_price, original_price, is_read, created_at
"""

# ---------------------------------------------------------------------------
# SQL: inquiries
# ---------------------------------------------------------------------------

_INSERT_INQUIRY_SQL = text(f"""
    INSERT INTO item_inquiries
        (id, item_id, item_title, item_image, buyer_id, buyer_name,
         seller_id, seller_name, status, last_message, last_message_at, last_sender_id,
         unread_buyer, unread_seller, message_count, buyer_last_read_at)
    VALUES
        (:id, :item_id, :item_title, :item_image, :buyer_id, :buyer_name,
         :seller_id, :seller_name, :status, :last_message, :last_message_at, :last_sender_id,
         :unread_buyer, :unread_seller, :message_count, :buyer_last_read_at)
    RETURNING {_INQUIRY_COLUMNS}
""")

_GET_INQUIRY_SQL = text(f"""
    SELECT {_INQUIRY_COLUMNS}
    FROM item_inquiries
    WHERE id = :inquiry_id
""")

_FIND_ACTIVE_SQL = text(f"""
    SELECT {_INQUIRY_COLUMNS}
    FROM item_inquiries
    WHERE item_id = :item_id AND buyer_id = :buyer_id AND status = 'active'
    LIMIT 1
""")

_RECORD_MESSAGE_SQL = text(f"""
    UPDATE item_inquiries
    SET last_message        = :content,
        last_message_at     = :sent_at,
        last_sender_id      = :sender_id,
        message_count       = message_count + 1,
        unread_seller       = CASE WHEN CAST(:sender_is_buyer AS BOOLEAN)
                                   THEN unread_seller + 1 ELSE 0 END,
        unread_buyer        = CASE WHEN CAST(:sender_is_buyer AS BOOLEAN)
                                   THEN 0 ELSE unread_buyer + 1 END,
        buyer_last_read_at  = CASE WHEN CAST(:sender_is_buyer AS BOOLEAN)
                                   THEN :sent_at ELSE buyer_last_read_at END,
        seller_last_read_at = CASE WHEN CAST(:sender_is_buyer AS BOOLEAN)
                                   THEN seller_last_read_at ELSE :sent_at END
    WHERE id = :inquiry_id AND status = 'active'
    RETURNING {_INQUIRY_COLUMNS}
""")

_MARK_READ_SQL = text(f"""
    UPDATE item_inquiries
    SET unread_buyer        = CASE WHEN CAST(:reader_is_buyer AS BOOLEAN)
                                   THEN 0 ELSE unread_buyer END,
        unread_seller       = CASE WHEN CAST(:reader_is_buyer AS BOOLEAN)
                                   THEN unread_seller ELSE 0 END,
        buyer_last_read_at  = CASE WHEN CAST(:reader_is_buyer AS BOOLEAN)
                                   THEN :read_at ELSE buyer_last_read_at END,
        seller_last_read_at = CASE WHEN CAST(:reader_is_buyer AS BOOLEAN)
                                   THEN seller_last_read_at ELSE :read_at END
    WHERE id = :inquiry_id
    RETURNING {_INQUIRY_COLUMNS}
""")

_TRANSITION_SQL = text(f"""
    UPDATE item_inquiries
    SET status        = CAST(:new_status AS TEXT),
        version       = version + 1,
        reported_by   = CASE WHEN CAST(:new_status AS TEXT) = 'reported'
                             THEN CAST(:actor_id AS TEXT) ELSE reported_by END,
        report_reason = CASE WHEN CAST(:new_status AS TEXT) = 'reported'
                             THEN CAST(:report_reason AS TEXT) ELSE report_reason END,
        reported_at   = CASE WHEN CAST(:new_status AS TEXT) = 'reported'
                             THEN CAST(:changed_at AS TIMESTAMPTZ) ELSE reported_at END,
        closed_by     = CASE WHEN CAST(:new_status AS TEXT) IN ('completed', 'cancelled')
                             THEN CAST(:actor_id AS TEXT) ELSE closed_by END,
        closed_at     = CASE WHEN CAST(:new_status AS TEXT) IN ('completed', 'cancelled')
                             THEN CAST(:changed_at AS TIMESTAMPTZ) ELSE closed_at END
    WHERE id = :inquiry_id
      AND status = :expected_status
      AND version = :expected_version
    RETURNING {_INQUIRY_COLUMNS}
""")

_BUYER_ORDER_BY = {
    "latest": "last_message_at DESC, id DESC",
    "oldest": "created_at ASC, id ASC",
    "unread_first": "unread_buyer DESC, last_message_at DESC, id DESC",
}


def _buyer_list_sql(order_by: str) -> TextClause:
    return text(f"""
        SELECT {_INQUIRY_COLUMNS}
        FROM item_inquiries
        WHERE buyer_id = :buyer_id
          AND (CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT))
        ORDER BY {order_by}
        OFFSET :offset
        LIMIT :limit
    """)


_LIST_FOR_BUYER_SQL = {sort: _buyer_list_sql(order) for sort, order in _BUYER_ORDER_BY.items()}

_LIST_FOR_ITEM_SQL = text(f"""
    SELECT {_INQUIRY_COLUMNS}
    FROM item_inquiries
    WHERE item_id = :item_id
    ORDER BY last_message_at DESC, id DESC
    OFFSET :offset
    LIMIT :limit
""")

# ---------------------------------------------------------------------------
# SQL: messages
# ---------------------------------------------------------------------------

_INSERT_MESSAGE_SQL = text(f"""
    INSERT INTO inquiry_messages
        (id, inquiry_id, sender_id, sender_name, sender_type, message_type,
         content, image_url, proposed_price, original_price, is_read, created_at)
    VALUES
        (:id, :inquiry_id, :sender_id, :sender_name, :sender_type, :message_type,
         :content, :image_url, :proposed_price, :original_price, :is_read, :created_at)
    RETURNING {_MESSAGE_COLUMNS}
""")

_LIST_MESSAGES_SQL = text(f"""
    SELECT {_MESSAGE_COLUMNS}
    FROM inquiry_messages
    WHERE inquiry_id = :inquiry_id
    ORDER BY created_at ASC, id ASC
    OFFSET :offset
    LIMIT :limit
""")

_MARK_MESSAGES_READ_SQL = text("""
    UPDATE inquiry_messages
    SET is_read = TRUE
    WHERE inquiry_id = :inquiry_id
      AND sender_id <> :reader_id
      AND is_read = FALSE
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_inquiry(row: Any) -> Inquiry:
    return Inquiry(
        id=row.id,
        item_id=row.item_id,
        item_title=row.item_title,
        item_image=row.item_image,
        buyer_id=row.buyer_id,
        buyer_name=row.buyer_name,
        seller_id=row.seller_id,
        seller_name=row.seller_name,
        status=row.status,
        last_message=row.last_message,
        last_message_at=row.last_message_at,
        last_sender_id=row.last_sender_id,
        unread_buyer=row.unread_buyer,
        unread_seller=row.unread_seller,
        message_count=row.message_count,
        buyer_last_read_at=row.buyer_last_read_at,
        seller_last_read_at=row.seller_last_read_at,
        version=row.version,
        reported_by=row.reported_by,
        report_reason=row.report_reason,
        reported_at=row.reported_at,
        closed_by=row.closed_by,
        closed_at=row.closed_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_message(row: Any) -> InquiryMessage:
    return InquiryMessage(
        id=row.id,
        inquiry_id=row.inquiry_id,
        sender_id=row.sender_id,
        sender_name=row.sender_name,
        sender_type=row.sender_type,
        message_type=row.message_type,
        content=row.content,
        image_url=row.image_url,
        proposed_price=row.proposed_price,
        original_price=row.original_price,
        is_read=row.is_read,
        created_at=row.created_at,
    )


def _one(result: Any) -> Inquiry | None:
    row = result.fetchone()
    return _row_to_inquiry(row) if row else None


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


class InquiryRepository:
    async def insert_inquiry(self, db: AsyncSession, inquiry: Inquiry) -> Inquiry:
        result = await db.execute(
            _INSERT_INQUIRY_SQL,
            {
                "id": inquiry.id,
                "item_id": inquiry.item_id,
                "item_title": inquiry.item_title,
                "item_image": inquiry.item_image,
                "buyer_id": inquiry.buyer_id,
                "buyer_name": inquiry.buyer_name,
                "seller_id": inquiry.seller_id,
                "seller_name": inquiry.seller_name,
                "status": inquiry.status,
                "last_message": inquiry.last_message,
                "last_message_at": inquiry.last_message_at,
                "last_sender_id": inquiry.last_sender_id,
                "unread_buyer": inquiry.unread_buyer,
                "unread_seller": inquiry.unread_seller,
                "message_count": inquiry.message_count,
                "buyer_last_read_at": inquiry.buyer_last_read_at,
            },
        )
        return _row_to_inquiry(result.fetchone())

    async def get_inquiry(self, db: AsyncSession, inquiry_id: str) -> Inquiry | None:
        return _one(await db.execute(_GET_INQUIRY_SQL, {"inquiry_id": inquiry_id}))

    async def find_active(self, db: AsyncSession, item_id: str, buyer_id: str) -> Inquiry | None:
        return _one(await db.execute(_FIND_ACTIVE_SQL, {"item_id": item_id, "buyer_id": buyer_id}))

    async def record_message(
        self,
        db: AsyncSession,
        inquiry_id: str,
        content: str,
        sender_id: str,
        sender_is_buyer: bool,
        sent_at: datetime,
    ) -> Inquiry | None:
        return _one(await db.execute(
            _RECORD_MESSAGE_SQL,
            {
                "inquiry_id": inquiry_id,
                "content": content,
                "sender_id": sender_id,
                "sender_is_buyer": sender_is_buyer,
                "sent_at": sent_at,
            },
        ))

    async def mark_read(
        self, db: AsyncSession, inquiry_id: str, reader_is_buyer: bool, read_at: datetime
    ) -> Inquiry | None:
        return _one(await db.execute(
            _MARK_READ_SQL,
            {"inquiry_id": inquiry_id, "reader_is_buyer": reader_is_buyer, "read_at": read_at},
        ))

    async def transition_status(
        self,
        db: AsyncSession,
        inquiry_id: str,
        expected_status: str,
        expected_version: int,
        new_status: str,
        actor_id: str,
        report_reason: str | None,
        changed_at: datetime,
    ) -> Inquiry | None:
        return _one(await db.execute(
            _TRANSITION_SQL,
            {
                "inquiry_id": inquiry_id,
                "expected_status": expected_status,
                "expected_version": expected_version,
                "new_status": new_status,
                "actor_id": actor_id,
                "report_reason": report_reason,
                "changed_at": changed_at,
            },
        ))

    async def list_for_buyer(
        self,
        db: AsyncSession,
        buyer_id: str,
        status: str | None,
        sort: str,
        offset: int,
        limit: int,
    ) -> list[Inquiry]:
        result = await db.execute(
            _LIST_FOR_BUYER_SQL[sort],
            {"buyer_id": buyer_id, "status": status, "offset": offset, "limit": limit},
        )
        return [_row_to_inquiry(row) for row in result.fetchall()]

    async def list_for_item(
        self, db: AsyncSession, item_id: str, offset: int, limit: int
    ) -> list[Inquiry]:
        result = await db.execute(
            _LIST_FOR_ITEM_SQL, {"item_id": item_id, "offset": offset, "limit": limit}
        )
        return [_row_to_inquiry(row) for row in result.fetchall()]


class MessageRepository:
    async def insert_message(self, db: AsyncSession, message: InquiryMessage) -> InquiryMessage:
        result = await db.execute(
            _INSERT_MESSAGE_SQL,
            {
                "id": message.id,
                "inquiry_id": message.inquiry_id,
                "sender_id": message.sender_id,
                "sender_name": message.sender_name,
                "sender_type": message.sender_type,
                "message_type": message.message_type,
                "content": message.content,
                "image_url": message.image_url,
                "proposed_price": message.proposed_price,
                "original_price": message.original_price,
                "is_read": message.is_read,
                "created_at": message.created_at,
            },
        )
        return _row_to_message(result.fetchone())

    async def list_messages(
        self, db: AsyncSession, inquiry_id: str, offset: int, limit: int
    ) -> list[InquiryMessage]:
        result = await db.execute(
            _LIST_MESSAGES_SQL, {"inquiry_id": inquiry_id, "offset": offset, "limit": limit}
        )
        return [_row_to_message(row) for row in result.fetchall()]

    async def mark_read_for(self, db: AsyncSession, inquiry_id: str, reader_id: str) -> int:
        """Mark messages not sent by the reader as read; returns rows touched."""
        result = await db.execute(
            _MARK_MESSAGES_READ_SQL, {"inquiry_id": inquiry_id, "reader_id": reader_id}
        )
        return result.rowcount or 0
