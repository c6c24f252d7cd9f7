"""Repository Protocols for inquiries and their messages."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sc_inquiry.domain.models import Inquiry, InquiryMessage


class InquiryRepositoryProtocol(Protocol):
    async def insert_inquiry(self, db: AsyncSession, inquiry: Inquiry) -> Inquiry: ...

    async def get_inquiry(self, db: AsyncSession, inquiry_id: str) -> Inquiry | None: ...

    async def find_active(self, db: AsyncSession, item_id: str, buyer_id: str) -> Inquiry | None: ...

    async def record_message(
        self,
        db: AsyncSession,
        inquiry_id: str,
        content: str,
        sender_id: str,
        sender_is_buyer: bool,
        sent_at: datetime,
    ) -> Inquiry | None: ...

    async def mark_read(
        self, db: AsyncSession, inquiry_id: str, reader_is_buyer: bool, read_at: datetime
    ) -> Inquiry | None: ...

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
    ) -> Inquiry | None: ...

    async def list_for_buyer(
        self,
        db: AsyncSession,
        buyer_id: str,
        status: str | None,
        sort: str,
        offset: int,
        limit: int,
    ) -> list[Inquiry]: ...

    async def list_for_item(
        self, db: AsyncSession, item_id: str, offset: int, limit: int
    ) -> list[Inquiry]: ...


class MessageRepositoryProtocol(Protocol):
    async def insert_message(self, db: AsyncSession, message: InquiryMessage) -> InquiryMessage: ...

    async def list_messages(
        self, db: AsyncSession, inquiry_id: str, offset: int, limit: int
    ) -> list[InquiryMessage]: ...

    async def mark_read_for(self, db: AsyncSession, inquiry_id: str, reader_id: str) -> int: ...
