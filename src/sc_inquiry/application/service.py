"""InquiryApplicationService — buyer/seller conversations about an item.

Writes commit or roll back here; repositories never commit. Status changes
go through the transition table in ``domain.state_machine`` and are
persisted with a compare-and-set on (status, version).
"""

import logging
from collections.abc import Callable
from datetime import datetime

from redis.exceptions import RedisError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.sc_common.datetime_utils import utc_now
from src.sc_common.enums import ActorRole, InquiryMessageType, InquirySortOption, InquiryStatus, ItemStatus
from src.sc_common.errors import (
    ContentValidationError,
    DuplicateInquiryError,
    InquiryAccessDeniedError,
    InquiryConflictError,
    InquiryNotActiveError,
    InquiryNotFoundError,
    InvalidInquiryTransitionError,
    ItemNotFoundError,
    SelfInquiryError,
)
from src.sc_common.id_generator import generate_id
from src.sc_gateway.auth.caller import Caller
from src.sc_inquiry.application.schemas import (
    InquiryListResponse,
    InquiryOut,
    MessageListResponse,
    MessageOut,
)
from src.sc_inquiry.domain.models import Inquiry, InquiryMessage
from src.sc_inquiry.domain.repository import InquiryRepositoryProtocol, MessageRepositoryProtocol
from src.sc_inquiry.domain.state_machine import resolve_role, validate_transition
from src.sc_inquiry.infrastructure.persistence import InquiryRepository, MessageRepository
from src.sc_inquiry.infrastructure.rate_limiter import MessageRateLimiter
from src.sc_marketplace.domain.repository import ItemRepositoryProtocol
from src.sc_marketplace.infrastructure.persistence import ItemRepository
from src.sc_validation.access import is_admin, is_owner

logger = logging.getLogger("sc.inquiry")

MAX_MESSAGE_LENGTH = 1000

_USER_MESSAGE_TYPES = {
    InquiryMessageType.TEXT.value,
    InquiryMessageType.IMAGE.value,
    InquiryMessageType.PRICE_PROPOSAL.value,
}


def _checked_text(text: str | None, empty_message: str, too_long_message: str) -> str:
    content = (text or "").strip()
    if not content:
        raise ContentValidationError(empty_message)
    if len(content) > MAX_MESSAGE_LENGTH:
        raise ContentValidationError(too_long_message)
    return content


def _check_proposal(message_type: str, proposed_price: int | None) -> None:
    if message_type not in _USER_MESSAGE_TYPES:
        raise ContentValidationError("올바르지 않은 메시지 유형입니다.")
    if message_type == InquiryMessageType.PRICE_PROPOSAL.value and (
        proposed_price is None or proposed_price <= 0
    ):
        raise ContentValidationError("올바른 가격 제안을 입력해주세요.")


def _is_party(caller: Caller, inquiry: Inquiry) -> bool:
    return is_owner(caller, inquiry.buyer_id) or is_owner(caller, inquiry.seller_id)


class InquiryApplicationService:
    def __init__(
        self,
        repo: InquiryRepositoryProtocol | None = None,
        message_repo: MessageRepositoryProtocol | None = None,
        item_repo: ItemRepositoryProtocol | None = None,
        rate_limiter: MessageRateLimiter | None = None,
        id_factory: Callable[[str], str] = generate_id,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repo: InquiryRepositoryProtocol = repo or InquiryRepository()
        self._messages: MessageRepositoryProtocol = message_repo or MessageRepository()
        self._items: ItemRepositoryProtocol = item_repo or ItemRepository()
        self._rate_limiter = rate_limiter or MessageRateLimiter()
        self._new_id = id_factory
        self._now = clock

    async def _load(self, db: AsyncSession, inquiry_id: str) -> Inquiry:
        inquiry = await self._repo.get_inquiry(db, inquiry_id)
        if inquiry is None:
            raise InquiryNotFoundError(inquiry_id)
        return inquiry

    async def _load_visible(self, db: AsyncSession, caller: Caller, inquiry_id: str) -> Inquiry:
        inquiry = await self._load(db, inquiry_id)
        if not (_is_party(caller, inquiry) or is_admin(caller)):
            raise InquiryAccessDeniedError()
        return inquiry

    async def _release_message_slot(self, inquiry_id: str, sender_id: str) -> None:
        try:
            await self._rate_limiter.release(inquiry_id, sender_id)
        except RedisError:
            logger.warning("Could not release rate-limit slot for %s on %s", sender_id, inquiry_id, exc_info=True)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_inquiry(
        self,
        db: AsyncSession,
        caller: Caller,
        item_id: str,
        message: str,
        message_type: str = InquiryMessageType.TEXT.value,
        proposed_price: int | None = None,
    ) -> InquiryOut:
        item = await self._items.get_item(db, item_id)
        if item is None or item.status == ItemStatus.HIDDEN.value:
            raise ItemNotFoundError(item_id)
        if is_owner(caller, item.seller_id):
            raise SelfInquiryError()

        content = _checked_text(
            message,
            "문의 내용을 입력해주세요.",
            "문의 내용은 1000자를 초과할 수 없습니다.",
        )
        _check_proposal(message_type, proposed_price)

        if await self._repo.find_active(db, item_id, caller.uid) is not None:  # type: ignore[arg-type]
            raise DuplicateInquiryError()

        now = self._now()
        buyer_name = caller.display_name or "구매자"
        inquiry = Inquiry(
            id=self._new_id("inq_"),
            item_id=item.id,
            item_title=item.title,
            item_image=item.images[0] if item.images else None,
            buyer_id=caller.uid,  # type: ignore[arg-type]
            buyer_name=buyer_name,
            seller_id=item.seller_id,
            seller_name="판매자",
            status=InquiryStatus.ACTIVE.value,
            last_message=content,
            last_message_at=now,
            last_sender_id=caller.uid,
            unread_buyer=0,
            unread_seller=1,
            message_count=1,
            buyer_last_read_at=now,
        )
        first_message = InquiryMessage(
            id=self._new_id("msg_"),
            inquiry_id=inquiry.id,
            sender_id=caller.uid,  # type: ignore[arg-type]
            sender_name=buyer_name,
            sender_type=ActorRole.BUYER.value,
            message_type=message_type,
            content=content,
            proposed_price=proposed_price,
            original_price=item.price if proposed_price is not None else None,
            created_at=now,
        )

        try:
            created = await self._repo.insert_inquiry(db, inquiry)
            await self._messages.insert_message(db, first_message)
            await self._items.adjust_inquiries(db, item_id, 1)
            await db.commit()
        except IntegrityError as exc:
            # partial unique index: one active inquiry per (item, buyer)
            await db.rollback()
            raise DuplicateInquiryError() from exc
        except Exception:
            await db.rollback()
            raise

        logger.info("Inquiry %s opened on item %s by %s", created.id, item_id, caller.uid)
        return InquiryOut.from_domain(created)

    async def send_message(
        self,
        db: AsyncSession,
        caller: Caller,
        inquiry_id: str,
        content: str,
        message_type: str = InquiryMessageType.TEXT.value,
        image_url: str | None = None,
        proposed_price: int | None = None,
    ) -> MessageOut:
        inquiry = await self._load(db, inquiry_id)
        if not _is_party(caller, inquiry):
            raise InquiryAccessDeniedError("메시지를 보낼 권한이 없습니다.")
        if inquiry.status != InquiryStatus.ACTIVE.value:
            raise InquiryNotActiveError()

        text = _checked_text(
            content,
            "메시지 내용을 입력해주세요.",
            "메시지는 1000자를 초과할 수 없습니다.",
        )
        _check_proposal(message_type, proposed_price)
        if message_type == InquiryMessageType.IMAGE.value and not (
            image_url and image_url.startswith("https://")
        ):
            raise ContentValidationError("올바른 이미지 주소를 입력해주세요.")

        # a failed insert below gives the slot back
        await self._rate_limiter.hit(inquiry_id, caller.uid)  # type: ignore[arg-type]

        sender_is_buyer = caller.uid == inquiry.buyer_id
        sender_type = ActorRole.BUYER if sender_is_buyer else ActorRole.SELLER
        now = self._now()
        message = InquiryMessage(
            id=self._new_id("msg_"),
            inquiry_id=inquiry_id,
            sender_id=caller.uid,  # type: ignore[arg-type]
            sender_name=caller.display_name or ("구매자" if sender_is_buyer else "판매자"),
            sender_type=sender_type.value,
            message_type=message_type,
            content=text,
            image_url=image_url,
            proposed_price=proposed_price,
            created_at=now,
        )

        try:
            saved = await self._messages.insert_message(db, message)
            updated = await self._repo.record_message(
                db, inquiry_id, text, caller.uid, sender_is_buyer, now  # type: ignore[arg-type]
            )
            if updated is None:
                # closed between our read and this write
                raise InquiryNotActiveError()
            await db.commit()
        except Exception:
            await db.rollback()
            await self._release_message_slot(inquiry_id, caller.uid)  # type: ignore[arg-type]
            raise
        return MessageOut.from_domain(saved)

    async def mark_read(self, db: AsyncSession, caller: Caller, inquiry_id: str) -> InquiryOut:
        inquiry = await self._load(db, inquiry_id)
        if not _is_party(caller, inquiry):
            raise InquiryAccessDeniedError("문의 읽음 처리 권한이 없습니다.")
        try:
            updated = await self._repo.mark_read(
                db, inquiry_id, caller.uid == inquiry.buyer_id, self._now()
            )
            await self._messages.mark_read_for(db, inquiry_id, caller.uid)  # type: ignore[arg-type]
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if updated is None:
            raise InquiryNotFoundError(inquiry_id)
        return InquiryOut.from_domain(updated)

    async def update_status(
        self,
        db: AsyncSession,
        caller: Caller,
        inquiry_id: str,
        target: str,
        reason: str | None = None,
    ) -> InquiryOut:
        inquiry = await self._load(db, inquiry_id)
        try:
            target_status = InquiryStatus(target)
            current_status = InquiryStatus(inquiry.status)
        except ValueError:
            raise InvalidInquiryTransitionError(inquiry.status, target) from None

        role = resolve_role(caller, inquiry)
        validate_transition(current_status, role, target_status)

        try:
            updated = await self._repo.transition_status(
                db,
                inquiry_id,
                expected_status=inquiry.status,
                expected_version=inquiry.version,
                new_status=target_status.value,
                actor_id=caller.uid,  # type: ignore[arg-type]
                report_reason=reason.strip() if reason and reason.strip() else None,
                changed_at=self._now(),
            )
            if updated is None:
                raise InquiryConflictError(inquiry_id)
            if target_status is InquiryStatus.COMPLETED:
                await self._items.update_status(db, inquiry.item_id, ItemStatus.SOLD.value)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Inquiry %s %s -> %s by %s (%s)",
            inquiry_id, inquiry.status, target_status.value, caller.uid, role.value,  # type: ignore[union-attr]
        )
        return InquiryOut.from_domain(updated)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_inquiry(self, db: AsyncSession, caller: Caller, inquiry_id: str) -> InquiryOut:
        return InquiryOut.from_domain(await self._load_visible(db, caller, inquiry_id))

    async def list_messages(
        self,
        db: AsyncSession,
        caller: Caller,
        inquiry_id: str,
        page: int = 1,
        page_size: int = 50,
    ) -> MessageListResponse:
        await self._load_visible(db, caller, inquiry_id)
        # Fetch page_size+1 to detect has_next
        rows = await self._messages.list_messages(
            db, inquiry_id, (page - 1) * page_size, page_size + 1
        )
        return MessageListResponse(
            messages=[MessageOut.from_domain(m) for m in rows[:page_size]],
            page=page,
            page_size=page_size,
            has_next=len(rows) > page_size,
        )

    async def list_my_inquiries(
        self,
        db: AsyncSession,
        caller: Caller,
        status: str | None = None,
        sort: str = InquirySortOption.LATEST.value,
        page: int = 1,
        page_size: int = 20,
    ) -> InquiryListResponse:
        if sort not in {s.value for s in InquirySortOption}:
            sort = InquirySortOption.LATEST.value
        rows = await self._repo.list_for_buyer(
            db, caller.uid, status, sort, (page - 1) * page_size, page_size + 1  # type: ignore[arg-type]
        )
        return InquiryListResponse(
            items=[InquiryOut.from_domain(i) for i in rows[:page_size]],
            page=page,
            page_size=page_size,
            has_next=len(rows) > page_size,
        )

    async def list_item_inquiries(
        self,
        db: AsyncSession,
        caller: Caller,
        item_id: str,
        page: int = 1,
        page_size: int = 20,
    ) -> InquiryListResponse:
        item = await self._items.get_item(db, item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        if not (is_owner(caller, item.seller_id) or is_admin(caller)):
            raise InquiryAccessDeniedError("상품 문의를 볼 권한이 없습니다.")
        rows = await self._repo.list_for_item(db, item_id, (page - 1) * page_size, page_size + 1)
        return InquiryListResponse(
            items=[InquiryOut.from_domain(i) for i in rows[:page_size]],
            page=page,
            page_size=page_size,
            has_next=len(rows) > page_size,
        )
