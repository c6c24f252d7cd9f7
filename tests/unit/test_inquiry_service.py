"""Unit tests for InquiryApplicationService using mock repositories."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.exc import IntegrityError, OperationalError

from src.sc_common.errors import (
    ContentValidationError,
    DuplicateInquiryError,
    InquiryAccessDeniedError,
    InquiryConflictError,
    InquiryNotActiveError,
    InquiryNotFoundError,
    InquiryTransitionForbiddenError,
    InvalidInquiryTransitionError,
    ItemNotFoundError,
    MessageRateLimitError,
    SelfInquiryError,
)
from src.sc_gateway.auth.caller import Caller
from src.sc_inquiry.application.service import InquiryApplicationService
from src.sc_inquiry.domain.models import Inquiry
from src.sc_inquiry.infrastructure.rate_limiter import MessageRateLimiter
from src.sc_marketplace.domain.models import MarketplaceItem

NOW = datetime(2026, 5, 1, 9, 0, tzinfo=UTC)
BUYER = Caller(uid="u-buyer", display_name="린디")
SELLER = Caller(uid="u-seller")
ADMIN = Caller(uid="u-admin", admin=True)
STRANGER = Caller(uid="u-x")


def _make_item(**kwargs) -> MarketplaceItem:
    defaults = dict(
        id="itm_1", seller_id="u-seller", title="댄스화", description="좋아요",
        category="shoes", status="available",
        pricing={"price": 85000, "currency": "KRW", "tradeMethod": "both"},
        specs={"condition": "good"}, location={"region": "강남"},
        images=["https://cdn.example.com/a.jpg"], price=85000,
    )
    defaults.update(kwargs)
    return MarketplaceItem(**defaults)


def _make_inquiry(**kwargs) -> Inquiry:
    defaults = dict(
        id="inq_1", item_id="itm_1", item_title="댄스화", item_image=None,
        buyer_id="u-buyer", buyer_name="린디", seller_id="u-seller", seller_name="판매자",
        status="active", last_message="안녕하세요", last_message_at=NOW, last_sender_id="u-buyer",
        version=3,
    )
    defaults.update(kwargs)
    return Inquiry(**defaults)


def _redis(count: int) -> AsyncMock:
    redis = AsyncMock()
    redis.incr.return_value = count
    redis.decr.return_value = count - 1
    return redis


def _limiter(count: int = 1, limit: int = 5) -> MessageRateLimiter:
    redis = _redis(count)

    async def factory():
        return redis

    return MessageRateLimiter(redis_factory=factory, limit=limit)


@pytest.fixture
def db():
    return AsyncMock()


@pytest.fixture
def repo():
    return AsyncMock()


@pytest.fixture
def message_repo():
    return AsyncMock()


@pytest.fixture
def item_repo():
    return AsyncMock()


def _service(repo, message_repo, item_repo, limiter=None) -> InquiryApplicationService:
    return InquiryApplicationService(
        repo=repo,
        message_repo=message_repo,
        item_repo=item_repo,
        rate_limiter=limiter or _limiter(),
        id_factory=lambda prefix: f"{prefix}new",
        clock=lambda: NOW,
    )


class TestCreateInquiry:
    async def test_opens_inquiry_with_first_message(self, db, repo, message_repo, item_repo) -> None:
        item_repo.get_item.return_value = _make_item()
        repo.find_active.return_value = None
        repo.insert_inquiry.side_effect = lambda _db, inquiry: inquiry
        svc = _service(repo, message_repo, item_repo)

        result = await svc.create_inquiry(db, BUYER, "itm_1", "  사이즈 문의드려요  ")

        assert result.id == "inq_new"
        assert result.status == "active"
        assert result.last_message == "사이즈 문의드려요"
        assert result.unread_count.seller == 1
        assert result.unread_count.buyer == 0
        assert result.message_count == 1
        assert result.item_image == "https://cdn.example.com/a.jpg"
        first = message_repo.insert_message.call_args.args[1]
        assert first.id == "msg_new"
        assert first.sender_type == "buyer"
        assert first.sender_name == "린디"
        item_repo.adjust_inquiries.assert_awaited_once_with(db, "itm_1", 1)
        db.commit.assert_awaited_once()

    async def test_price_proposal_records_original_price(self, db, repo, message_repo, item_repo) -> None:
        item_repo.get_item.return_value = _make_item()
        repo.find_active.return_value = None
        repo.insert_inquiry.side_effect = lambda _db, inquiry: inquiry
        svc = _service(repo, message_repo, item_repo)

        await svc.create_inquiry(db, BUYER, "itm_1", "7만원 가능할까요?", "price_proposal", 70000)

        first = message_repo.insert_message.call_args.args[1]
        assert first.proposed_price == 70000
        assert first.original_price == 85000

    async def test_missing_item(self, db, repo, message_repo, item_repo) -> None:
        item_repo.get_item.return_value = None
        with pytest.raises(ItemNotFoundError):
            await _service(repo, message_repo, item_repo).create_inquiry(db, BUYER, "itm_x", "hi")

    async def test_hidden_item(self, db, repo, message_repo, item_repo) -> None:
        item_repo.get_item.return_value = _make_item(status="hidden")
        with pytest.raises(ItemNotFoundError):
            await _service(repo, message_repo, item_repo).create_inquiry(db, BUYER, "itm_1", "hi")

    async def test_own_item(self, db, repo, message_repo, item_repo) -> None:
        item_repo.get_item.return_value = _make_item()
        with pytest.raises(SelfInquiryError):
            await _service(repo, message_repo, item_repo).create_inquiry(db, SELLER, "itm_1", "hi")
        repo.insert_inquiry.assert_not_awaited()

    async def test_empty_message(self, db, repo, message_repo, item_repo) -> None:
        item_repo.get_item.return_value = _make_item()
        with pytest.raises(ContentValidationError) as exc:
            await _service(repo, message_repo, item_repo).create_inquiry(db, BUYER, "itm_1", "   ")
        assert exc.value.message == "문의 내용을 입력해주세요."

    async def test_message_too_long(self, db, repo, message_repo, item_repo) -> None:
        item_repo.get_item.return_value = _make_item()
        with pytest.raises(ContentValidationError) as exc:
            await _service(repo, message_repo, item_repo).create_inquiry(db, BUYER, "itm_1", "a" * 1001)
        assert exc.value.message == "문의 내용은 1000자를 초과할 수 없습니다."

    async def test_proposal_needs_positive_price(self, db, repo, message_repo, item_repo) -> None:
        item_repo.get_item.return_value = _make_item()
        with pytest.raises(ContentValidationError) as exc:
            await _service(repo, message_repo, item_repo).create_inquiry(
                db, BUYER, "itm_1", "가격 제안", "price_proposal", 0
            )
        assert exc.value.message == "올바른 가격 제안을 입력해주세요."

    async def test_system_message_type_rejected(self, db, repo, message_repo, item_repo) -> None:
        item_repo.get_item.return_value = _make_item()
        with pytest.raises(ContentValidationError):
            await _service(repo, message_repo, item_repo).create_inquiry(db, BUYER, "itm_1", "hi", "system")

    async def test_existing_active_inquiry(self, db, repo, message_repo, item_repo) -> None:
        item_repo.get_item.return_value = _make_item()
        repo.find_active.return_value = _make_inquiry()
        with pytest.raises(DuplicateInquiryError):
            await _service(repo, message_repo, item_repo).create_inquiry(db, BUYER, "itm_1", "hi")
        repo.insert_inquiry.assert_not_awaited()

    async def test_unique_index_race_is_duplicate(self, db, repo, message_repo, item_repo) -> None:
        item_repo.get_item.return_value = _make_item()
        repo.find_active.return_value = None
        repo.insert_inquiry.side_effect = IntegrityError("INSERT", {}, Exception("uq"))
        with pytest.raises(DuplicateInquiryError):
            await _service(repo, message_repo, item_repo).create_inquiry(db, BUYER, "itm_1", "hi")
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()


class TestSendMessage:
    async def test_seller_reply(self, db, repo, message_repo, item_repo) -> None:
        repo.get_inquiry.return_value = _make_inquiry()
        repo.record_message.return_value = _make_inquiry(unread_buyer=1)
        message_repo.insert_message.side_effect = lambda _db, message: message
        svc = _service(repo, message_repo, item_repo)

        msg = await svc.send_message(db, SELLER, "inq_1", " 네 가능합니다 ")

        assert msg.content == "네 가능합니다"
        assert msg.sender_type == "seller"
        assert msg.sender_name == "판매자"
        repo.record_message.assert_awaited_once_with(
            db, "inq_1", "네 가능합니다", "u-seller", False, NOW
        )
        db.commit.assert_awaited_once()

    async def test_stranger_cannot_send(self, db, repo, message_repo, item_repo) -> None:
        repo.get_inquiry.return_value = _make_inquiry()
        with pytest.raises(InquiryAccessDeniedError):
            await _service(repo, message_repo, item_repo).send_message(db, STRANGER, "inq_1", "hi")

    async def test_admin_is_not_a_party(self, db, repo, message_repo, item_repo) -> None:
        repo.get_inquiry.return_value = _make_inquiry()
        with pytest.raises(InquiryAccessDeniedError):
            await _service(repo, message_repo, item_repo).send_message(db, ADMIN, "inq_1", "hi")

    async def test_closed_inquiry(self, db, repo, message_repo, item_repo) -> None:
        repo.get_inquiry.return_value = _make_inquiry(status="completed")
        with pytest.raises(InquiryNotActiveError):
            await _service(repo, message_repo, item_repo).send_message(db, BUYER, "inq_1", "hi")

    async def test_missing_inquiry(self, db, repo, message_repo, item_repo) -> None:
        repo.get_inquiry.return_value = None
        with pytest.raises(InquiryNotFoundError):
            await _service(repo, message_repo, item_repo).send_message(db, BUYER, "inq_x", "hi")

    async def test_image_needs_https_url(self, db, repo, message_repo, item_repo) -> None:
        repo.get_inquiry.return_value = _make_inquiry()
        with pytest.raises(ContentValidationError):
            await _service(repo, message_repo, item_repo).send_message(
                db, BUYER, "inq_1", "사진", "image", "http://x/a.jpg"
            )

    async def test_rate_limited(self, db, repo, message_repo, item_repo) -> None:
        repo.get_inquiry.return_value = _make_inquiry()
        svc = _service(repo, message_repo, item_repo, limiter=_limiter(count=6, limit=5))
        with pytest.raises(MessageRateLimitError):
            await svc.send_message(db, BUYER, "inq_1", "hi")
        message_repo.insert_message.assert_not_awaited()

    async def test_closed_between_read_and_write(self, db, repo, message_repo, item_repo) -> None:
        repo.get_inquiry.return_value = _make_inquiry()
        repo.record_message.return_value = None
        message_repo.insert_message.side_effect = lambda _db, message: message
        with pytest.raises(InquiryNotActiveError):
            await _service(repo, message_repo, item_repo).send_message(db, BUYER, "inq_1", "hi")
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    async def test_failed_insert_releases_rate_limit_slot(self, db, repo, message_repo, item_repo) -> None:
        repo.get_inquiry.return_value = _make_inquiry()
        message_repo.insert_message.side_effect = OperationalError("insert", {}, Exception("db down"))
        limiter = MagicMock()
        limiter.hit = AsyncMock(return_value=1)
        limiter.release = AsyncMock()
        with pytest.raises(OperationalError):
            await _service(repo, message_repo, item_repo, limiter=limiter).send_message(db, BUYER, "inq_1", "hi")
        limiter.release.assert_awaited_once_with("inq_1", "u-buyer")

    async def test_release_failure_keeps_original_error(self, db, repo, message_repo, item_repo) -> None:
        repo.get_inquiry.return_value = _make_inquiry()
        repo.record_message.return_value = None
        message_repo.insert_message.side_effect = lambda _db, message: message
        limiter = MagicMock()
        limiter.hit = AsyncMock(return_value=1)
        limiter.release = AsyncMock(side_effect=RedisConnectionError("redis down"))
        with pytest.raises(InquiryNotActiveError):
            await _service(repo, message_repo, item_repo, limiter=limiter).send_message(db, BUYER, "inq_1", "hi")


class TestUpdateStatus:
    async def test_seller_completes_and_item_is_sold(self, db, repo, message_repo, item_repo) -> None:
        repo.get_inquiry.return_value = _make_inquiry()
        repo.transition_status.return_value = _make_inquiry(status="completed", version=4)
        svc = _service(repo, message_repo, item_repo)

        result = await svc.update_status(db, SELLER, "inq_1", "completed")

        assert result.status == "completed"
        kwargs = repo.transition_status.call_args.kwargs
        assert kwargs["expected_status"] == "active"
        assert kwargs["expected_version"] == 3
        assert kwargs["new_status"] == "completed"
        assert kwargs["actor_id"] == "u-seller"
        item_repo.update_status.assert_awaited_once_with(db, "itm_1", "sold")
        db.commit.assert_awaited_once()

    async def test_buyer_reports_with_reason(self, db, repo, message_repo, item_repo) -> None:
        repo.get_inquiry.return_value = _make_inquiry()
        repo.transition_status.return_value = _make_inquiry(status="reported", version=4)
        svc = _service(repo, message_repo, item_repo)

        await svc.update_status(db, BUYER, "inq_1", "reported", "  욕설  ")

        assert repo.transition_status.call_args.kwargs["report_reason"] == "욕설"
        item_repo.update_status.assert_not_awaited()

    async def test_buyer_cannot_complete(self, db, repo, message_repo, item_repo) -> None:
        repo.get_inquiry.return_value = _make_inquiry()
        with pytest.raises(InquiryTransitionForbiddenError):
            await _service(repo, message_repo, item_repo).update_status(db, BUYER, "inq_1", "completed")
        repo.transition_status.assert_not_awaited()

    async def test_stranger(self, db, repo, message_repo, item_repo) -> None:
        repo.get_inquiry.return_value = _make_inquiry()
        with pytest.raises(InquiryAccessDeniedError):
            await _service(repo, message_repo, item_repo).update_status(db, STRANGER, "inq_1", "reported")

    async def test_unknown_status(self, db, repo, message_repo, item_repo) -> None:
        repo.get_inquiry.return_value = _make_inquiry()
        with pytest.raises(InvalidInquiryTransitionError):
            await _service(repo, message_repo, item_repo).update_status(db, SELLER, "inq_1", "archived")

    async def test_terminal_inquiry(self, db, repo, message_repo, item_repo) -> None:
        repo.get_inquiry.return_value = _make_inquiry(status="cancelled")
        with pytest.raises(InvalidInquiryTransitionError):
            await _service(repo, message_repo, item_repo).update_status(db, ADMIN, "inq_1", "completed")

    async def test_concurrent_change_is_a_conflict(self, db, repo, message_repo, item_repo) -> None:
        repo.get_inquiry.return_value = _make_inquiry()
        repo.transition_status.return_value = None
        with pytest.raises(InquiryConflictError):
            await _service(repo, message_repo, item_repo).update_status(db, SELLER, "inq_1", "cancelled")
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()
        item_repo.update_status.assert_not_awaited()


class TestReads:
    async def test_mark_read_as_buyer(self, db, repo, message_repo, item_repo) -> None:
        repo.get_inquiry.return_value = _make_inquiry(unread_buyer=2)
        repo.mark_read.return_value = _make_inquiry(unread_buyer=0)
        result = await _service(repo, message_repo, item_repo).mark_read(db, BUYER, "inq_1")
        assert result.unread_count.buyer == 0
        repo.mark_read.assert_awaited_once_with(db, "inq_1", True, NOW)
        message_repo.mark_read_for.assert_awaited_once_with(db, "inq_1", "u-buyer")

    async def test_admin_may_view(self, db, repo, message_repo, item_repo) -> None:
        repo.get_inquiry.return_value = _make_inquiry()
        result = await _service(repo, message_repo, item_repo).get_inquiry(db, ADMIN, "inq_1")
        assert result.id == "inq_1"

    async def test_stranger_may_not_view(self, db, repo, message_repo, item_repo) -> None:
        repo.get_inquiry.return_value = _make_inquiry()
        with pytest.raises(InquiryAccessDeniedError):
            await _service(repo, message_repo, item_repo).list_messages(db, STRANGER, "inq_1")

    async def test_my_inquiries_has_next(self, db, repo, message_repo, item_repo) -> None:
        repo.list_for_buyer.return_value = [_make_inquiry(id=f"inq_{i}") for i in range(3)]
        svc = _service(repo, message_repo, item_repo)

        result = await svc.list_my_inquiries(db, BUYER, sort="bogus", page=2, page_size=2)

        assert [i.id for i in result.items] == ["inq_0", "inq_1"]
        assert result.has_next is True
        repo.list_for_buyer.assert_awaited_once_with(db, "u-buyer", None, "latest", 2, 3)

    async def test_item_inquiries_for_seller_only(self, db, repo, message_repo, item_repo) -> None:
        item_repo.get_item.return_value = _make_item()
        with pytest.raises(InquiryAccessDeniedError):
            await _service(repo, message_repo, item_repo).list_item_inquiries(db, BUYER, "itm_1")

        repo.list_for_item.return_value = []
        result = await _service(repo, message_repo, item_repo).list_item_inquiries(db, SELLER, "itm_1")
        assert result.items == []
        assert result.has_next is False


class TestRateLimiter:
    async def test_first_hit_sets_expiry(self) -> None:
        redis = _redis(1)

        async def factory():
            return redis

        limiter = MessageRateLimiter(redis_factory=factory, limit=5)
        assert await limiter.hit("inq_1", "u-buyer") == 1
        redis.incr.assert_awaited_once_with("ratelimit:inquiry_msg:inq_1:u-buyer")
        redis.expire.assert_awaited_once_with("ratelimit:inquiry_msg:inq_1:u-buyer", 60)

    async def test_later_hits_keep_expiry(self) -> None:
        redis = _redis(5)

        async def factory():
            return redis

        assert await MessageRateLimiter(redis_factory=factory, limit=5).hit("inq_1", "u") == 5
        redis.expire.assert_not_awaited()

    async def test_over_limit(self) -> None:
        redis = _redis(6)

        async def factory():
            return redis

        with pytest.raises(MessageRateLimitError):
            await MessageRateLimiter(redis_factory=factory, limit=5).hit("inq_1", "u")

    def test_default_limit_from_settings(self) -> None:
        limiter = MessageRateLimiter(redis_factory=MagicMock())
        assert limiter._limit == 5

    async def test_release_gives_back_one_hit(self) -> None:
        redis = _redis(3)

        async def factory():
            return redis

        await MessageRateLimiter(redis_factory=factory, limit=5).release("inq_1", "u")
        redis.decr.assert_awaited_once_with("ratelimit:inquiry_msg:inq_1:u")
        redis.delete.assert_not_awaited()

    async def test_release_of_expired_window_drops_key(self) -> None:
        redis = _redis(0)
        redis.decr.return_value = -1

        async def factory():
            return redis

        await MessageRateLimiter(redis_factory=factory, limit=5).release("inq_1", "u")
        redis.delete.assert_awaited_once_with("ratelimit:inquiry_msg:inq_1:u")
