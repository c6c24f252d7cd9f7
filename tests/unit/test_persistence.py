"""Unit tests for the raw-SQL repositories using a mocked AsyncSession."""

import json
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.sc_community.infrastructure.persistence import CommentRepository, PostRepository
from src.sc_geo.domain.models import BoundingBox, Coordinates
from src.sc_inquiry.infrastructure.persistence import InquiryRepository, MessageRepository
from src.sc_marketplace.domain.models import MarketplaceItem
from src.sc_marketplace.infrastructure.persistence import ItemRepository
from src.sc_notification.infrastructure.persistence import NotificationRepository
from src.sc_studio.domain.models import Studio
from src.sc_studio.infrastructure.persistence import StudioRepository

NOW = datetime(2026, 5, 1, tzinfo=UTC)


def _make_item_row(**kwargs):
    row = MagicMock()
    row.id = kwargs.get("id", "itm_1")
    row.seller_id = "u-seller"
    row.title = "댄스화"
    row.description = "좋아요"
    row.category = "shoes"
    row.status = kwargs.get("status", "available")
    row.pricing = kwargs.get("pricing", '{"price": 85000, "currency": "KRW"}')
    row.specs = kwargs.get("specs", {"condition": "good"})
    row.location = kwargs.get("location", None)
    row.images = ["https://cdn.example.com/a.jpg"]
    row.tags = None
    row.keywords = ["댄스화"]
    row.price = 85000
    row.latitude = 37.5
    row.longitude = 127.0
    row.geohash = "wydm9qyc"
    row.view_count = 1
    row.favorite_count = 0
    row.inquiry_count = 0
    row.featured = False
    row.reported = False
    row.created_at = NOW
    row.updated_at = NOW
    return row


def _result(one=None, many=None, rowcount=0):
    result = MagicMock()
    result.fetchone.return_value = one
    result.fetchall.return_value = many or []
    result.rowcount = rowcount
    return result


@pytest.fixture
def db():
    return MagicMock()


class TestItemRepository:
    async def test_row_json_documents_are_decoded(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(one=_make_item_row()))
        item = await ItemRepository().get_item(db, "itm_1")
        assert item is not None
        assert item.pricing == {"price": 85000, "currency": "KRW"}
        assert item.specs == {"condition": "good"}
        assert item.location == {}
        assert item.tags == []

    async def test_get_missing(self, db) -> None:
        db.execute = AsyncMock(return_value=_result())
        assert await ItemRepository().get_item(db, "nope") is None

    async def test_insert_sends_json_text(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(one=_make_item_row()))
        item = MarketplaceItem(
            id="itm_1", seller_id="u-seller", title="댄스화", description="좋아요",
            category="shoes", status="available", pricing={"price": 85000},
            specs={"condition": "good"}, location={"region": "강남"}, images=[],
        )
        await ItemRepository().insert_item(db, item)
        params = db.execute.call_args.args[1]
        assert json.loads(params["location"]) == {"region": "강남"}
        assert "강남" in params["location"]

    async def test_update_rejects_unknown_columns(self, db) -> None:
        with pytest.raises(ValueError):
            await ItemRepository().update_item(db, "itm_1", {"seller_id": "u-x"})

    async def test_update_casts_jsonb_columns(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(one=_make_item_row()))
        await ItemRepository().update_item(db, "itm_1", {"pricing": {"price": 1}, "price": 1})
        sql, params = db.execute.call_args.args
        assert "pricing = CAST(:pricing AS JSONB)" in str(sql)
        assert "price = :price" in str(sql)
        assert params["pricing"] == '{"price": 1}'

    async def test_adjust_favorites(self, db) -> None:
        row = MagicMock(favorite_count=3)
        db.execute = AsyncMock(return_value=_result(one=row))
        assert await ItemRepository().adjust_favorites(db, "itm_1", 1) == 3

    async def test_list_uses_sort_specific_sql(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(many=[_make_item_row(id="a"), _make_item_row(id="b")]))
        items = await ItemRepository().list_items(
            db, sort="price_high", category=None, status="available", region=None,
            seller_id=None, query=None, cursor_key=5000, cursor_id="itm_9", limit=21,
        )
        assert [i.id for i in items] == ["a", "b"]
        sql = str(db.execute.call_args.args[0])
        assert "ORDER BY price DESC, id DESC" in sql
        assert "CAST(:cursor_key AS BIGINT)" in sql

    async def test_list_hidden_exclusion_is_switchable(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(many=[]))
        await ItemRepository().list_items(
            db, sort="latest", category=None, status=None, region=None,
            seller_id="u-seller", query=None, cursor_key=None, cursor_id=None, limit=21,
            include_hidden=True,
        )
        sql = str(db.execute.call_args.args[0])
        assert "CAST(:include_hidden AS BOOLEAN) OR status <> 'hidden'" in sql
        assert db.execute.call_args.args[1]["include_hidden"] is True

    async def test_in_bounds_params(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(many=[]))
        box = BoundingBox(northeast=Coordinates(38, 128), southwest=Coordinates(37, 126))
        await ItemRepository().list_in_bounds(db, box, "shoes", None, 100000)
        params = db.execute.call_args.args[1]
        assert (params["south"], params["north"], params["west"], params["east"]) == (37, 38, 126, 128)
        assert params["max_price"] == 100000


class TestInquiryRepository:
    async def test_transition_returns_none_when_nothing_matched(self, db) -> None:
        db.execute = AsyncMock(return_value=_result())
        result = await InquiryRepository().transition_status(
            db, "inq_1", expected_status="active", expected_version=2,
            new_status="completed", actor_id="u-seller", report_reason=None, changed_at=NOW,
        )
        assert result is None
        params = db.execute.call_args.args[1]
        assert params["expected_version"] == 2
        assert params["expected_status"] == "active"

    async def test_buyer_list_sql_by_sort(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(many=[]))
        await InquiryRepository().list_for_buyer(db, "u-buyer", None, "unread_first", 0, 21)
        assert "unread_buyer DESC" in str(db.execute.call_args.args[0])

    async def test_mark_messages_read_returns_rowcount(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(rowcount=4))
        assert await MessageRepository().mark_read_for(db, "inq_1", "u-buyer") == 4


class TestPostRepository:
    async def test_update_rejects_unknown_columns(self, db) -> None:
        with pytest.raises(ValueError):
            await PostRepository().update_post(db, "pst_1", {"author_id": "u-x"})

    async def test_update_builds_assignments(self, db) -> None:
        db.execute = AsyncMock(return_value=_result())
        assert await PostRepository().update_post(db, "pst_1", {"title": "t"}) is None
        sql, params = db.execute.call_args.args
        assert "SET title = :title" in str(sql)
        assert params == {"title": "t", "post_id": "pst_1"}

    async def test_count_by_category(self, db) -> None:
        rows = [MagicMock(category="qna", total=3), MagicMock(category="review", total=1)]
        db.execute = AsyncMock(return_value=_result(many=rows))
        assert await PostRepository().count_by_category(db) == {"qna": 3, "review": 1}
        assert "GROUP BY category" in str(db.execute.call_args.args[0])


def _make_comment_row(**kwargs):
    row = MagicMock()
    row.id = "cmt_1"
    row.post_id = "pst_1"
    row.author_id = "u-author"
    row.author_name = "발보아"
    row.content = kwargs.get("content", "좋아요")
    row.parent_id = None
    row.status = "active"
    row.like_count = kwargs.get("like_count", 0)
    row.edited_at = kwargs.get("edited_at", None)
    row.created_at = NOW
    row.updated_at = NOW
    return row


class TestCommentRepository:
    async def test_update_keeps_previous_content(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(one=_make_comment_row(content="새 내용", edited_at=NOW)))
        comment = await CommentRepository().update_content(db, "cmt_1", "새 내용")
        assert comment.content == "새 내용"
        assert comment.edited_at == NOW
        sql, params = db.execute.call_args.args
        assert "INSERT INTO comment_edits" in str(sql)
        assert params == {"comment_id": "cmt_1", "content": "새 내용"}

    async def test_duplicate_like_reports_false(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(rowcount=0))
        assert await CommentRepository().insert_like(db, "cmt_1", "u-x") is False
        assert "ON CONFLICT" in str(db.execute.call_args.args[0])

    async def test_unlike_reports_removal(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(rowcount=1))
        assert await CommentRepository().delete_like(db, "cmt_1", "u-x") is True

    async def test_adjust_like_count_returns_new_total(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(one=MagicMock(like_count=0)))
        assert await CommentRepository().adjust_like_count(db, "cmt_1", -1) == 0
        assert "GREATEST" in str(db.execute.call_args.args[0])

    async def test_adjust_like_count_missing_comment(self, db) -> None:
        db.execute = AsyncMock(return_value=_result())
        assert await CommentRepository().adjust_like_count(db, "cmt_x", 1) is None


def _make_studio_row(**kwargs):
    row = MagicMock()
    row.id = kwargs.get("id", "std_1")
    row.created_by = "u-owner"
    row.name = "스윙 스튜디오"
    row.description = None
    row.category = "studio"
    row.status = "active"
    row.location = kwargs.get("location", '{"address": "서울", "region": "강남"}')
    row.contact = None
    row.pricing = {"hourly": 20000}
    row.facilities = '{"parking": true}'
    row.operating_hours = {}
    row.images = None
    row.tags = ["린디"]
    row.keywords = ["스윙"]
    row.latitude = 37.5
    row.longitude = 127.0
    row.geohash = "wydm9qyc"
    row.view_count = 3
    row.favorite_count = 1
    row.verified = False
    row.featured = False
    row.created_at = NOW
    row.updated_at = NOW
    return row


class TestStudioRepository:
    async def test_row_json_documents_are_decoded(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(one=_make_studio_row()))
        studio = await StudioRepository().get_studio(db, "std_1")
        assert studio.location == {"address": "서울", "region": "강남"}
        assert studio.region == "강남"
        assert studio.facilities == {"parking": True}
        assert studio.contact == {}
        assert studio.images == []

    async def test_insert_sends_json_text(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(one=_make_studio_row()))
        studio = Studio(
            id="std_1", created_by="u-owner", name="스윙", category="studio", status="active",
            location={"address": "서울", "region": "강남"}, latitude=37.5, longitude=127.0,
        )
        await StudioRepository().insert_studio(db, studio)
        params = db.execute.call_args.args[1]
        assert json.loads(params["location"]) == {"address": "서울", "region": "강남"}
        assert params["operating_hours"] == "{}"

    async def test_update_rejects_unknown_columns(self, db) -> None:
        with pytest.raises(ValueError):
            await StudioRepository().update_studio(db, "std_1", {"created_by": "u-x"})

    async def test_update_casts_jsonb_columns(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(one=_make_studio_row()))
        await StudioRepository().update_studio(db, "std_1", {"facilities": {"wifi": True}, "name": "새 이름"})
        sql, params = db.execute.call_args.args
        assert "facilities = CAST(:facilities AS JSONB)" in str(sql)
        assert "name = :name" in str(sql)
        assert json.loads(params["facilities"]) == {"wifi": True}

    async def test_delete_reports_rowcount(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(rowcount=0))
        assert await StudioRepository().delete_studio(db, "std_x") is False

    async def test_list_pages_by_offset(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(many=[_make_studio_row()]))
        studios = await StudioRepository().list_studios(db, None, 40, 21)
        assert len(studios) == 1
        sql, params = db.execute.call_args.args
        assert "ORDER BY updated_at DESC, id DESC" in str(sql)
        assert params == {"category": None, "offset": 40, "limit": 21}

    async def test_search_passes_none_for_empty_categories(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(many=[]))
        await StudioRepository().search(db, "스윙", [], 500)
        sql, params = db.execute.call_args.args
        assert "strpos(" in str(sql)
        assert params == {"term": "스윙", "categories": None, "limit": 500}


class TestNotificationRepository:
    async def test_counts_default_to_zero(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(one=MagicMock(total=None, unread=None)))
        counts = await NotificationRepository().count_for_recipient(db, "u-me")
        assert (counts.total, counts.unread) == (0, 0)

    async def test_list_passes_unread_switch(self, db) -> None:
        db.execute = AsyncMock(return_value=_result())
        assert await NotificationRepository().list_for_recipient(db, "u-me", True, None, None, 21) == []
        sql, params = db.execute.call_args.args
        assert "CAST(:unread_only AS BOOLEAN)" in str(sql)
        assert params["unread_only"] is True
        assert params["limit"] == 21

    async def test_mark_all_read_returns_rowcount(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(rowcount=3))
        assert await NotificationRepository().mark_all_read(db, "u-me") == 3
