"""Unit tests for CommunityApplicationService using mock repositories."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from src.sc_common.cursor import cursor_decode, cursor_encode
from src.sc_common.errors import (
    CommentNotFoundError,
    EmptyUpdateError,
    PayloadValidationError,
    PostAccessDeniedError,
    PostNotFoundError,
)
from src.sc_community.application.service import CommunityApplicationService
from src.sc_community.domain.models import Comment, Post
from src.sc_gateway.auth.caller import Caller
from src.sc_notification.application.service import NotificationApplicationService

T0 = datetime(2026, 6, 1, 12, 0, tzinfo=UTC)
AUTHOR = Caller(uid="u-author", display_name="발보아")
OTHER = Caller(uid="u-other")
ADMIN = Caller(uid="u-admin", admin=True)


def _make_post(**kwargs) -> Post:
    defaults = dict(
        id="pst_1", author_id="u-author", author_name="발보아", category="general",
        title="첫 소셜 후기", content="재밌었어요", tags=["소셜"], created_at=T0, updated_at=T0,
    )
    defaults.update(kwargs)
    return Post(**defaults)


def _make_comment(**kwargs) -> Comment:
    defaults = dict(
        id="cmt_1", post_id="pst_1", author_id="u-other", author_name="익명",
        content="좋아요", created_at=T0,
    )
    defaults.update(kwargs)
    return Comment(**defaults)


@pytest.fixture
def db():
    return AsyncMock()


@pytest.fixture
def posts():
    return AsyncMock()


@pytest.fixture
def comments():
    return AsyncMock()


@pytest.fixture
def notices():
    repo = AsyncMock()
    repo.insert_notification.side_effect = lambda _db, notification: notification
    return repo


def _new_id(prefix: str) -> str:
    return f"{prefix}new"


def _service(posts, comments, notices=None) -> CommunityApplicationService:
    return CommunityApplicationService(
        post_repo=posts,
        comment_repo=comments,
        notifications=NotificationApplicationService(repo=notices or AsyncMock(), id_factory=_new_id),
        id_factory=_new_id,
    )


class TestCreatePost:
    async def test_creates_trimmed_post(self, db, posts, comments) -> None:
        posts.insert_post.side_effect = lambda _db, post: post
        result = await _service(posts, comments).create_post(
            db, AUTHOR, {"title": "  후기  ", "content": " 내용 ", "category": "review", "tags": [" 린디 ", ""]}
        )
        assert result.id == "pst_new"
        assert result.title == "후기"
        assert result.content == "내용"
        assert result.tags == ["린디"]
        assert result.author_name == "발보아"
        assert result.category_label == "후기"
        assert result.status == "active"
        db.commit.assert_awaited_once()

    async def test_invalid_payload(self, db, posts, comments) -> None:
        with pytest.raises(PayloadValidationError):
            await _service(posts, comments).create_post(db, AUTHOR, {"title": "", "content": "x", "category": "general"})
        posts.insert_post.assert_not_awaited()


class TestGetAndList:
    async def test_get_counts_view(self, db, posts, comments) -> None:
        posts.get_post.return_value = _make_post()
        result = await _service(posts, comments).get_post(db, "pst_1", increment_views=True)
        assert result.id == "pst_1"
        posts.increment_views.assert_awaited_once_with(db, "pst_1")

    async def test_deleted_post_not_found(self, db, posts, comments) -> None:
        posts.get_post.return_value = _make_post(status="deleted")
        with pytest.raises(PostNotFoundError):
            await _service(posts, comments).get_post(db, "pst_1")

    async def test_list_has_more(self, db, posts, comments) -> None:
        rows = [_make_post(id=f"pst_{i}", created_at=T0 - timedelta(minutes=i)) for i in range(3)]
        posts.list_posts.return_value = rows
        result = await _service(posts, comments).list_posts(db, limit=2)
        assert result.has_more is True
        assert [p.id for p in result.items] == ["pst_0", "pst_1"]
        assert cursor_decode(result.next_cursor) == (T0 - timedelta(minutes=1), "pst_1")
        posts.list_posts.assert_awaited_once_with(db, None, None, None, None, 3)

    async def test_list_passes_cursor(self, db, posts, comments) -> None:
        posts.list_posts.return_value = []
        result = await _service(posts, comments).list_posts(
            db, category="qna", cursor=cursor_encode(T0, "pst_9"), limit=20
        )
        assert result.has_more is False
        assert result.next_cursor is None
        posts.list_posts.assert_awaited_once_with(db, "qna", None, T0, "pst_9", 21)


class TestUpdateAndDelete:
    async def test_author_updates(self, db, posts, comments) -> None:
        posts.get_post.return_value = _make_post()
        posts.update_post.return_value = _make_post(title="수정됨")
        result = await _service(posts, comments).update_post(
            db, AUTHOR, "pst_1", {"title": " 수정됨 ", "category": "qna"}
        )
        assert result.title == "수정됨"
        posts.update_post.assert_awaited_once_with(db, "pst_1", {"title": "수정됨", "category": "qna"})

    async def test_other_user_cannot_update(self, db, posts, comments) -> None:
        posts.get_post.return_value = _make_post()
        with pytest.raises(PostAccessDeniedError) as exc:
            await _service(posts, comments).update_post(db, OTHER, "pst_1", {"title": "x"})
        assert exc.value.message == "수정 권한이 없습니다."

    async def test_empty_update(self, db, posts, comments) -> None:
        posts.get_post.return_value = _make_post()
        with pytest.raises(EmptyUpdateError):
            await _service(posts, comments).update_post(db, AUTHOR, "pst_1", {})

    async def test_admin_deletes(self, db, posts, comments) -> None:
        posts.get_post.return_value = _make_post()
        posts.set_status.return_value = _make_post(status="deleted")
        result = await _service(posts, comments).delete_post(db, ADMIN, "pst_1")
        assert result.status == "deleted"
        posts.set_status.assert_awaited_once_with(db, "pst_1", "deleted")

    async def test_other_user_cannot_delete(self, db, posts, comments) -> None:
        posts.get_post.return_value = _make_post()
        with pytest.raises(PostAccessDeniedError) as exc:
            await _service(posts, comments).delete_post(db, OTHER, "pst_1")
        assert exc.value.message == "삭제 권한이 없습니다."


class TestComments:
    async def test_top_level_comment(self, db, posts, comments) -> None:
        posts.get_post.return_value = _make_post()
        comments.insert_comment.side_effect = lambda _db, comment: comment
        result = await _service(posts, comments).create_comment(db, OTHER, "pst_1", {"content": " 좋아요 "})
        assert result.id == "cmt_new"
        assert result.content == "좋아요"
        assert result.parent_id is None
        assert result.author_name == "익명"
        posts.adjust_comment_count.assert_awaited_once_with(db, "pst_1", 1)
        db.commit.assert_awaited_once()

    async def test_reply_to_reply_attaches_to_top_level(self, db, posts, comments) -> None:
        posts.get_post.return_value = _make_post()
        comments.get_comment.return_value = _make_comment(id="cmt_2", parent_id="cmt_1")
        comments.insert_comment.side_effect = lambda _db, comment: comment
        result = await _service(posts, comments).create_comment(
            db, AUTHOR, "pst_1", {"content": "답글", "parentId": "cmt_2"}
        )
        assert result.parent_id == "cmt_1"

    async def test_parent_on_other_post(self, db, posts, comments) -> None:
        posts.get_post.return_value = _make_post()
        comments.get_comment.return_value = _make_comment(post_id="pst_2")
        with pytest.raises(CommentNotFoundError):
            await _service(posts, comments).create_comment(
                db, AUTHOR, "pst_1", {"content": "답글", "parentId": "cmt_1"}
            )
        comments.insert_comment.assert_not_awaited()

    async def test_post_must_be_active(self, db, posts, comments) -> None:
        posts.get_post.return_value = _make_post(status="hidden")
        with pytest.raises(PostNotFoundError):
            await _service(posts, comments).create_comment(db, AUTHOR, "pst_1", {"content": "x"})

    async def test_comment_too_long(self, db, posts, comments) -> None:
        posts.get_post.return_value = _make_post()
        with pytest.raises(PayloadValidationError) as exc:
            await _service(posts, comments).create_comment(db, AUTHOR, "pst_1", {"content": "a" * 1001})
        assert exc.value.errors == ["content must be 1000 characters or less"]

    async def test_delete_comment(self, db, posts, comments) -> None:
        comments.get_comment.return_value = _make_comment()
        comments.set_status.return_value = _make_comment(status="deleted")
        await _service(posts, comments).delete_comment(db, OTHER, "pst_1", "cmt_1")
        posts.adjust_comment_count.assert_awaited_once_with(db, "pst_1", -1)

    async def test_delete_comment_denied(self, db, posts, comments) -> None:
        comments.get_comment.return_value = _make_comment()
        with pytest.raises(PostAccessDeniedError):
            await _service(posts, comments).delete_comment(db, AUTHOR, "pst_1", "cmt_1")

    async def test_list_groups_threads(self, db, posts, comments) -> None:
        posts.get_post.return_value = _make_post()
        comments.list_for_post.return_value = [
            _make_comment(id="c1", created_at=T0),
            _make_comment(id="c2", created_at=T0 + timedelta(minutes=1)),
            _make_comment(id="r1", parent_id="c1", created_at=T0 + timedelta(minutes=2)),
            _make_comment(id="orphan", parent_id="gone", created_at=T0 + timedelta(minutes=3)),
        ]
        result = await _service(posts, comments).list_comments(db, "pst_1")
        assert [t.id for t in result.items] == ["c1", "c2", "orphan"]
        assert [r.id for r in result.items[0].replies] == ["r1"]
        assert result.items[1].replies == []
        assert result.total == 4


class TestPostCounts:
    async def test_every_category_present(self, db, posts, comments) -> None:
        posts.count_by_category.return_value = {"qna": 3, "review": 1}
        result = await _service(posts, comments).post_counts(db)
        assert result.counts == {
            "general": 0, "qna": 3, "event": 0, "marketplace": 0, "lesson": 0, "review": 1,
        }
        assert result.total == 4


class TestCommentNotifications:
    async def test_new_comment_notifies_post_author(self, db, posts, comments, notices) -> None:
        posts.get_post.return_value = _make_post()
        comments.insert_comment.side_effect = lambda _db, comment: comment
        await _service(posts, comments, notices).create_comment(
            db, Caller(uid="u-other", display_name="린디"), "pst_1", {"content": "멋져요"}
        )
        notification = notices.insert_notification.call_args.args[1]
        assert notification.recipient_id == "u-author"
        assert notification.type == "new_comment"
        assert notification.title == "새 댓글"
        assert notification.message == "린디님이 회원님의 게시글에 댓글을 남겼습니다."
        assert notification.related_user_id == "u-other"
        assert notification.action_url == "/community/pst_1#comment-cmt_new"
        db.commit.assert_awaited_once()

    async def test_own_post_comment_is_silent(self, db, posts, comments, notices) -> None:
        posts.get_post.return_value = _make_post()
        comments.insert_comment.side_effect = lambda _db, comment: comment
        await _service(posts, comments, notices).create_comment(db, AUTHOR, "pst_1", {"content": "감사"})
        notices.insert_notification.assert_not_awaited()

    async def test_reply_notifies_parent_author(self, db, posts, comments, notices) -> None:
        posts.get_post.return_value = _make_post()
        comments.get_comment.return_value = _make_comment(id="cmt_2", parent_id="cmt_1", author_id="u-third")
        comments.insert_comment.side_effect = lambda _db, comment: comment
        await _service(posts, comments, notices).create_comment(
            db, AUTHOR, "pst_1", {"content": "답글", "parentId": "cmt_2"}
        )
        notices.insert_notification.assert_awaited_once()
        notification = notices.insert_notification.call_args.args[1]
        assert notification.recipient_id == "u-third"
        assert notification.type == "comment_reply"
        assert notification.message == "발보아님이 회원님의 댓글에 답글을 남겼습니다."

    async def test_failed_notification_rolls_back_comment(self, db, posts, comments, notices) -> None:
        posts.get_post.return_value = _make_post()
        comments.insert_comment.side_effect = lambda _db, comment: comment
        notices.insert_notification.side_effect = RuntimeError("db down")
        with pytest.raises(RuntimeError):
            await _service(posts, comments, notices).create_comment(db, OTHER, "pst_1", {"content": "x"})
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()


class TestUpdateComment:
    async def test_author_edits(self, db, posts, comments) -> None:
        comments.get_comment.return_value = _make_comment()
        comments.update_content.return_value = _make_comment(content="고쳤어요", edited_at=T0)
        result = await _service(posts, comments).update_comment(
            db, OTHER, "pst_1", "cmt_1", {"content": "  고쳤어요  "}
        )
        comments.update_content.assert_awaited_once_with(db, "cmt_1", "고쳤어요")
        assert result.content == "고쳤어요"
        assert result.edited_at == T0.isoformat()
        db.commit.assert_awaited_once()

    async def test_other_user_cannot_edit(self, db, posts, comments) -> None:
        comments.get_comment.return_value = _make_comment()
        with pytest.raises(PostAccessDeniedError) as exc:
            await _service(posts, comments).update_comment(db, AUTHOR, "pst_1", "cmt_1", {"content": "x"})
        assert exc.value.message == "수정 권한이 없습니다."
        comments.update_content.assert_not_awaited()

    async def test_blank_content_rejected(self, db, posts, comments) -> None:
        comments.get_comment.return_value = _make_comment()
        with pytest.raises(PayloadValidationError):
            await _service(posts, comments).update_comment(db, OTHER, "pst_1", "cmt_1", {"content": "   "})
        comments.update_content.assert_not_awaited()

    async def test_deleted_comment_not_found(self, db, posts, comments) -> None:
        comments.get_comment.return_value = _make_comment(status="deleted")
        with pytest.raises(CommentNotFoundError):
            await _service(posts, comments).update_comment(db, OTHER, "pst_1", "cmt_1", {"content": "x"})


class TestCommentLikes:
    async def test_first_like_counts_and_notifies(self, db, posts, comments, notices) -> None:
        comments.get_comment.return_value = _make_comment(like_count=2)
        comments.insert_like.return_value = True
        comments.adjust_like_count.return_value = 3
        result = await _service(posts, comments, notices).like_comment(db, AUTHOR, "pst_1", "cmt_1")
        assert (result.liked, result.like_count) == (True, 3)
        comments.adjust_like_count.assert_awaited_once_with(db, "cmt_1", 1)
        notification = notices.insert_notification.call_args.args[1]
        assert notification.recipient_id == "u-other"
        assert notification.type == "comment_like"
        assert notification.message == "발보아님이 회원님의 댓글을 좋아합니다."

    async def test_repeated_like_changes_nothing(self, db, posts, comments, notices) -> None:
        comments.get_comment.return_value = _make_comment(like_count=2)
        comments.insert_like.return_value = False
        result = await _service(posts, comments, notices).like_comment(db, AUTHOR, "pst_1", "cmt_1")
        assert (result.liked, result.like_count) == (True, 2)
        comments.adjust_like_count.assert_not_awaited()
        notices.insert_notification.assert_not_awaited()

    async def test_liking_own_comment_is_silent(self, db, posts, comments, notices) -> None:
        comments.get_comment.return_value = _make_comment(author_id="u-author")
        comments.insert_like.return_value = True
        comments.adjust_like_count.return_value = 1
        await _service(posts, comments, notices).like_comment(db, AUTHOR, "pst_1", "cmt_1")
        notices.insert_notification.assert_not_awaited()

    async def test_unlike(self, db, posts, comments) -> None:
        comments.get_comment.return_value = _make_comment(like_count=3)
        comments.delete_like.return_value = True
        comments.adjust_like_count.return_value = 2
        result = await _service(posts, comments).unlike_comment(db, AUTHOR, "pst_1", "cmt_1")
        assert (result.liked, result.like_count) == (False, 2)
        comments.adjust_like_count.assert_awaited_once_with(db, "cmt_1", -1)

    async def test_unlike_without_like(self, db, posts, comments) -> None:
        comments.get_comment.return_value = _make_comment(like_count=0)
        comments.delete_like.return_value = False
        result = await _service(posts, comments).unlike_comment(db, AUTHOR, "pst_1", "cmt_1")
        assert result.like_count == 0
        comments.adjust_like_count.assert_not_awaited()

    async def test_like_on_other_post(self, db, posts, comments) -> None:
        comments.get_comment.return_value = _make_comment(post_id="pst_2")
        with pytest.raises(CommentNotFoundError):
            await _service(posts, comments).like_comment(db, AUTHOR, "pst_1", "cmt_1")
        comments.insert_like.assert_not_awaited()
