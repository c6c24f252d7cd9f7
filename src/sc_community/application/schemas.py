"""Response schemas for sc_community. Request bodies are parsed by sc_validation."""

from pydantic import BaseModel

from src.sc_common.datetime_utils import iso_or_none
from src.sc_common.enums import POST_CATEGORY_LABELS, PostCategory
from src.sc_community.domain.models import Comment, Post


class PostOut(BaseModel):
    id: str
    author_id: str
    author_name: str
    category: str
    category_label: str | None
    title: str
    content: str
    tags: list[str]
    attachments: list[str]
    status: str
    view_count: int
    comment_count: int
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, post: Post) -> "PostOut":
        try:
            label = POST_CATEGORY_LABELS.get(PostCategory(post.category))
        except ValueError:
            label = None
        return cls(
            id=post.id,
            author_id=post.author_id,
            author_name=post.author_name,
            category=post.category,
            category_label=label,
            title=post.title,
            content=post.content,
            tags=list(post.tags),
            attachments=list(post.attachments),
            status=post.status,
            view_count=post.view_count,
            comment_count=post.comment_count,
            created_at=iso_or_none(post.created_at),
            updated_at=iso_or_none(post.updated_at),
        )


class PostListResponse(BaseModel):
    items: list[PostOut]
    next_cursor: str | None
    has_more: bool


class CommentOut(BaseModel):
    id: str
    post_id: str
    author_id: str
    author_name: str
    content: str
    parent_id: str | None
    like_count: int
    edited_at: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, comment: Comment) -> "CommentOut":
        return cls(
            id=comment.id,
            post_id=comment.post_id,
            author_id=comment.author_id,
            author_name=comment.author_name,
            content=comment.content,
            parent_id=comment.parent_id,
            like_count=comment.like_count,
            edited_at=iso_or_none(comment.edited_at),
            created_at=iso_or_none(comment.created_at),
        )


class CommentThreadOut(CommentOut):
    replies: list[CommentOut] = []


class CommentListResponse(BaseModel):
    post_id: str
    items: list[CommentThreadOut]
    total: int


class CommentLikeResponse(BaseModel):
    comment_id: str
    liked: bool
    like_count: int


class PostCountsResponse(BaseModel):
    """Active posts per category; every category is present, zero included."""

    counts: dict[str, int]
    total: int
