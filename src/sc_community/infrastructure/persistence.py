"""Post and comment repositories — raw text() SQL over ``posts`` / ``comments``."""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sc_community.domain.models import Comment, Post

_POST_COLUMNS = """
    id, author_id, author_name, category, title, content, tags, attachments,
    status, view_count, comment_count, created_at, updated_at
"""

_COMMENT_COLUMNS = """
    id, post_id, author_id, author_name, content, parent_id, status,
    like_count, edited_at, created_at, updated_at
"""

# Only these may be written through update_post
_UPDATABLE_POST_COLUMNS = frozenset({"title", "content", "category", "tags"})

_INSERT_POST_SQL = text(f"""
    INSERT INTO posts
        (id, author_id, author_name, category, title, content, tags, attachments, status)
    VALUES
        (:id, :author_id, :author_name, :category, :title, :content, :tags, :attachments, :status)
    RETURNING {_POST_COLUMNS}
""")

_GET_POST_SQL = text(f"SELECT {_POST_COLUMNS} FROM posts WHERE id = :post_id")

_SET_POST_STATUS_SQL = text(f"""
    UPDATE posts SET status = :status
    WHERE id = :post_id
    RETURNING {_POST_COLUMNS}
""")

_INCREMENT_VIEWS_SQL = text("UPDATE posts SET view_count = view_count + 1 WHERE id = :post_id")

# comment_count never goes below zero
_ADJUST_COMMENTS_SQL = text("""
    UPDATE posts SET comment_count = GREATEST(comment_count + :delta, 0)
    WHERE id = :post_id
""")

_LIST_POSTS_SQL = text(f"""
    SELECT {_POST_COLUMNS}
    FROM posts
    WHERE status = 'active'
      AND (CAST(:category AS TEXT) IS NULL OR category = CAST(:category AS TEXT))
      AND (CAST(:author_id AS TEXT) IS NULL OR author_id = CAST(:author_id AS TEXT))
      AND (
          CAST(:cursor_ts AS TIMESTAMPTZ) IS NULL
          OR (created_at, id) < (CAST(:cursor_ts AS TIMESTAMPTZ), CAST(:cursor_id AS TEXT))
      )
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_COUNT_BY_CATEGORY_SQL = text("""
    SELECT category, COUNT(*) AS total
    FROM posts
    WHERE status = 'active'
    GROUP BY category
""")

_INSERT_COMMENT_SQL = text(f"""
    INSERT INTO comments (id, post_id, author_id, author_name, content, parent_id, status)
    VALUES (:id, :post_id, :author_id, :author_name, :content, :parent_id, :status)
    RETURNING {_COMMENT_COLUMNS}
""")

_GET_COMMENT_SQL = text(f"SELECT {_COMMENT_COLUMNS} FROM comments WHERE id = :comment_id")

_SET_COMMENT_STATUS_SQL = text(f"""
    UPDATE comments SET status = :status
    WHERE id = :comment_id
    RETURNING {_COMMENT_COLUMNS}
""")

_LIST_COMMENTS_SQL = text(f"""
    SELECT {_COMMENT_COLUMNS}
    FROM comments
    WHERE post_id = :post_id AND status = 'active'
    ORDER BY created_at ASC, id ASC
""")

# The CTE reads the pre-update snapshot, so comment_edits keeps the old text
_UPDATE_COMMENT_CONTENT_SQL = text(f"""
    WITH previous AS (
        INSERT INTO comment_edits (comment_id, content)
        SELECT id, content FROM comments WHERE id = :comment_id
    )
    UPDATE comments SET content = :content, edited_at = NOW()
    WHERE id = :comment_id
    RETURNING {_COMMENT_COLUMNS}
""")

_INSERT_LIKE_SQL = text("""
    INSERT INTO comment_likes (comment_id, user_id)
    VALUES (:comment_id, :user_id)
    ON CONFLICT (comment_id, user_id) DO NOTHING
""")

_DELETE_LIKE_SQL = text("""
    DELETE FROM comment_likes
    WHERE comment_id = :comment_id AND user_id = :user_id
""")

_ADJUST_LIKES_SQL = text("""
    UPDATE comments SET like_count = GREATEST(like_count + :delta, 0)
    WHERE id = :comment_id
    RETURNING like_count
""")


def _row_to_post(row: Any) -> Post:
    return Post(
        id=row.id,
        author_id=row.author_id,
        author_name=row.author_name,
        category=row.category,
        title=row.title,
        content=row.content,
        tags=list(row.tags or []),
        attachments=list(row.attachments or []),
        status=row.status,
        view_count=row.view_count,
        comment_count=row.comment_count,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_comment(row: Any) -> Comment:
    return Comment(
        id=row.id,
        post_id=row.post_id,
        author_id=row.author_id,
        author_name=row.author_name,
        content=row.content,
        parent_id=row.parent_id,
        status=row.status,
        like_count=row.like_count,
        edited_at=row.edited_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class PostRepository:
    async def insert_post(self, db: AsyncSession, post: Post) -> Post:
        result = await db.execute(
            _INSERT_POST_SQL,
            {
                "id": post.id,
                "author_id": post.author_id,
                "author_name": post.author_name,
                "category": post.category,
                "title": post.title,
                "content": post.content,
                "tags": list(post.tags),
                "attachments": list(post.attachments),
                "status": post.status,
            },
        )
        return _row_to_post(result.fetchone())

    async def get_post(self, db: AsyncSession, post_id: str) -> Post | None:
        row = (await db.execute(_GET_POST_SQL, {"post_id": post_id})).fetchone()
        return _row_to_post(row) if row else None

    async def update_post(self, db: AsyncSession, post_id: str, fields: dict[str, Any]) -> Post | None:
        unknown = set(fields) - _UPDATABLE_POST_COLUMNS
        if unknown:
            raise ValueError(f"Not updatable: {sorted(unknown)}")
        assignments = ", ".join(f"{col} = :{col}" for col in sorted(fields))
        sql = text(f"""
            UPDATE posts SET {assignments}
            WHERE id = :post_id
            RETURNING {_POST_COLUMNS}
        """)
        row = (await db.execute(sql, {**fields, "post_id": post_id})).fetchone()
        return _row_to_post(row) if row else None

    async def set_status(self, db: AsyncSession, post_id: str, status: str) -> Post | None:
        row = (await db.execute(_SET_POST_STATUS_SQL, {"post_id": post_id, "status": status})).fetchone()
        return _row_to_post(row) if row else None

    async def increment_views(self, db: AsyncSession, post_id: str) -> None:
        await db.execute(_INCREMENT_VIEWS_SQL, {"post_id": post_id})

    async def adjust_comment_count(self, db: AsyncSession, post_id: str, delta: int) -> None:
        await db.execute(_ADJUST_COMMENTS_SQL, {"post_id": post_id, "delta": delta})

    async def list_posts(
        self,
        db: AsyncSession,
        category: str | None,
        author_id: str | None,
        cursor_ts: datetime | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Post]:
        result = await db.execute(
            _LIST_POSTS_SQL,
            {
                "category": category,
                "author_id": author_id,
                "cursor_ts": cursor_ts,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_post(row) for row in result.fetchall()]

    async def count_by_category(self, db: AsyncSession) -> dict[str, int]:
        result = await db.execute(_COUNT_BY_CATEGORY_SQL)
        return {row.category: row.total for row in result.fetchall()}


class CommentRepository:
    async def insert_comment(self, db: AsyncSession, comment: Comment) -> Comment:
        result = await db.execute(
            _INSERT_COMMENT_SQL,
            {
                "id": comment.id,
                "post_id": comment.post_id,
                "author_id": comment.author_id,
                "author_name": comment.author_name,
                "content": comment.content,
                "parent_id": comment.parent_id,
                "status": comment.status,
            },
        )
        return _row_to_comment(result.fetchone())

    async def get_comment(self, db: AsyncSession, comment_id: str) -> Comment | None:
        row = (await db.execute(_GET_COMMENT_SQL, {"comment_id": comment_id})).fetchone()
        return _row_to_comment(row) if row else None

    async def set_status(self, db: AsyncSession, comment_id: str, status: str) -> Comment | None:
        row = (
            await db.execute(_SET_COMMENT_STATUS_SQL, {"comment_id": comment_id, "status": status})
        ).fetchone()
        return _row_to_comment(row) if row else None

    async def list_for_post(self, db: AsyncSession, post_id: str) -> list[Comment]:
        result = await db.execute(_LIST_COMMENTS_SQL, {"post_id": post_id})
        return [_row_to_comment(row) for row in result.fetchall()]

    async def update_content(self, db: AsyncSession, comment_id: str, content: str) -> Comment | None:
        row = (
            await db.execute(_UPDATE_COMMENT_CONTENT_SQL, {"comment_id": comment_id, "content": content})
        ).fetchone()
        return _row_to_comment(row) if row else None

    async def insert_like(self, db: AsyncSession, comment_id: str, user_id: str) -> bool:
        """False when the user already liked the comment."""
        result = await db.execute(_INSERT_LIKE_SQL, {"comment_id": comment_id, "user_id": user_id})
        return result.rowcount > 0

    async def delete_like(self, db: AsyncSession, comment_id: str, user_id: str) -> bool:
        result = await db.execute(_DELETE_LIKE_SQL, {"comment_id": comment_id, "user_id": user_id})
        return result.rowcount > 0

    async def adjust_like_count(self, db: AsyncSession, comment_id: str, delta: int) -> int | None:
        row = (
            await db.execute(_ADJUST_LIKES_SQL, {"comment_id": comment_id, "delta": delta})
        ).fetchone()
        return row.like_count if row else None
