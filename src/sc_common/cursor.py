"""Composite cursor for keyset pagination over (created_at DESC, id DESC).

Cursor format: {"ts": "<created_at ISO>", "id": "<document id>"}
Encoded as Base64 JSON string.
"""

import base64
import json
from datetime import datetime


def cursor_encode(created_at: datetime, doc_id: str) -> str:
    """Encode composite cursor from the last document in a page."""
    payload = {"ts": created_at.isoformat(), "id": doc_id}
    return base64.b64encode(json.dumps(payload).encode()).decode()


def cursor_decode(cursor: str | None) -> tuple[datetime | None, str | None]:
    """Decode composite cursor -> (created_at, doc_id), or (None, None) on error."""
    if cursor is None:
        return None, None
    try:
        data = json.loads(base64.b64decode(cursor.encode()).decode())
        return datetime.fromisoformat(data["ts"]), str(data["id"])
    except Exception:
        return None, None


def keyset_encode(key: datetime | int, doc_id: str) -> str:
    """Cursor for a page ordered by an arbitrary (key, id) pair."""
    value = key.isoformat() if isinstance(key, datetime) else key
    payload = {"k": value, "id": doc_id}
    return base64.b64encode(json.dumps(payload).encode()).decode()


def keyset_decode(cursor: str | None) -> tuple[str | int | None, str | None]:
    """Decode (key, doc_id); datetime keys come back as ISO strings."""
    if cursor is None:
        return None, None
    try:
        data = json.loads(base64.b64decode(cursor.encode()).decode())
        key = data["k"]
        if not isinstance(key, (str, int)) or isinstance(key, bool):
            return None, None
        return key, str(data["id"])
    except Exception:
        return None, None
