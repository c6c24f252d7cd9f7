"""Unit tests for sc_common.cursor."""

import base64
import json
from datetime import UTC, datetime

from src.sc_common.cursor import cursor_decode, cursor_encode, keyset_decode, keyset_encode


def _raw(payload: object) -> str:
    return base64.b64encode(json.dumps(payload).encode()).decode()


class TestCreatedAtCursor:
    def test_encode_decode(self) -> None:
        ts = datetime(2026, 3, 1, 12, 30, tzinfo=UTC)
        assert cursor_decode(cursor_encode(ts, "pst_1")) == (ts, "pst_1")

    def test_none(self) -> None:
        assert cursor_decode(None) == (None, None)

    def test_garbage(self) -> None:
        assert cursor_decode("!!!not-base64") == (None, None)
        assert cursor_decode(_raw({"ts": "yesterday", "id": "x"})) == (None, None)


class TestKeysetCursor:
    def test_datetime_key_comes_back_as_iso(self) -> None:
        ts = datetime(2026, 3, 1, tzinfo=UTC)
        assert keyset_decode(keyset_encode(ts, "itm_1")) == (ts.isoformat(), "itm_1")

    def test_int_key(self) -> None:
        assert keyset_decode(keyset_encode(85000, "itm_2")) == (85000, "itm_2")

    def test_rejects_bool_and_other_types(self) -> None:
        assert keyset_decode(_raw({"k": True, "id": "x"})) == (None, None)
        assert keyset_decode(_raw({"k": [1], "id": "x"})) == (None, None)
        assert keyset_decode(_raw({"k": 1.5, "id": "x"})) == (None, None)

    def test_missing_id(self) -> None:
        assert keyset_decode(_raw({"k": 1})) == (None, None)

    def test_none(self) -> None:
        assert keyset_decode(None) == (None, None)
