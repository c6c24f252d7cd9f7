"""Unit tests for the region table and nearest-region lookup."""

import json
from pathlib import Path

import pytest

from src.sc_common.errors import RegionTableError
from src.sc_geo.domain.models import Coordinates
from src.sc_geo.domain.regions import (
    RegionTable,
    find_nearest_region,
    get_region_center,
    get_region_table,
    load_region_table,
)


def _table() -> RegionTable:
    return RegionTable(
        {
            "강남": Coordinates(37.5173, 127.0473),
            "홍대": Coordinates(37.5563, 126.9236),
        }
    )


class TestRegionTable:
    def test_is_read_only_mapping(self) -> None:
        table = _table()
        assert len(table) == 2
        assert set(table) == {"강남", "홍대"}
        with pytest.raises(TypeError):
            table["부산"] = Coordinates(35.1, 129.0)  # type: ignore[index]

    def test_center_of_unknown(self) -> None:
        assert _table().center_of("부산") is None

    def test_nearest_returns_name_and_distance(self) -> None:
        name, km = _table().nearest(Coordinates(37.518, 127.048), 5.0)  # type: ignore[misc]
        assert name == "강남"
        assert km < 1

    def test_nearest_outside_limit(self) -> None:
        assert _table().nearest(Coordinates(35.1796, 129.0756), 5.0) is None

    def test_empty_table(self) -> None:
        assert RegionTable({}).nearest(Coordinates(0, 0), 5.0) is None


class TestFindNearestRegion:
    def test_uses_given_table(self) -> None:
        assert find_nearest_region(Coordinates(37.5565, 126.9240), table=_table()) == "홍대"

    def test_custom_limit(self) -> None:
        # ~5.9 km from either center
        point = Coordinates(37.5368, 126.9855)
        assert find_nearest_region(point, table=_table()) is None
        assert find_nearest_region(point, table=_table(), max_distance_km=20) is not None

    def test_bundled_table_has_gangnam(self) -> None:
        assert get_region_center("강남") == Coordinates(37.5173, 127.0473)
        assert find_nearest_region(Coordinates(37.5174, 127.0474)) == "강남"
        assert len(get_region_table()) >= 10


class TestLoadRegionTable:
    def test_loads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "regions.json"
        path.write_text(json.dumps({"A": {"lat": 1, "lng": 2}}), encoding="utf-8")
        table = load_region_table(path)
        assert table["A"] == Coordinates(1.0, 2.0)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(RegionTableError) as exc:
            load_region_table(tmp_path / "nope.json")
        assert exc.value.code == 6002

    def test_not_json(self, tmp_path: Path) -> None:
        path = tmp_path / "regions.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(RegionTableError):
            load_region_table(path)

    def test_top_level_must_be_object(self, tmp_path: Path) -> None:
        path = tmp_path / "regions.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(RegionTableError):
            load_region_table(path)

    def test_entry_without_lng(self, tmp_path: Path) -> None:
        path = tmp_path / "regions.json"
        path.write_text(json.dumps({"A": {"lat": 1}}), encoding="utf-8")
        with pytest.raises(RegionTableError):
            load_region_table(path)
