"""Named region centers (강남, 홍대, ...) used to label item locations.

The table is read once from ``settings.REGION_TABLE_PATH`` and then frozen
for the life of the process. ``find_nearest_region`` is a linear scan over
~15 entries; there is no spatial index.
"""

import json
import logging
from collections.abc import Iterator, Mapping
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

from config.settings import settings
from src.sc_common.errors import RegionTableError
from src.sc_geo.domain.geo import calculate_distance
from src.sc_geo.domain.models import Coordinates

logger = logging.getLogger("sc.geo")


class RegionTable(Mapping[str, Coordinates]):
    """Read-only mapping of region name -> center coordinates."""

    def __init__(self, centers: Mapping[str, Coordinates]) -> None:
        self._centers: Mapping[str, Coordinates] = MappingProxyType(dict(centers))

    def __getitem__(self, name: str) -> Coordinates:
        return self._centers[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._centers)

    def __len__(self) -> int:
        return len(self._centers)

    def center_of(self, name: str) -> Coordinates | None:
        return self._centers.get(name)

    def nearest(
        self, coordinates: Coordinates, max_distance_km: float
    ) -> tuple[str, float] | None:
        """Closest region within ``max_distance_km`` as (name, km), else None."""
        nearest_name: str | None = None
        min_distance = float("inf")
        for name, center in self._centers.items():
            distance = calculate_distance(coordinates, center)
            if distance < min_distance:
                min_distance = distance
                nearest_name = name

        if nearest_name is None or min_distance > max_distance_km:
            return None
        return nearest_name, min_distance


def load_region_table(path: Path) -> RegionTable:
    """Parse ``{"name": {"lat": .., "lng": ..}, ...}``.

    Raises:
        RegionTableError: file missing, not JSON, or an entry lacks numeric lat/lng.
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise RegionTableError(str(exc)) from exc

    if not isinstance(raw, dict):
        raise RegionTableError("top-level value must be an object")

    centers: dict[str, Coordinates] = {}
    for name, entry in raw.items():
        try:
            centers[name] = Coordinates(lat=float(entry["lat"]), lng=float(entry["lng"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise RegionTableError(f"invalid entry for {name!r}") from exc

    logger.info("Loaded %d region centers from %s", len(centers), path)
    return RegionTable(centers)


@lru_cache(maxsize=1)
def get_region_table() -> RegionTable:
    """Process-wide region table, loaded on first use (or at app startup)."""
    return load_region_table(settings.REGION_TABLE_PATH)


def get_region_center(region_name: str, table: RegionTable | None = None) -> Coordinates | None:
    region_table = table if table is not None else get_region_table()
    return region_table.center_of(region_name)


def find_nearest_region(
    coordinates: Coordinates,
    table: RegionTable | None = None,
    max_distance_km: float | None = None,
) -> str | None:
    """Name of the nearest region center within 5 km (configurable), else None."""
    limit = settings.NEAREST_REGION_MAX_KM if max_distance_km is None else max_distance_km
    region_table = table if table is not None else get_region_table()
    match = region_table.nearest(coordinates, limit)
    return match[0] if match else None
