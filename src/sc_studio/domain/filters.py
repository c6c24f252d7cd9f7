"""Post-query filters for studio search.

Facility flags, area and price live inside the JSON documents, so they are
applied in memory after the SQL prefilter (status, category, search term).
"""

from collections.abc import Iterable
from dataclasses import dataclass

from src.sc_common.enums import StudioPriceType
from src.sc_geo.domain.geo import calculate_distance
from src.sc_geo.domain.models import Coordinates
from src.sc_studio.domain.models import Studio

# pricing documents are stored camelCase
_PRICE_KEYS = {
    StudioPriceType.HOURLY: "hourly",
    StudioPriceType.DAILY: "daily",
    StudioPriceType.MONTHLY: "monthly",
    StudioPriceType.DROP_IN: "dropIn",
}


@dataclass(frozen=True)
class StudioSearchFilters:
    categories: tuple[str, ...] = ()
    regions: tuple[str, ...] = ()
    has_parking: bool = False
    has_sound_system: bool = False
    has_air_conditioning: bool = False
    min_area: float | None = None
    max_area: float | None = None
    price_type: StudioPriceType | None = None
    min_price: float | None = None
    max_price: float | None = None
    center: Coordinates | None = None
    radius_km: float | None = None


def _within(value: float, low: float | None, high: float | None) -> bool:
    if low is not None and value < low:
        return False
    return high is None or value <= high


def _matches(studio: Studio, filters: StudioSearchFilters) -> bool:
    if filters.regions and studio.region not in filters.regions:
        return False

    facilities = studio.facilities
    if filters.has_parking and facilities.get("parking") is not True:
        return False
    if filters.has_sound_system and facilities.get("soundSystem") is not True:
        return False
    if filters.has_air_conditioning and facilities.get("airConditioning") is not True:
        return False

    if filters.min_area is not None or filters.max_area is not None:
        area = facilities.get("area")
        if area is None or not _within(area, filters.min_area, filters.max_area):
            return False

    if filters.price_type is not None:
        price = studio.pricing.get(_PRICE_KEYS[filters.price_type])
        if price is None or not _within(price, filters.min_price, filters.max_price):
            return False

    if filters.center is not None and filters.radius_km is not None:
        if studio.latitude is None or studio.longitude is None:
            return False
        here = Coordinates(lat=studio.latitude, lng=studio.longitude)
        if calculate_distance(filters.center, here) > filters.radius_km:
            return False
    return True


def apply_filters(studios: Iterable[Studio], filters: StudioSearchFilters) -> list[Studio]:
    """Studios passing every set filter, in their original order.

    A studio missing the attribute a filter tests (no area, no price of the
    requested type, no coordinates) does not pass that filter.
    """
    return [s for s in studios if _matches(s, filters)]
