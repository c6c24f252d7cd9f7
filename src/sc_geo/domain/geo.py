"""Coordinate conversion and distance math.

Kakao map coordinates (lat/lng) <-> stored geopoints (latitude/longitude),
haversine distance, search bounding boxes and geohash bucketing.
All functions are pure.
"""

import math
from collections.abc import Sequence

from src.sc_geo.domain.models import BoundingBox, Coordinates, GeoPoint

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE = 111.0

_GEOHASH_BASE32 = "0123456789bcdefghjkmnpqrstuvwxyz"

# Rough Seoul city limits
_SEOUL_NORTH = 37.7
_SEOUL_SOUTH = 37.4
_SEOUL_EAST = 127.3
_SEOUL_WEST = 126.7


def kakao_to_geopoint(coordinates: Coordinates) -> GeoPoint:
    return GeoPoint(latitude=coordinates.lat, longitude=coordinates.lng)


def geopoint_to_kakao(geopoint: GeoPoint) -> Coordinates:
    return Coordinates(lat=geopoint.latitude, lng=geopoint.longitude)


def _to_radians(degrees: float) -> float:
    return degrees * (math.pi / 180)


def calculate_distance(point1: Coordinates, point2: Coordinates) -> float:
    """Great-circle distance in km (haversine, R = 6371 km)."""
    d_lat = _to_radians(point2.lat - point1.lat)
    d_lng = _to_radians(point2.lng - point1.lng)

    a = (
        math.sin(d_lat / 2) * math.sin(d_lat / 2)
        + math.cos(_to_radians(point1.lat)) * math.cos(_to_radians(point2.lat))
        * math.sin(d_lng / 2) * math.sin(d_lng / 2)
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def calculate_bounding_box(center: Coordinates, radius_km: float) -> BoundingBox:
    """Approximate NE/SW rectangle around ``center`` for a SQL prefilter.

    Flat-Earth approximation: 1° latitude ≈ 111 km, 1° longitude ≈
    111 km * cos(latitude). The longitude span blows up towards the poles
    and the box is never clamped or wrapped at ±90/±180. Callers must run
    an exact ``calculate_distance`` filter on whatever the box returns.
    """
    lat_delta = radius_km / KM_PER_DEGREE
    lng_delta = radius_km / (KM_PER_DEGREE * math.cos(_to_radians(center.lat)))

    return BoundingBox(
        northeast=Coordinates(lat=center.lat + lat_delta, lng=center.lng + lng_delta),
        southwest=Coordinates(lat=center.lat - lat_delta, lng=center.lng - lng_delta),
    )


def generate_geohash(coordinates: Coordinates, precision: int = 8) -> str:
    """Base-32 geohash of ``precision`` characters.

    Bits alternate longitude/latitude starting with longitude; every five
    bits become one character.
    """
    lat, lng = coordinates.lat, coordinates.lng
    lat_min, lat_max = -90.0, 90.0
    lng_min, lng_max = -180.0, 180.0

    chars: list[str] = []
    bit = 0
    bits = 0
    even_bit = True

    while len(chars) < precision:
        if even_bit:
            mid = (lng_min + lng_max) / 2
            if lng >= mid:
                bit = (bit << 1) + 1
                lng_min = mid
            else:
                bit = bit << 1
                lng_max = mid
        else:
            mid = (lat_min + lat_max) / 2
            if lat >= mid:
                bit = (bit << 1) + 1
                lat_min = mid
            else:
                bit = bit << 1
                lat_max = mid

        even_bit = not even_bit
        bits += 1

        if bits == 5:
            chars.append(_GEOHASH_BASE32[bit])
            bits = 0
            bit = 0

    return "".join(chars)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_valid_coordinates(coordinates: Coordinates) -> bool:
    lat = getattr(coordinates, "lat", None)
    lng = getattr(coordinates, "lng", None)
    if not (_is_number(lat) and _is_number(lng)):
        return False
    if math.isnan(lat) or math.isnan(lng):  # type: ignore[arg-type]
        return False
    return -90 <= lat <= 90 and -180 <= lng <= 180  # type: ignore[operator]


def is_in_seoul_area(coordinates: Coordinates) -> bool:
    return (
        _SEOUL_SOUTH <= coordinates.lat <= _SEOUL_NORTH
        and _SEOUL_WEST <= coordinates.lng <= _SEOUL_EAST
    )


def calculate_center_point(coordinates: Sequence[Coordinates]) -> Coordinates:
    if not coordinates:
        raise ValueError("좌표 배열이 비어있습니다")

    total_lat = sum(c.lat for c in coordinates)
    total_lng = sum(c.lng for c in coordinates)
    return Coordinates(lat=total_lat / len(coordinates), lng=total_lng / len(coordinates))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_coordinates(coordinates: Coordinates, precision: int = 4) -> str:
    return f"{coordinates.lat:.{precision}f}, {coordinates.lng:.{precision}f}"


def format_distance(distance_km: float) -> str:
    """500m / 2.5km / 15km"""
    if distance_km < 1:
        return f"{_round_half_up(distance_km * 1000)}m"
    if distance_km < 10:
        return f"{distance_km:.1f}km"
    return f"{_round_half_up(distance_km)}km"
