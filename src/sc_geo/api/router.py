"""Geo REST endpoints.

GET /geo/distance        — haversine distance between two points
GET /geo/nearest-region  — nearest named region center within 5 km
GET /geo/geohash         — geohash of a point
GET /geo/regions         — the region-center table
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.sc_common.errors import InvalidCoordinatesError
from src.sc_common.response import ApiResponse, success_response
from src.sc_gateway.auth.caller import Caller
from src.sc_gateway.auth.dependencies import get_current_caller
from src.sc_gateway.middleware.request_log import get_request_id
from src.sc_geo.api.schemas import (
    CoordinatesOut,
    DistanceResponse,
    GeohashResponse,
    NearestRegionResponse,
    RegionOut,
)
from src.sc_geo.domain.geo import (
    calculate_distance,
    format_distance,
    generate_geohash,
    is_in_seoul_area,
    is_valid_coordinates,
)
from src.sc_geo.domain.models import Coordinates
from src.sc_geo.domain.regions import find_nearest_region, get_region_center, get_region_table

router = APIRouter(prefix="/geo", tags=["geo"])


def _checked(lat: float, lng: float) -> Coordinates:
    coords = Coordinates(lat=lat, lng=lng)
    if not is_valid_coordinates(coords):
        raise InvalidCoordinatesError()
    return coords


def _ok(request: Request, data: object) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = get_request_id(request)
    return resp


@router.get("/distance")
async def distance(
    request: Request,
    caller: Annotated[Caller, Depends(get_current_caller)],
    from_lat: float = Query(...),
    from_lng: float = Query(...),
    to_lat: float = Query(...),
    to_lng: float = Query(...),
) -> ApiResponse:
    km = calculate_distance(_checked(from_lat, from_lng), _checked(to_lat, to_lng))
    return _ok(request, DistanceResponse(distance_km=km, distance_display=format_distance(km)).model_dump())


@router.get("/nearest-region")
async def nearest_region(
    request: Request,
    caller: Annotated[Caller, Depends(get_current_caller)],
    lat: float = Query(...),
    lng: float = Query(...),
) -> ApiResponse:
    coords = _checked(lat, lng)
    region = find_nearest_region(coords)
    center = get_region_center(region) if region else None
    data = NearestRegionResponse(
        region=region,
        center=CoordinatesOut.from_domain(center) if center else None,
        in_seoul_area=is_in_seoul_area(coords),
    )
    return _ok(request, data.model_dump())


@router.get("/geohash")
async def geohash(
    request: Request,
    caller: Annotated[Caller, Depends(get_current_caller)],
    lat: float = Query(...),
    lng: float = Query(...),
    precision: int = Query(8, ge=1, le=12),
) -> ApiResponse:
    value = generate_geohash(_checked(lat, lng), precision)
    return _ok(request, GeohashResponse(geohash=value, precision=precision).model_dump())


@router.get("/regions")
async def regions(
    request: Request,
    caller: Annotated[Caller, Depends(get_current_caller)],
) -> ApiResponse:
    table = get_region_table()
    items = [
        RegionOut(name=name, center=CoordinatesOut.from_domain(center)).model_dump()
        for name, center in table.items()
    ]
    return _ok(request, items)
