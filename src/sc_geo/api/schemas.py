"""Pydantic schemas for the /geo endpoints."""

from pydantic import BaseModel

from src.sc_geo.domain.models import Coordinates


class CoordinatesOut(BaseModel):
    lat: float
    lng: float

    @classmethod
    def from_domain(cls, c: Coordinates) -> "CoordinatesOut":
        return cls(lat=c.lat, lng=c.lng)


class DistanceResponse(BaseModel):
    distance_km: float
    distance_display: str


class NearestRegionResponse(BaseModel):
    region: str | None
    center: CoordinatesOut | None
    in_seoul_area: bool


class GeohashResponse(BaseModel):
    geohash: str
    precision: int


class RegionOut(BaseModel):
    name: str
    center: CoordinatesOut
