"""Geo value objects — pure dataclasses, no business logic."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Coordinates:
    """Map-provider (Kakao) coordinate pair."""

    lat: float
    lng: float


@dataclass(frozen=True)
class GeoPoint:
    """Persistence-layer geopoint, named the way the document store names it."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class BoundingBox:
    northeast: Coordinates
    southwest: Coordinates

    def contains(self, point: Coordinates) -> bool:
        return (
            self.southwest.lat <= point.lat <= self.northeast.lat
            and self.southwest.lng <= point.lng <= self.northeast.lng
        )
