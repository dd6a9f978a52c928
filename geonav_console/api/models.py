"""Shared data structures for the map view.

Points of interest, the stops handed to the route oracle and the ordered
route it returns all live here so the oracle client, the renderer and the
HTTP layer share a single definition.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


def _finite(value: Any, name: str) -> float:
    """Parse a coordinate; NaN and infinities cannot be sent as JSON."""
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"'{name}' must be a finite number")
    return number


class POICategory(Enum):
    """Closed set of POI categories, each with its console label."""

    RESTAURANT = ("restaurant", "Restaurant")
    HOTEL = ("hotel", "Hôtel")
    PARK = ("park", "Parc")
    MUSEUM = ("museum", "Musée")
    SHOP = ("shop", "Commerce")
    GAS_STATION = ("gas_station", "Station-service")
    PARKING = ("parking", "Stationnement")
    OTHER = ("other", "Autre")

    def __init__(self, key: str, label: str):
        self.key = key
        self.label = label

    @classmethod
    def parse(cls, value: Any) -> "POICategory":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip()
        for member in cls:
            if text.lower() in (member.key, member.label.lower(), member.name.lower()):
                return member
        raise ValueError(f"Unknown POI category: {value!r}")


class TransportMode(str, Enum):
    DRIVING = "driving"
    WALKING = "walking"
    TRANSIT = "transit"
    BICYCLING = "bicycling"
    FLIGHT = "flight"


@dataclass(frozen=True)
class GeoPoint:
    """A (latitude, longitude) pair in signed decimal degrees.

    No range validation is done; out-of-range values pass through.
    """

    lat: float
    lng: float

    def as_pair(self) -> Tuple[float, float]:
        return (self.lat, self.lng)

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeoPoint":
        try:
            return cls(lat=_finite(data["lat"], "lat"), lng=_finite(data["lng"], "lng"))
        except (TypeError, KeyError) as exc:
            raise ValueError("A point needs numeric 'lat' and 'lng'") from exc


@dataclass
class POI:
    """A named, geolocated place managed by the console."""

    id: str
    name: str
    category: POICategory
    latitude: float
    longitude: float
    description: str = ""
    address: Optional[str] = None
    image: Optional[str] = None

    @property
    def position(self) -> GeoPoint:
        return GeoPoint(self.latitude, self.longitude)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.key,
            "categoryLabel": self.category.label,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "description": self.description,
            "address": self.address,
            "image": self.image,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "POI":
        name = str(data.get("name") or "").strip()
        if not name:
            raise ValueError("A POI needs a name")
        try:
            latitude = _finite(data["latitude"], "latitude")
            longitude = _finite(data["longitude"], "longitude")
        except (TypeError, KeyError, ValueError) as exc:
            raise ValueError("A POI needs numeric 'latitude' and 'longitude'") from exc

        return cls(
            id=str(data["id"]),
            name=name,
            category=POICategory.parse(data.get("category", POICategory.OTHER)),
            latitude=latitude,
            longitude=longitude,
            description=str(data.get("description") or ""),
            address=data.get("address") or None,
            image=data.get("image") or None,
        )


@dataclass(frozen=True)
class Stop:
    """A selected POI as sent to the route oracle."""

    id: str
    name: str
    lat: float
    lng: float

    @classmethod
    def from_poi(cls, poi: POI) -> "Stop":
        return cls(id=poi.id, name=poi.name, lat=poi.latitude, lng=poi.longitude)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "lat": self.lat, "lng": self.lng}


@dataclass
class OrderedRoute:
    """Visiting order returned by the oracle (or the pass-through fallback).

    ``ordered_ids`` is not guaranteed to be a permutation of the stops that
    were sent: ids may be missing, repeated or unknown.
    """

    ordered_ids: List[str]
    explanation: str
    degraded: bool = False

    def to_dict(self) -> dict:
        return {
            "orderedIds": list(self.ordered_ids),
            "explanation": self.explanation,
            "degraded": self.degraded,
        }


ROUTE_STYLE = {"color": "#4f46e5", "weight": 5, "opacity": 0.7, "lineJoin": "round"}


@dataclass
class RenderedPath:
    """Polyline drawn for the active route: start point first."""

    points: List[GeoPoint]
    style: Dict[str, Any] = field(default_factory=lambda: dict(ROUTE_STYLE))

    def to_dict(self) -> dict:
        return {
            "points": [list(p.as_pair()) for p in self.points],
            "style": dict(self.style),
        }
