# geonav_console/api/services/map_service.py
"""Service layer for map-related operations."""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from geonav_console.api.config import get_map_config
from geonav_console.api.models import POI, ROUTE_STYLE, GeoPoint, OrderedRoute, RenderedPath

logger = logging.getLogger(__name__)

ROUTE_PADDING = (50, 50)
RECENTER_ZOOM = 16
FOCUS_ZOOM = 17


class MapSurface(ABC):
    """Rendering primitives the renderer drives.

    Subclasses decide what drawing means; ``MapState`` keeps everything in
    memory so it can be published to the browser.
    """

    @abstractmethod
    def add_marker(self, marker_id: str, position: GeoPoint, payload: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def remove_marker(self, marker_id: str) -> None:
        ...

    @abstractmethod
    def marker_ids(self) -> List[str]:
        ...

    @abstractmethod
    def draw_polyline(self, points: Sequence[GeoPoint], style: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def remove_polyline(self) -> None:
        ...

    @abstractmethod
    def fit_bounds(self, bounds: Dict[str, float], padding: Tuple[int, int]) -> None:
        ...

    @abstractmethod
    def fly_to(self, position: GeoPoint, zoom: int) -> None:
        ...

    @abstractmethod
    def set_user_marker(self, position: GeoPoint) -> None:
        ...

    @abstractmethod
    def move_user_marker(self, position: GeoPoint) -> None:
        ...

    @abstractmethod
    def has_user_marker(self) -> bool:
        ...

    @abstractmethod
    def show_popup(self, marker_id: str) -> None:
        ...


class MapState(MapSurface):
    """In-memory map surface published to the console front-end."""

    def __init__(self, center: Optional[GeoPoint] = None, zoom: Optional[int] = None):
        cfg = get_map_config()
        if center is None:
            center = GeoPoint(cfg["default_center"]["lat"], cfg["default_center"]["lng"])
        self.center = center
        self.zoom = zoom if zoom is not None else cfg["default_zoom"]
        self.fitted_bounds: Optional[Dict[str, Any]] = None
        self.markers: Dict[str, Dict[str, Any]] = {}
        self.user_marker: Optional[GeoPoint] = None
        self.user_marker_created = 0
        self.polyline: Optional[Dict[str, Any]] = None
        self.open_popup: Optional[str] = None
        self._listeners: List[Callable[[Dict[str, Any]], None]] = []

    def subscribe(self, listener: Callable[[Dict[str, Any]], None]) -> None:
        self._listeners.append(listener)

    def publish(self) -> None:
        """Push the current snapshot to every listener."""
        snapshot = self.snapshot()
        for listener in self._listeners:
            listener(snapshot)

    def add_marker(self, marker_id, position, payload):
        self.markers[marker_id] = {"id": marker_id, "position": position.to_dict(), **payload}

    def remove_marker(self, marker_id):
        self.markers.pop(marker_id, None)
        if self.open_popup == marker_id:
            self.open_popup = None

    def marker_ids(self):
        return list(self.markers)

    def draw_polyline(self, points, style):
        self.polyline = {"points": [list(p.as_pair()) for p in points], "style": dict(style)}

    def remove_polyline(self):
        self.polyline = None

    def fit_bounds(self, bounds, padding):
        self.fitted_bounds = {"bounds": dict(bounds), "padding": list(padding)}
        self.center = GeoPoint(
            (bounds["north"] + bounds["south"]) / 2,
            (bounds["east"] + bounds["west"]) / 2,
        )

    def fly_to(self, position, zoom):
        self.center = position
        self.zoom = zoom
        self.fitted_bounds = None

    def set_user_marker(self, position):
        self.user_marker = position
        self.user_marker_created += 1

    def move_user_marker(self, position):
        self.user_marker = position

    def has_user_marker(self):
        return self.user_marker is not None

    def show_popup(self, marker_id):
        self.open_popup = marker_id if marker_id in self.markers else None

    def snapshot(self) -> Dict[str, Any]:
        return {
            "viewport": {
                "center": self.center.to_dict(),
                "zoom": self.zoom,
                "fitBounds": self.fitted_bounds,
            },
            "markers": list(self.markers.values()),
            "userMarker": self.user_marker.to_dict() if self.user_marker else None,
            "route": self.polyline,
            "openPopup": self.open_popup,
        }


class MapRenderer:
    """Keeps a map surface in step with the POI set and the active route."""

    def __init__(self, surface: MapSurface):
        self.surface = surface
        self.lock = threading.RLock()
        self.active_path: Optional[RenderedPath] = None

    def sync_markers(self, pois: Iterable[POI]) -> List[str]:
        """Rebuild every POI marker from scratch.

        Args:
            pois: Current POI set

        Returns:
            Marker ids after the rebuild
        """
        with self.lock:
            for marker_id in self.surface.marker_ids():
                self.surface.remove_marker(marker_id)
            for poi in pois:
                self.surface.add_marker(poi.id, poi.position, self.marker_payload(poi))
            marker_ids = self.surface.marker_ids()
        logger.debug(f"Synced {len(marker_ids)} markers")
        return marker_ids

    @staticmethod
    def marker_payload(poi: POI) -> Dict[str, Any]:
        """Popup content shown for a POI marker."""
        return {
            "name": poi.name,
            "category": poi.category.label,
            "description": poi.description,
            "address": poi.address,
            "image": poi.image,
        }

    @staticmethod
    def build_route_points(
        start: GeoPoint, ordered_ids: Sequence[str], pois: Iterable[POI]
    ) -> List[GeoPoint]:
        """Resolve an ordered id list into path coordinates.

        Ids with no matching POI are skipped; repeated ids are kept.

        Args:
            start: First point of the path
            ordered_ids: Visiting order from the oracle
            pois: POI set to resolve ids against

        Returns:
            Start point followed by each resolvable POI position
        """
        by_id = {poi.id: poi for poi in pois}
        points = [start]
        for poi_id in ordered_ids:
            poi = by_id.get(poi_id)
            if poi is None:
                logger.debug(f"Skipping unknown stop id '{poi_id}'")
                continue
            points.append(poi.position)
        return points

    def draw_route(
        self, start: GeoPoint, route: OrderedRoute, pois: Iterable[POI]
    ) -> Optional[RenderedPath]:
        """Replace the active polyline with the path for ``route``.

        Returns:
            The drawn path, or None when fewer than two points resolve
        """
        points = self.build_route_points(start, route.ordered_ids, pois)
        with self.lock:
            self.surface.remove_polyline()
            self.active_path = None
            if len(points) < 2:
                logger.warning(
                    f"Route has {len(points)} resolvable point(s); nothing drawn"
                )
                return None

            path = RenderedPath(points=points, style=dict(ROUTE_STYLE))
            self.surface.draw_polyline(path.points, path.style)
            self.surface.fit_bounds(self.calculate_bounds(points), ROUTE_PADDING)
            self.active_path = path
        logger.info(f"Drew route with {len(points)} points")
        return path

    def clear_route(self) -> None:
        with self.lock:
            self.surface.remove_polyline()
            self.active_path = None

    def update_user_location(self, point: GeoPoint) -> None:
        """Create the user marker once, then move it in place."""
        with self.lock:
            if self.surface.has_user_marker():
                self.surface.move_user_marker(point)
            else:
                self.surface.set_user_marker(point)

    def set_viewport(self, center: GeoPoint, zoom: int) -> None:
        """Record a manual pan/zoom from the browser; last write wins."""
        with self.lock:
            self.surface.fly_to(center, zoom)

    def recenter(self, point: Optional[GeoPoint]) -> bool:
        if point is None:
            return False
        with self.lock:
            self.surface.fly_to(point, RECENTER_ZOOM)
        return True

    def focus_poi(self, poi: POI) -> None:
        with self.lock:
            self.surface.fly_to(poi.position, FOCUS_ZOOM)
            self.surface.show_popup(poi.id)

    @staticmethod
    def validate_coordinates(lat: float, lng: float) -> bool:
        """Validate that coordinates are within valid ranges.

        Only used to flag suspicious input in logs; nothing is rejected.
        """
        return -90 <= lat <= 90 and -180 <= lng <= 180

    @staticmethod
    def calculate_bounds(points: Sequence[GeoPoint]) -> Dict[str, float]:
        """Calculate bounding box for a list of points.

        Returns:
            Dictionary with north, south, east, west bounds
        """
        if not points:
            return {}

        lats = [p.lat for p in points]
        lngs = [p.lng for p in points]

        return {
            'north': max(lats),
            'south': min(lats),
            'east': max(lngs),
            'west': min(lngs)
        }


# Export for use in other modules
__all__ = ['MapRenderer', 'MapState', 'MapSurface']
