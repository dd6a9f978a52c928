# geonav_console/api/services/route_service.py
"""Service layer for stop selection and route optimisation."""

import itertools
import logging
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from geonav_console.api.config import get_working_language
from geonav_console.api.llm import optimize_route
from geonav_console.api.models import GeoPoint, OrderedRoute, POI, Stop, TransportMode
from geonav_console.api.services.map_service import MapRenderer
from geonav_console.api.store import POIStore

logger = logging.getLogger(__name__)

TOAST_SUCCESS = "success"
TOAST_INFO = "info"

TOASTS = {
    "fr": {
        "optimized": "Trajet optimisé par IA",
        "optimize_failed": "Erreur lors de l'optimisation",
        "no_selection": "Sélectionnez au moins un lieu",
        "recentered": "Position centrée",
        "no_location": "Localisation indisponible",
    },
    "en": {
        "optimized": "Route optimised by AI",
        "optimize_failed": "Could not optimise the route",
        "no_selection": "Select at least one place",
        "recentered": "Position centred",
        "no_location": "Location unavailable",
    },
}


class StopSelector:
    """The user's chosen stops and transport mode."""

    def __init__(self, mode: TransportMode = TransportMode.DRIVING):
        self._selected = set()
        self.transport_mode = mode

    @property
    def selection(self) -> frozenset:
        return frozenset(self._selected)

    def is_selected(self, poi_id: str) -> bool:
        return poi_id in self._selected

    def toggle(self, poi_id: str) -> bool:
        """Add ``poi_id`` if absent, remove it if present.

        Returns:
            True if the id is selected afterwards
        """
        if poi_id in self._selected:
            self._selected.discard(poi_id)
            return False
        self._selected.add(poi_id)
        return True

    def clear(self) -> None:
        self._selected.clear()

    def retain(self, poi_ids: Iterable[str]) -> None:
        """Drop selected ids that are not in ``poi_ids``."""
        self._selected.intersection_update(poi_ids)

    def set_transport_mode(self, mode: Union[TransportMode, str]) -> TransportMode:
        try:
            self.transport_mode = TransportMode(mode)
        except ValueError:
            raise ValueError(f"Unknown transport mode: {mode!r}")
        return self.transport_mode

    def candidate_stops(self, pois: Iterable[POI]) -> List[POI]:
        """Selected POIs in POI-set order; stale ids are ignored."""
        return [poi for poi in pois if poi.id in self._selected]

    def to_dict(self) -> dict:
        return {
            "selectedIds": sorted(self._selected),
            "transportMode": self.transport_mode.value,
        }


class Notifier:
    """Toast sink: remembers the last toast and forwards it to subscribers."""

    def __init__(self):
        self.last: Optional[Dict[str, str]] = None
        self._subscribers: List[Callable[[Dict[str, str]], None]] = []

    def subscribe(self, callback: Callable[[Dict[str, str]], None]) -> None:
        self._subscribers.append(callback)

    def notify(self, message: str, tone: str = TOAST_INFO) -> None:
        self.last = {"message": message, "type": tone}
        logger.debug(f"Toast ({tone}): {message}")
        for callback in self._subscribers:
            callback(self.last)


class RouteService:
    """Handles the map view's optimize action and related viewport actions.

    Overlapping optimize calls are tagged with an increasing sequence number;
    only the latest-issued one may redraw the route.
    """

    def __init__(
        self,
        store: POIStore,
        renderer: MapRenderer,
        notifier: Optional[Notifier] = None,
        oracle: Callable[..., OrderedRoute] = optimize_route,
        language: Optional[str] = None,
    ):
        self.store = store
        self.renderer = renderer
        self.notifier = notifier or Notifier()
        self.selector = StopSelector()
        self.oracle = oracle
        self.language = language or get_working_language()
        self.user_location: Optional[GeoPoint] = None
        self.working = False
        self.last_route: Optional[OrderedRoute] = None
        self._lock = threading.RLock()
        self._sequence = itertools.count(1)
        self._latest = 0

        store.subscribe(self.on_pois_changed)
        self.renderer.sync_markers(store.list())

    def _toast(self, key: str, tone: str = TOAST_INFO) -> None:
        messages = TOASTS.get(self.language, TOASTS["fr"])
        self.notifier.notify(messages[key], tone)

    def _publish(self) -> None:
        publish = getattr(self.renderer.surface, "publish", None)
        if publish is not None:
            publish()

    def on_pois_changed(self, pois: List[POI]) -> None:
        """Rebuild markers and forget deleted stops after any POI change."""
        with self._lock:
            self.selector.retain(poi.id for poi in pois)
        self.renderer.sync_markers(pois)
        self._publish()

    def toggle_stop(self, poi_id: str) -> bool:
        """Toggle a stop; only adding requires the POI to exist."""
        with self._lock:
            if not self.selector.is_selected(poi_id):
                self.store.get(poi_id)
            return self.selector.toggle(poi_id)

    def set_user_location(self, point: GeoPoint) -> None:
        if not MapRenderer.validate_coordinates(point.lat, point.lng):
            logger.warning(f"User location out of range: {point.as_pair()}")
        with self._lock:
            self.user_location = point
        self.renderer.update_user_location(point)
        self._publish()

    def recenter(self) -> bool:
        moved = self.renderer.recenter(self.user_location)
        if moved:
            self._toast("recentered")
            self._publish()
        else:
            self._toast("no_location")
        return moved

    def focus_poi(self, poi_id: str) -> POI:
        """Fly to a POI and open its popup; raises ``KeyError`` if unknown."""
        poi = self.store.get(poi_id)
        self.renderer.focus_poi(poi)
        self._publish()
        return poi

    def clear_route(self) -> None:
        with self._lock:
            self.last_route = None
        self.renderer.clear_route()
        self._publish()

    def optimize(self) -> Optional[Dict[str, Any]]:
        """Order the selected stops through the oracle and draw the result.

        Returns:
            Dictionary with the route, the drawn path (or None) and whether
            the result was applied; None when nothing is selected
        """
        pois = self.store.list()
        with self._lock:
            candidates = self.selector.candidate_stops(pois)
            if not candidates:
                self._toast("no_selection")
                return None
            start = self.user_location or candidates[0].position
            mode = self.selector.transport_mode
            sequence = next(self._sequence)
            self._latest = sequence
            self.working = True
        self._publish()

        logger.info(f"Optimising {len(candidates)} stops (request #{sequence})")
        stops = [Stop.from_poi(poi) for poi in candidates]
        try:
            route = self.oracle(start, stops, mode=mode, language=self.language)
        except Exception:
            with self._lock:
                if sequence == self._latest:
                    self.working = False
            self._publish()
            raise

        with self._lock:
            if sequence != self._latest:
                logger.info(
                    f"Discarding stale route for request #{sequence} (latest #{self._latest})"
                )
                return {"route": route, "path": None, "applied": False}

            self.working = False
            self.last_route = route
            path = self.renderer.draw_route(start, route, self.store.list())

        if route.degraded:
            self._toast("optimize_failed")
        else:
            self._toast("optimized", TOAST_SUCCESS)
        self._publish()
        return {"route": route, "path": path, "applied": True}

    def status(self) -> Dict[str, Any]:
        return {
            **self.selector.to_dict(),
            "working": self.working,
            "userLocation": self.user_location.to_dict() if self.user_location else None,
            "lastRoute": self.last_route.to_dict() if self.last_route else None,
        }
