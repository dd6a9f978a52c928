# geonav_console/api/store.py
"""In-memory POI store backing the console.

Seeded with the Conakry sample places. Listeners are called after every
change so the map can rebuild its markers.
"""

import logging
import threading
import uuid
from typing import Any, Callable, Dict, List, Optional

from geonav_console.api.models import POI, POICategory

logger = logging.getLogger(__name__)

SAMPLE_POIS = [
    POI(
        id="1",
        name="Grande Mosquée de Conakry",
        category=POICategory.OTHER,
        latitude=9.5370,
        longitude=-13.6785,
        description="La plus grande mosquée de Guinée.",
        address="Route du Niger, Conakry",
    ),
    POI(
        id="2",
        name="Musée National de Sandervalia",
        category=POICategory.MUSEUM,
        latitude=9.5123,
        longitude=-13.7100,
        description="Musée présentant l'histoire guinéenne.",
        address="Kaloum, Conakry",
    ),
    POI(
        id="3",
        name="Jardin 2 Octobre",
        category=POICategory.PARK,
        latitude=9.5450,
        longitude=-13.6800,
        description="Grand espace vert.",
        address="Conakry",
    ),
]


class POIStore:
    """Ordered, thread-safe collection of POIs keyed by id."""

    def __init__(self, pois: Optional[List[POI]] = None):
        self._lock = threading.RLock()
        self._pois: Dict[str, POI] = {}
        self._listeners: List[Callable[[List[POI]], None]] = []
        for poi in pois or []:
            self._pois[poi.id] = poi

    def subscribe(self, listener: Callable[[List[POI]], None]) -> None:
        self._listeners.append(listener)

    def _changed(self) -> None:
        current = self.list()
        for listener in self._listeners:
            listener(current)

    def list(self) -> List[POI]:
        with self._lock:
            return list(self._pois.values())

    def get(self, poi_id: str) -> POI:
        """Return the POI with ``poi_id``; raises ``KeyError`` if unknown."""
        with self._lock:
            if poi_id not in self._pois:
                raise KeyError(poi_id)
            return self._pois[poi_id]

    def add(self, data: Dict[str, Any]) -> POI:
        payload = dict(data)
        payload["id"] = str(payload.get("id") or uuid.uuid4().hex[:8])
        poi = POI.from_dict(payload)
        with self._lock:
            if poi.id in self._pois:
                raise ValueError(f"POI {poi.id} already exists")
            self._pois[poi.id] = poi
        logger.info(f"Added POI {poi.id} ({poi.name})")
        self._changed()
        return poi

    def update(self, poi_id: str, data: Dict[str, Any]) -> POI:
        with self._lock:
            current = self.get(poi_id)
            merged = {**current.to_dict(), **data, "id": poi_id}
            poi = POI.from_dict(merged)
            self._pois[poi_id] = poi
        logger.info(f"Updated POI {poi_id}")
        self._changed()
        return poi

    def delete(self, poi_id: str) -> None:
        with self._lock:
            if poi_id not in self._pois:
                raise KeyError(poi_id)
            del self._pois[poi_id]
        logger.info(f"Deleted POI {poi_id}")
        self._changed()
