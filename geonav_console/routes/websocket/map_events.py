# geonav_console/routes/websocket/map_events.py
"""Map view events sent by the browser over Socket.IO."""

import logging

from geonav_console.api.models import GeoPoint

from .base import BaseWebSocketHandler

logger = logging.getLogger(__name__)


class MapEventsHandler(BaseWebSocketHandler):
    """Handles location updates and manual viewport changes."""

    def register_handlers(self):
        """Register map-related event handlers."""

        @self.socketio.on('user_location', namespace=self.namespace)
        def handle_user_location(data):
            """Device position reported by the browser's geolocation API."""
            try:
                point = GeoPoint.from_dict(data or {})
            except ValueError as e:
                self.handle_error(e, 'user_location')
                return
            self.route_service.set_user_location(point)

        @self.socketio.on('viewport_changed', namespace=self.namespace)
        def handle_viewport_changed(data):
            """Manual pan or zoom; stored without re-broadcasting."""
            try:
                center = GeoPoint.from_dict(data or {})
                zoom = int(data.get('zoom'))
            except (AttributeError, OverflowError, TypeError, ValueError) as e:
                self.handle_error(e, 'viewport_changed')
                return
            self.route_service.renderer.set_viewport(center, zoom)

        @self.socketio.on('toggle_stop', namespace=self.namespace)
        def handle_toggle_stop(data):
            if not isinstance(data, dict):
                self.handle_error("Expected an object with an 'id'", 'toggle_stop')
                return
            poi_id = str(data.get('id', ''))
            try:
                selected = self.route_service.toggle_stop(poi_id)
            except KeyError:
                self.handle_error(f"Unknown POI: {poi_id}", 'toggle_stop')
                return
            self.emit_to_client('selection', {
                'id': poi_id,
                'selected': selected,
                **self.route_service.selector.to_dict(),
            })
