# geonav_console/routes/websocket/connection.py
"""WebSocket connection and disconnection handlers."""

import logging

from .base import BaseWebSocketHandler

logger = logging.getLogger(__name__)


class ConnectionHandler(BaseWebSocketHandler):
    """Handles WebSocket connection lifecycle events."""

    def register_handlers(self):
        """Register connection-related event handlers."""

        @self.socketio.on('connect', namespace=self.namespace)
        def handle_connect(auth=None):
            """Send the current map state to a newly connected browser."""
            self.log_event('connect')
            self.emit_to_client('map_state', self.current_state())

        @self.socketio.on('disconnect', namespace=self.namespace)
        def handle_disconnect(*args):
            self.log_event('disconnect')

        @self.socketio.on('request_state', namespace=self.namespace)
        def handle_request_state(data=None):
            self.emit_to_client('map_state', self.current_state())
