# geonav_console/routes/websocket/base.py
"""Base WebSocket handler with common functionality."""

import logging
from flask import request
from flask_socketio import emit

logger = logging.getLogger(__name__)

# Define namespace constant
NAMESPACE = "/geonav/ws"


class BaseWebSocketHandler:
    """Base class for WebSocket handlers with common functionality."""

    def __init__(self, socketio, route_service, namespace=NAMESPACE):
        self.socketio = socketio
        self.route_service = route_service
        self.namespace = namespace

    def emit_to_client(self, event, data, room=None):
        """Emit event to a specific client or room."""
        try:
            if room:
                self.socketio.emit(event, data, to=room, namespace=self.namespace)
            else:
                emit(event, data, namespace=self.namespace)
        except Exception as e:
            logger.error(f"Failed to emit {event}: {e}")

    def current_state(self):
        """Map snapshot plus selection status, as sent to the browser."""
        return {
            **self.route_service.renderer.surface.snapshot(),
            "status": self.route_service.status(),
        }

    def log_event(self, event_name, data=None):
        """Log WebSocket events consistently."""
        if data:
            logger.info(f"[WS] {event_name} - Client: {request.sid}, Data: {data}")
        else:
            logger.info(f"[WS] {event_name} - Client: {request.sid}")

    def handle_error(self, error, event_name=""):
        """Handle and log errors consistently."""
        logger.error(f"[WS] Error in {event_name} - Client: {request.sid}, Error: {error}")
        self.emit_to_client('error', {'message': str(error), 'event': event_name})
