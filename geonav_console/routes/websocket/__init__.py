# geonav_console/routes/websocket/__init__.py
"""WebSocket route handlers initialization."""

import logging

from .base import NAMESPACE
from .callback_helpers import wire_console_callbacks
from .connection import ConnectionHandler
from .map_events import MapEventsHandler

logger = logging.getLogger(__name__)


def register_websocket_handlers(socketio, route_service):
    """Register all WebSocket event handlers with SocketIO.

    Args:
        socketio: Flask-SocketIO instance
        route_service: Shared map view state the handlers act on
    """
    logger.info("Registering WebSocket handlers...")

    try:
        connection_handler = ConnectionHandler(socketio, route_service, NAMESPACE)
        map_handler = MapEventsHandler(socketio, route_service, NAMESPACE)

        logger.info(f"Registering connection handler for namespace: {NAMESPACE}")
        connection_handler.register_handlers()

        logger.info(f"Registering map events handler for namespace: {NAMESPACE}")
        map_handler.register_handlers()

        wire_console_callbacks(socketio, route_service, NAMESPACE)
        logger.info("WebSocket handlers registered successfully")

    except Exception as e:
        logger.error(f"Failed to register WebSocket handlers: {e}")
        logger.exception("WebSocket registration error:")
        raise


__all__ = ['register_websocket_handlers', 'NAMESPACE']
