# geonav_console/routes/websocket/callback_helpers.py
"""Helper functions for wiring console state callbacks to Socket.IO events."""

import logging

from .base import NAMESPACE

logger = logging.getLogger(__name__)


def wire_console_callbacks(socketio, route_service, namespace: str = NAMESPACE) -> None:
    """Bridge map-state and toast callbacks to Socket.IO broadcasts."""

    def _on_map_state(snapshot: dict) -> None:
        try:
            socketio.emit(
                "map_state",
                {**snapshot, "status": route_service.status()},
                namespace=namespace,
            )
        except Exception as exc:
            logger.exception("Failed emitting map_state: %s", exc)

    def _on_toast(toast: dict) -> None:
        try:
            socketio.emit("toast", toast, namespace=namespace)
        except Exception as exc:
            logger.exception("Failed emitting toast: %s", exc)

    surface = route_service.renderer.surface
    if hasattr(surface, "subscribe"):
        surface.subscribe(_on_map_state)
    route_service.notifier.subscribe(_on_toast)
