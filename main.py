"""
GeoNav Console – main application entry point

* Flask app + Socket.IO serving the administrative map view.
* The server owns the map state (markers, user marker, route polyline,
  viewport); the browser renders whatever `map_state` it is sent.
* The Socket.IO namespace is `/geonav/ws`.
"""

import os
import logging

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from dotenv import load_dotenv

import geonav_console
from geonav_console.api.config import get_port, get_websocket_config
from geonav_console.api.services.map_service import MapRenderer, MapState
from geonav_console.api.services.route_service import RouteService
from geonav_console.api.store import SAMPLE_POIS, POIStore
from geonav_console.routes.console import create_console_blueprint
from geonav_console.routes.websocket import NAMESPACE, register_websocket_handlers

# --------------------------------------------------------------------------- #
# Environment & logging
# --------------------------------------------------------------------------- #
load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(store=None, oracle=None):
    """Build the Flask app, Socket.IO server and shared console state.

    Returns:
        Tuple of (app, socketio)
    """
    app = Flask(__name__)

    flask_secret_key = os.getenv("FLASK_SECRET_KEY") or os.urandom(32).hex()
    if "FLASK_SECRET_KEY" not in os.environ:
        logger.warning("No FLASK_SECRET_KEY found. Generated a temporary key.")
    app.secret_key = flask_secret_key

    # CORS for local dev / cross‑origin front‑end requests
    CORS(app, origins="*", supports_credentials=True)

    ws_cfg = get_websocket_config()
    socketio = SocketIO(
        app,
        cors_allowed_origins=ws_cfg["cors_allowed_origins"],
        async_mode="threading",
        ping_interval=ws_cfg["ping_interval"],
        ping_timeout=ws_cfg["ping_timeout"],
        logger=False,
        engineio_logger=False,
    )
    logger.info("Socket.IO initialised (async_mode=threading)")

    # ----------------------------------------------------------------------- #
    # Console state shared by HTTP and WebSocket handlers
    # ----------------------------------------------------------------------- #
    if store is None:
        store = POIStore(SAMPLE_POIS)
    renderer = MapRenderer(MapState())
    service_kwargs = {"oracle": oracle} if oracle is not None else {}
    route_service = RouteService(store, renderer, **service_kwargs)
    app.extensions["geonav"] = route_service

    base_dir = os.path.dirname(os.path.abspath(geonav_console.__file__))
    app.register_blueprint(create_console_blueprint(base_dir, route_service))
    register_websocket_handlers(socketio, route_service)

    @app.route("/debug")
    def debug():
        """Simple JSON health endpoint."""
        return {
            "status": "ok",
            "socketio_initialized": True,
            "pois": len(store.list()),
            "endpoints": {
                "console": "/geonav/",
                "websocket_namespace": NAMESPACE,
            },
        }

    return app, socketio


app, socketio = create_app()

# --------------------------------------------------------------------------- #
# Local development runner ( `python main.py` )
# --------------------------------------------------------------------------- #
if __name__ == "__main__":
    port = get_port()
    logger.info("Starting GeoNav console on http://localhost:%d/geonav/", port)
    socketio.run(app, host="0.0.0.0", port=port, debug=False, allow_unsafe_werkzeug=True)

__all__ = ["app", "socketio", "create_app"]
