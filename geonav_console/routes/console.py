# geonav_console/routes/console.py
"""Console routes and blueprint configuration."""

import logging
import os

from flask import Blueprint, jsonify, render_template, request
from werkzeug.exceptions import HTTPException

from geonav_console.api.config import get_map_config, get_oracle_api_key
from geonav_console.api.models import GeoPoint
from geonav_console.api.services.route_service import RouteService

logger = logging.getLogger(__name__)


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError("Expected a JSON object body")
    return data


def create_console_blueprint(base_dir, route_service: RouteService):
    """Create and configure the console blueprint.

    Args:
        base_dir: Absolute path to the package directory
        route_service: Shared map view state and actions

    Returns:
        Configured Flask Blueprint
    """
    console_bp = Blueprint(
        "console",
        __name__,
        template_folder=os.path.join(base_dir, 'templates'),
        static_folder=os.path.join(base_dir, 'static'),
        static_url_path='/static',
        url_prefix="/geonav"
    )
    store = route_service.store

    @console_bp.errorhandler(ValueError)
    def bad_request(error):
        return jsonify({"error": str(error)}), 400

    @console_bp.errorhandler(KeyError)
    def not_found(error):
        return jsonify({"error": f"Unknown POI: {error.args[0]}"}), 404

    @console_bp.errorhandler(Exception)
    def server_error(error):
        if isinstance(error, HTTPException):
            return error
        logger.exception("Unhandled console error: %s", error)
        return jsonify({"error": "Internal server error"}), 500

    @console_bp.route("/")
    def index():
        """Map view page."""
        return render_template("map.html")

    @console_bp.route("/api/config")
    def api_config():
        """Return tile provider configuration for the frontend."""
        config = get_map_config()
        config["oracle_configured"] = get_oracle_api_key() is not None
        return jsonify(config)

    @console_bp.route("/api/pois", methods=["GET", "POST"])
    def api_pois():
        if request.method == "POST":
            poi = store.add(_json_body())
            return jsonify(poi.to_dict()), 201
        return jsonify([poi.to_dict() for poi in store.list()])

    @console_bp.route("/api/pois/<poi_id>", methods=["GET", "PUT", "DELETE"])
    def api_poi(poi_id):
        if request.method == "PUT":
            return jsonify(store.update(poi_id, _json_body()).to_dict())
        if request.method == "DELETE":
            store.delete(poi_id)
            return "", 204
        return jsonify(store.get(poi_id).to_dict())

    @console_bp.route("/api/pois/<poi_id>/focus", methods=["POST"])
    def api_focus(poi_id):
        poi = route_service.focus_poi(poi_id)
        return jsonify(poi.to_dict())

    @console_bp.route("/api/selection")
    def api_selection():
        return jsonify(route_service.selector.to_dict())

    @console_bp.route("/api/selection/<poi_id>/toggle", methods=["POST"])
    def api_toggle(poi_id):
        selected = route_service.toggle_stop(poi_id)
        return jsonify({"id": poi_id, "selected": selected, **route_service.selector.to_dict()})

    @console_bp.route("/api/selection/mode", methods=["PUT"])
    def api_mode():
        data = _json_body()
        route_service.selector.set_transport_mode(data.get("mode"))
        return jsonify(route_service.selector.to_dict())

    @console_bp.route("/api/route/optimize", methods=["POST"])
    def api_optimize():
        """Order the selected stops and draw the route."""
        result = route_service.optimize()
        if result is None:
            return jsonify({"error": "No stops selected"}), 400

        path = result["path"]
        return jsonify({
            "route": result["route"].to_dict(),
            "path": path.to_dict() if path else None,
            "applied": result["applied"],
            "toast": route_service.notifier.last,
        })

    @console_bp.route("/api/route", methods=["DELETE"])
    def api_clear_route():
        route_service.clear_route()
        return "", 204

    @console_bp.route("/api/location", methods=["POST"])
    def api_location():
        point = GeoPoint.from_dict(_json_body())
        route_service.set_user_location(point)
        return jsonify(point.to_dict())

    @console_bp.route("/api/recenter", methods=["POST"])
    def api_recenter():
        moved = route_service.recenter()
        return jsonify({"moved": moved, "toast": route_service.notifier.last})

    @console_bp.route("/api/map")
    def api_map():
        return jsonify({
            **route_service.renderer.surface.snapshot(),
            "status": route_service.status(),
        })

    @console_bp.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok", "service": "geonav"})

    return console_bp


__all__ = ['create_console_blueprint']
