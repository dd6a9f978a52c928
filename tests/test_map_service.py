import pytest

from geonav_console.api.models import POI, GeoPoint, OrderedRoute, POICategory
from geonav_console.api.services.map_service import FOCUS_ZOOM, RECENTER_ZOOM, MapRenderer, MapState, MapSurface


def test_route_points_follow_oracle_order(start, conakry_pois):
    route = OrderedRoute(["2", "1"], "B then A")

    points = MapRenderer.build_route_points(start, route.ordered_ids, conakry_pois)

    assert [p.as_pair() for p in points] == [
        (9.5092, -13.7122),
        (9.5123, -13.71),
        (9.537, -13.6785),
    ]


def test_draw_route_end_to_end(renderer, map_state, start, conakry_pois):
    path = renderer.draw_route(start, OrderedRoute(["2", "1"], "B then A"), conakry_pois)

    assert map_state.polyline["points"] == [
        [9.5092, -13.7122],
        [9.5123, -13.71],
        [9.537, -13.6785],
    ]
    assert map_state.polyline["style"]["color"] == "#4f46e5"
    assert path.points[0] == start
    assert map_state.fitted_bounds["padding"] == [50, 50]
    assert map_state.fitted_bounds["bounds"] == {
        "north": 9.537,
        "south": 9.5092,
        "east": -13.6785,
        "west": -13.7122,
    }


def test_unknown_ids_are_skipped(renderer, map_state, start, conakry_pois):
    path = renderer.draw_route(start, OrderedRoute(["ghost", "3"], ""), conakry_pois)

    assert len(path.points) == 2
    assert map_state.polyline["points"][1] == [9.545, -13.68]


def test_no_polyline_when_nothing_resolves(renderer, map_state, start, conakry_pois):
    renderer.draw_route(start, OrderedRoute(["1", "2"], ""), conakry_pois)

    path = renderer.draw_route(start, OrderedRoute(["ghost", "phantom"], ""), conakry_pois)

    assert path is None
    assert map_state.polyline is None
    assert renderer.active_path is None


def test_empty_route_draws_nothing(renderer, map_state, start):
    assert renderer.draw_route(start, OrderedRoute([], ""), []) is None
    assert map_state.polyline is None


def test_new_route_replaces_previous(renderer, map_state, start, conakry_pois):
    renderer.draw_route(start, OrderedRoute(["1", "2"], ""), conakry_pois)
    renderer.draw_route(start, OrderedRoute(["3"], ""), conakry_pois)

    assert map_state.polyline["points"] == [[9.5092, -13.7122], [9.545, -13.68]]


def test_marker_resync_is_idempotent(renderer, map_state, conakry_pois):
    first = renderer.sync_markers(conakry_pois)
    second = renderer.sync_markers(conakry_pois)

    assert sorted(first) == sorted(second) == ["1", "2", "3"]
    assert map_state.markers["2"]["category"] == "Musée"


def test_marker_sync_drops_removed_pois(renderer, map_state, conakry_pois):
    renderer.sync_markers(conakry_pois)
    renderer.sync_markers(conakry_pois[:1])

    assert map_state.marker_ids() == ["1"]


def test_user_marker_is_created_once(renderer, map_state):
    renderer.update_user_location(GeoPoint(9.5, -13.7))
    renderer.update_user_location(GeoPoint(9.6, -13.8))

    assert map_state.user_marker == GeoPoint(9.6, -13.8)
    assert map_state.user_marker_created == 1


def test_recenter_without_location_leaves_viewport(renderer, map_state):
    center = map_state.center

    assert renderer.recenter(None) is False
    assert map_state.center == center


def test_recenter_flies_to_user(renderer, map_state):
    assert renderer.recenter(GeoPoint(9.6, -13.8)) is True
    assert map_state.center == GeoPoint(9.6, -13.8)
    assert map_state.zoom == RECENTER_ZOOM


def test_focus_poi_opens_popup(renderer, map_state, conakry_pois):
    renderer.sync_markers(conakry_pois)

    renderer.focus_poi(conakry_pois[2])

    assert map_state.open_popup == "3"
    assert map_state.zoom == FOCUS_ZOOM


def test_out_of_range_coordinates_pass_through(renderer, map_state, start):
    far = POI(id="x", name="X", category=POICategory.OTHER, latitude=123.0, longitude=-400.0)

    path = renderer.draw_route(start, OrderedRoute(["x"], ""), [far])

    assert path.points[-1] == GeoPoint(123.0, -400.0)
    assert MapRenderer.validate_coordinates(123.0, -400.0) is False


def test_snapshot_is_json_ready(renderer, map_state, start, conakry_pois):
    renderer.sync_markers(conakry_pois)
    renderer.draw_route(start, OrderedRoute(["1"], ""), conakry_pois)

    snapshot = map_state.snapshot()

    assert snapshot["route"]["points"][0] == [9.5092, -13.7122]
    assert {m["id"] for m in snapshot["markers"]} == {"1", "2", "3"}
    assert snapshot["userMarker"] is None


def test_default_viewport_from_config(monkeypatch):
    monkeypatch.setenv("GEONAV_DEFAULT_ZOOM", "12")

    state = MapState()

    assert state.zoom == 12
    assert state.center == GeoPoint(9.5092, -13.7122)


def test_manual_viewport_is_last_write(renderer, map_state, start, conakry_pois):
    renderer.draw_route(start, OrderedRoute(["1"], ""), conakry_pois)

    renderer.set_viewport(GeoPoint(9.0, -13.0), 11)

    assert map_state.center == GeoPoint(9.0, -13.0)
    assert map_state.zoom == 11
    assert map_state.fitted_bounds is None
    assert map_state.polyline is not None


def test_map_surface_is_abstract():
    with pytest.raises(TypeError):
        MapSurface()
