from types import SimpleNamespace

import pytest

from geonav_console.api.models import POI, GeoPoint, OrderedRoute, POICategory, Stop
from geonav_console.api.services.map_service import MapRenderer, MapState
from geonav_console.api.services.route_service import RouteService
from geonav_console.api.store import POIStore


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    """Stands in for ``openai.OpenAI``; records every completion request."""

    def __init__(self, content=None, error=None):
        self.completions = FakeCompletions(content=content, error=error)
        self.chat = SimpleNamespace(completions=self.completions)

    @property
    def calls(self):
        return self.completions.calls


class FakeOracle:
    """Replaces ``optimize_route`` inside ``RouteService``."""

    def __init__(self, route=None):
        self.route = route
        self.calls = []

    def __call__(self, start, stops, mode=None, language=None):
        self.calls.append({"start": start, "stops": list(stops), "mode": mode})
        if self.route is not None:
            return self.route
        return OrderedRoute([s.id for s in stops], "kept as is")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("GEONAV_LANGUAGE", raising=False)
    monkeypatch.delenv("OPENAI_CHAT_MODEL", raising=False)


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    return "sk-test"


@pytest.fixture
def conakry_pois():
    return [
        POI(id="1", name="A", category=POICategory.OTHER, latitude=9.537, longitude=-13.6785),
        POI(id="2", name="B", category=POICategory.MUSEUM, latitude=9.5123, longitude=-13.71),
        POI(id="3", name="C", category=POICategory.PARK, latitude=9.545, longitude=-13.68),
    ]


@pytest.fixture
def stops(conakry_pois):
    return [Stop.from_poi(p) for p in conakry_pois[:2]]


@pytest.fixture
def start():
    return GeoPoint(9.5092, -13.7122)


@pytest.fixture
def store(conakry_pois):
    return POIStore(conakry_pois)


@pytest.fixture
def map_state():
    return MapState()


@pytest.fixture
def renderer(map_state):
    return MapRenderer(map_state)


@pytest.fixture
def oracle():
    return FakeOracle()


@pytest.fixture
def route_service(store, renderer, oracle):
    return RouteService(store, renderer, oracle=oracle, language="fr")
