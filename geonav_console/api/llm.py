"""LLM helper functions for GeoNav route ordering.

Asks an OpenAI chat model to order a set of stops (approximate travelling
salesman) and parses its JSON reply. The model is an untrusted oracle: any
failure, including a missing API key, yields the stops in their original
order instead of an exception.
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional, Sequence

from openai import OpenAI

from geonav_console.api.config import get_oracle_api_key, get_oracle_config
from geonav_console.api.models import GeoPoint, OrderedRoute, Stop, TransportMode

logger = logging.getLogger(__name__)

MESSAGES = {
    "fr": {
        "no_optimization": "Pas d'optimisation (clé API manquante ou liste vide).",
        "failed": "Impossible d'optimiser le trajet pour le moment.",
    },
    "en": {
        "no_optimization": "No optimization performed (missing API key or empty list).",
        "failed": "Unable to optimize the route right now.",
    },
}

_LANGUAGE_NAMES = {"fr": "français", "en": "English"}


class OracleResponseError(ValueError):
    """The oracle replied, but not with the expected JSON object."""


# ---------------------------------------------------------------------------
# Prompt construction helpers
# ---------------------------------------------------------------------------

def _build_prompt(
    start: GeoPoint,
    stops: Sequence[Stop],
    language: str,
    mode: Optional[TransportMode] = None,
) -> str:
    stop_list = json.dumps([s.to_dict() for s in stops], ensure_ascii=False)
    mode_hint = f"Transport mode: {mode.value}. " if mode else ""
    return (
        f"I am at position [{start.lat}, {start.lng}]. "
        f"I must visit the following places: {stop_list}. "
        f"{mode_hint}"
        "Order the visits to minimise the total travel time "
        "(travelling salesman problem, an approximate answer is fine). "
        "Reply ONLY with a JSON object with two properties:\n"
        '1. "orderedIds": an array of the place ids in visiting order.\n'
        f'2. "explanation": a short explanation of the route, written in '
        f"{_LANGUAGE_NAMES.get(language, language)}."
    )


def _parse_response(content: Optional[str]) -> OrderedRoute:
    """Validate the model's raw JSON string into an ``OrderedRoute``."""
    if not content or not content.strip():
        raise OracleResponseError("Empty response")

    try:
        payload = json.loads(content)
    except json.JSONDecodeError as exc:
        raise OracleResponseError(f"Response is not JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise OracleResponseError("Response is not a JSON object")

    raw_ids = payload.get("orderedIds")
    explanation = payload.get("explanation")
    if not isinstance(raw_ids, list):
        raise OracleResponseError("'orderedIds' is not an array")
    if not isinstance(explanation, str):
        raise OracleResponseError("'explanation' is not a string")

    ordered_ids: List[str] = []
    for item in raw_ids:
        # bool is an int subclass
        if isinstance(item, bool) or not isinstance(item, (str, int)):
            raise OracleResponseError(f"Unexpected id in 'orderedIds': {item!r}")
        ordered_ids.append(str(item))

    return OrderedRoute(ordered_ids=ordered_ids, explanation=explanation)


def _fallback(stops: Sequence[Stop], message_key: str, language: str) -> OrderedRoute:
    messages = MESSAGES.get(language, MESSAGES["fr"])
    return OrderedRoute(
        ordered_ids=[s.id for s in stops],
        explanation=messages[message_key],
        degraded=True,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def optimize_route(
    start: GeoPoint,
    stops: Sequence[Stop],
    *,
    client: Any = None,
    mode: Optional[TransportMode] = None,
    language: Optional[str] = None,
) -> OrderedRoute:
    """Return a best-effort visiting order for ``stops`` starting at ``start``.

    Args:
        start: Where the route begins.
        stops: Places to visit; each carries an id, name and coordinates.
        client: OpenAI client to use; one is built from the environment key
            when omitted. The key must be configured either way.
        mode: Optional transport mode passed to the model as a hint.
        language: Language for the explanation and fixed messages.

    Returns:
        The oracle's ordering, or the input order with ``degraded=True`` when
        no API key is configured, ``stops`` is empty, or the call fails.
    """
    cfg = get_oracle_config()
    language = language or cfg["language"]
    api_key = get_oracle_api_key()

    if not stops or api_key is None:
        logger.info(
            "Skipping route optimisation (stops=%d, api_key=%s)",
            len(stops),
            "set" if api_key else "missing",
        )
        return _fallback(stops, "no_optimization", language)

    messages = [
        {"role": "system", "content": "You are a route planning assistant that replies in JSON."},
        {"role": "user", "content": _build_prompt(start, stops, language, mode)},
    ]

    logger.debug(
        "Calling OpenAI ChatCompletion: model=%s stops=%d start=%s",
        cfg["model"],
        len(stops),
        start.as_pair(),
    )

    try:
        if client is None:
            client = OpenAI(api_key=api_key)
        response = client.chat.completions.create(
            model=cfg["model"],
            messages=messages,
            temperature=cfg["temperature"],
            max_tokens=cfg["max_tokens"],
            response_format={"type": "json_object"},
        )
        raw_content = response.choices[0].message.content
        route = _parse_response(raw_content)
    except OracleResponseError as exc:
        logger.error("Failed to parse route optimisation response: %s", exc)
        return _fallback(stops, "failed", language)
    except Exception as exc:
        logger.exception("Route optimisation call failed: %s", exc)
        return _fallback(stops, "failed", language)

    logger.info("Route optimised: %s", route.ordered_ids)
    return route


__all__ = ["MESSAGES", "OracleResponseError", "optimize_route"]
