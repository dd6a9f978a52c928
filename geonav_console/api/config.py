# api/config.py
"""Configuration management for the GeoNav console."""
import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

SUPPORTED_LANGUAGES = ("fr", "en")
DEFAULT_LANGUAGE = "fr"


def get_oracle_api_key() -> Optional[str]:
    """Get the completion service API key from environment.

    A missing key is not an error: route optimisation degrades to the
    pass-through ordering instead.
    """
    api_key = os.getenv("OPENAI_API_KEY", "").strip()
    return api_key or None


def get_working_language() -> str:
    """Language the oracle should answer in and the toasts are written in."""
    language = os.getenv("GEONAV_LANGUAGE", DEFAULT_LANGUAGE).strip().lower()
    if language not in SUPPORTED_LANGUAGES:
        return DEFAULT_LANGUAGE
    return language


def get_oracle_config():
    """Get chat completion settings used for route ordering."""
    return {
        "model": os.getenv("OPENAI_CHAT_MODEL", "gpt-4.1"),
        "temperature": float(os.getenv("GEONAV_ORACLE_TEMPERATURE", "0.2")),
        "max_tokens": int(os.getenv("GEONAV_ORACLE_MAX_TOKENS", "1024")),
        "language": get_working_language(),
    }


def get_map_config():
    """Get tile provider and initial viewport configuration."""
    return {
        "tile_url": os.getenv(
            "GEONAV_TILE_URL", "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
        ),
        "attribution": os.getenv(
            "GEONAV_TILE_ATTRIBUTION",
            '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors',
        ),
        "subdomains": ["a", "b", "c"],
        "max_zoom": 20,
        "default_center": {
            "lat": float(os.getenv("GEONAV_DEFAULT_LAT", "9.5092")),
            "lng": float(os.getenv("GEONAV_DEFAULT_LNG", "-13.7122")),
        },
        "default_zoom": int(os.getenv("GEONAV_DEFAULT_ZOOM", "14")),
    }


def get_port():
    """Get port configuration."""
    return int(os.getenv("PORT", 5000))


def get_websocket_config():
    """Get WebSocket configuration."""
    return {
        "ping_interval": int(os.getenv("WEBSOCKET_PING_INTERVAL", "25")),
        "ping_timeout": int(os.getenv("WEBSOCKET_PING_TIMEOUT", "60")),
        "cors_allowed_origins": os.getenv("WEBSOCKET_CORS_ORIGINS", "*").split(","),
    }
