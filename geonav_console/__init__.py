"""GeoNav administrative console: map view state and AI route ordering."""

__version__ = "0.1.0"
