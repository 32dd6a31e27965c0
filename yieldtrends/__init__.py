"""Per-country crop yield trend analysis."""

__version__ = "0.1.0"
