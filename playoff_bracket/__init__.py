"""Playoff elimination brackets with automatic match scheduling over an in-memory match store."""

__version__ = "0.1.0"
__all__ = ["bracket", "formats", "matchup", "models"]