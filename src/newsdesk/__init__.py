"""Newsdesk: autonomous news generation with layered provider fallback."""

__version__ = "0.1.0"
