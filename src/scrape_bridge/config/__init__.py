"""Configuration package for Scrape Bridge.

Re-exports the settings symbols so that callers can write::

    from scrape_bridge.config import get_settings
"""

from __future__ import annotations

from scrape_bridge.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
