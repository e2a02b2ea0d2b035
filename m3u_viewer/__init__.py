"""M3U Viewer - a desktop viewer for IPTV channel lists built with Python Flet."""

__version__ = "0.1.0"
