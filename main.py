#!/usr/bin/env python3
"""M3U Viewer - a desktop viewer for IPTV channel lists built with Python Flet."""
from m3u_viewer.app import main


if __name__ == "__main__":
    main()
