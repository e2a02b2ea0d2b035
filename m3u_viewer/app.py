"""Main application module and command line entry point."""
import asyncio
import errno
import logging
import sys
from typing import List, Optional

import flet as ft
import flet_video as fv

from .components.channel_list import ChannelList
from .config import Settings
from .errors import PlaylistReadError
from .log import setup_logging
from .models.channel import Channel
from .models.playlist import Playlist
from .services.image_cache import ImageCache
from .services.logo_loader import LogoLoader
from .services.m3u_parser import M3UParser

logger = logging.getLogger(__name__)

USAGE = "Usage: m3u-viewer <playlist.m3u | playlist URL>"


class IPTVViewerApp:
    """Playlist browser with an embedded video player."""

    def __init__(self, page: ft.Page, playlist: Playlist, logo_loader: LogoLoader):
        self.page = page
        self.playlist = playlist
        self._current_url: Optional[str] = None
        self._queued = 0

        self._setup_page()

        self._video = fv.Video(
            expand=True,
            fill_color="#000000",
            aspect_ratio=16/9,
            autoplay=True,
            show_controls=True,
            fit=ft.ImageFit.CONTAIN,
        )
        self._channel_list = ChannelList(
            playlist=playlist,
            logo_loader=logo_loader,
            on_channel_select=self._on_channel_select,
        )

        self.page.add(
            ft.Row(
                [
                    ft.Container(self._channel_list, width=620),
                    ft.Container(self._video, expand=True),
                ],
                expand=True,
            )
        )
        self._channel_list.select_first_group()

    def _setup_page(self):
        """Configure the page settings."""
        self.page.title = self.playlist.name or "IPTV Viewer"
        self.page.theme_mode = ft.ThemeMode.DARK
        self.page.padding = 0

    def _on_channel_select(self, channel: Channel):
        """Hand the channel's stream over to the player."""
        if channel.url == self._current_url:
            return
        logger.info("Playing %s (%s)", channel.name, channel.url)
        self._current_url = channel.url
        self._video.stop()
        # keep the new stream as the only playlist item
        for _ in range(self._queued):
            self._video.playlist_remove(0)
        self._video.playlist_add(fv.VideoMedia(resource=channel.url))
        self._queued = 1
        self._video.jump_to(0)
        self._video.play()
        self.page.update()


def run(argv: List[str]) -> int:
    """Load the playlist named on the command line and open the viewer.

    Returns the process exit status.
    """
    if len(argv) != 2:
        print(USAGE, file=sys.stderr)
        return errno.EINVAL

    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_file)

    source = argv[1]
    if source.startswith(("http://", "https://")):
        load = M3UParser.parse_from_url(source, timeout=settings.playlist_timeout)
    else:
        load = M3UParser.parse_from_file(source)

    try:
        playlist, count = asyncio.run(load)
    except PlaylistReadError as e:
        logger.error("%s", e)
        return e.errno or errno.EIO

    if count == 0:
        logger.error("No channels found in %s", source)
        return getattr(errno, "ENODATA", errno.EINVAL)

    cache = ImageCache(
        cache_dir=settings.cache_dir,
        user_agent=settings.user_agent,
        timeout=settings.fetch_timeout,
    )
    logo_loader = LogoLoader(cache, size=(settings.logo_size, settings.logo_size))

    try:
        ft.app(target=lambda page: IPTVViewerApp(page, playlist, logo_loader))
    finally:
        playlist.destroy()
    return 0


def main():
    sys.exit(run(sys.argv))
