"""M3U/M3U8 playlist parser: streams lines into a grouped Playlist."""
import asyncio
import logging
import os
import re
from typing import Iterable, Optional, Tuple

import aiofiles
import httpx

from ..errors import PlaylistReadError
from ..models.playlist import Playlist

logger = logging.getLogger(__name__)


# #EXTINF:-1 <args>,<name>  -- args up to the first comma, name up to the
# first control character. Both parts must be non-empty.
EXTINF_RE = re.compile(r'^#EXTINF:-1\s*([^,\s][^,]*),([^\r\n\t]+)')
LOGO_RE = re.compile(r'tvg-logo="([^"]*)"')
GROUP_RE = re.compile(r'group-title="([^"]*)"')
# bytes that failed to decode, as produced by the surrogateescape handler
UNDECODABLE_RE = re.compile('[\udc80-\udcff]')


class M3UParser:
    """Stateful, line-at-a-time parser for M3U playlists.

    Metadata from the latest ``#EXTINF`` line stays pending until the next
    one replaces it, so every URL line picks up whatever name, logo and group
    were last seen. Lines starting with ``#`` that are not well-formed
    ``#EXTINF`` tags are comments and leave the pending metadata alone.
    """

    TIMEOUT = 120.0  # remote playlists can be large
    MAX_RETRIES = 3
    RETRY_DELAY = 2.0

    def __init__(self, playlist: Optional[Playlist] = None):
        self.playlist = playlist if playlist is not None else Playlist()
        self.count = 0
        # Pending metadata, carried over until overwritten
        self.name = ""
        self.logo = ""
        self.group = ""
        self.args = ""

    def feed(self, line: str) -> bool:
        """Consume one line. Returns True if a channel was added."""
        if line.startswith('#'):
            self._parse_extinf(line)
            return False

        url = line.rstrip('\r\n')
        if not url.strip():
            return False

        self.playlist.new_entry(self.group, self.name, self.logo, url)
        self.count += 1
        return True

    def _parse_extinf(self, line: str):
        match = EXTINF_RE.match(line)
        if not match:
            return  # comment or unsupported tag

        self.args, self.name = match.group(1), match.group(2)

        logo_match = LOGO_RE.search(self.args)
        self.logo = logo_match.group(1) if logo_match else ""

        # group-title is sticky: keep the previous group when it is missing
        group_match = GROUP_RE.search(self.args)
        if group_match:
            self.group = group_match.group(1)

    def result(self) -> Tuple[Playlist, int]:
        return self.playlist, self.count

    @classmethod
    def parse_lines(
        cls,
        lines: Iterable[str],
        name: str = "",
        source: str = "",
    ) -> Tuple[Playlist, int]:
        """Parse an iterable of lines. Returns the playlist and the number of channels added."""
        parser = cls(Playlist(name=name, source=source))
        for line in lines:
            try:
                parser.feed(line)
            except MemoryError:
                logger.error(
                    "Out of memory after %d channels, stopping parse of %s",
                    parser.count, source or "playlist",
                )
                break
        return parser.result()

    @classmethod
    async def parse_from_file(cls, file_path: str) -> Tuple[Playlist, int]:
        """Parse an M3U playlist from a local file, one line at a time."""
        name = os.path.splitext(os.path.basename(file_path))[0]
        parser = cls(Playlist(name=name, source=file_path))

        try:
            # utf-8-sig drops a leading BOM; undecodable bytes are kept as
            # surrogates so they can be reported, then removed
            async with aiofiles.open(file_path, 'r', encoding='utf-8-sig', errors='surrogateescape') as f:
                lineno = 0
                async for line in f:
                    lineno += 1
                    cleaned = UNDECODABLE_RE.sub('', line)
                    if cleaned != line:
                        logger.warning("Dropped non UTF-8 bytes on line %d of %s", lineno, file_path)
                        line = cleaned
                    try:
                        parser.feed(line)
                    except MemoryError:
                        logger.error(
                            "Out of memory after %d channels, stopping parse of %s",
                            parser.count, file_path,
                        )
                        break
        except OSError as e:
            raise PlaylistReadError(file_path, e.strerror or str(e), e.errno) from e

        logger.info("Loaded %d channels in %d groups from %s",
                    parser.count, len(parser.playlist.groups), file_path)
        return parser.result()

    @classmethod
    async def parse_from_url(
        cls,
        url: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> Tuple[Playlist, int]:
        """Parse an M3U playlist from a URL with retry logic."""
        last_error = None

        for attempt in range(cls.MAX_RETRIES):
            parser = cls(Playlist(name=cls._extract_playlist_name(url), source=url))
            try:
                async with httpx.AsyncClient(
                    timeout=httpx.Timeout(timeout or cls.TIMEOUT, connect=30.0),
                    follow_redirects=True,
                    transport=transport,
                ) as client:
                    async with client.stream('GET', url) as response:
                        response.raise_for_status()
                        async for line in response.aiter_lines():
                            parser.feed(line)
                logger.info("Loaded %d channels from %s", parser.count, url)
                return parser.result()
            except httpx.HTTPStatusError as e:
                # Don't retry on HTTP errors
                raise PlaylistReadError(url, f"HTTP {e.response.status_code}") from e
            except httpx.TooManyRedirects as e:
                raise PlaylistReadError(url, "too many redirects") from e
            except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
                raise PlaylistReadError(url, str(e) or "invalid URL") from e
            except httpx.TimeoutException:
                last_error = f"Timeout (attempt {attempt + 1}/{cls.MAX_RETRIES})"
            except httpx.RequestError as e:
                last_error = str(e) or type(e).__name__
            except MemoryError:
                logger.error("Out of memory after %d channels, stopping parse of %s",
                             parser.count, url)
                return parser.result()

            logger.warning("Playlist download failed: %s", last_error)
            if attempt < cls.MAX_RETRIES - 1:
                await asyncio.sleep(cls.RETRY_DELAY)

        raise PlaylistReadError(url, last_error or "unknown error")

    @staticmethod
    def _extract_playlist_name(url: str) -> str:
        """Extract a playlist name from the URL path, falling back to the host."""
        from urllib.parse import urlparse

        parsed = urlparse(url)
        if parsed.path:
            name = os.path.splitext(os.path.basename(parsed.path))[0]
            if name and name != "get" and len(name) > 2:
                return name
        return parsed.netloc or "Playlist"
