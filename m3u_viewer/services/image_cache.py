"""Disk cache for channel logos: fetch a URL once, reuse the file forever."""
import asyncio
import logging
import os
import re
from pathlib import Path
from typing import Awaitable, Callable, Dict, Optional

import aiofiles
import aiohttp

from ..config import DEFAULT_USER_AGENT
from ..errors import InvalidArgumentError

logger = logging.getLogger(__name__)

Fetcher = Callable[[str, Path], Awaitable[None]]

MAX_KEY_LENGTH = 93
FILLER = "-"
_NOT_ALNUM = re.compile(r"[^A-Za-z0-9]")


def cache_key(url: str, max_length: int = MAX_KEY_LENGTH) -> str:
    """Turn a URL into a file name.

    Non-alphanumeric characters become ``-`` and the result is cut to
    ``max_length``, so URLs that only differ past that point share a key.
    """
    if not url:
        raise InvalidArgumentError("url must not be empty")
    return _NOT_ALNUM.sub(FILLER, url[:max_length])


class ImageCache:
    """Maps a logo URL to a file under ``cache_dir``.

    The presence of ``cache_dir/<key>`` is the only hit signal. Downloads go
    to a ``.part`` file that is renamed into place on success and removed on
    failure, so a failed fetch never leaves a cache entry behind.
    """

    CHUNK_SIZE = 16384

    def __init__(
        self,
        cache_dir: str = "cache",
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 10.0,
        fetcher: Optional[Fetcher] = None,
    ):
        self._cache_dir = Path(cache_dir)
        self._user_agent = user_agent
        self._timeout = timeout
        self._fetch = fetcher or self._download
        self._dir_ready = False
        self._dir_error: Optional[OSError] = None
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def get_cache_path(self, url: str) -> Path:
        """Get local cache path for URL."""
        return self._cache_dir / cache_key(url)

    def get_cached(self, url: str) -> Optional[Path]:
        """Get cached file path if it exists, without fetching."""
        if not url:
            return None
        path = self.get_cache_path(url)
        return path if path.is_file() else None

    def _ensure_dir(self) -> bool:
        if self._dir_ready:
            return True
        if self._dir_error is not None:
            return False
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self._dir_error = e
            logger.warning("Cannot create cache directory %s: %s", self._cache_dir, e)
            return False
        self._dir_ready = True
        return True

    async def resolve(self, url: str) -> Optional[Path]:
        """Return the cached file for ``url``, downloading it on a miss.

        Returns None when the download fails; nothing is cached in that case
        and the next call tries again.
        """
        path = self.get_cache_path(url)
        if not self._ensure_dir():
            return None

        if path.is_file():
            return path

        key = path.name
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                # Another task may have finished the same download while we waited
                if path.is_file():
                    return path
                return await self._fetch_into(url, path)
        finally:
            # the last task holding or waiting on the key drops its lock
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                self._locks.pop(key, None)

    async def _fetch_into(self, url: str, path: Path) -> Optional[Path]:
        part = path.with_name(path.name + ".part")
        logger.debug("Cache miss for %s, fetching", url)
        try:
            await self._fetch(url, part)
            os.replace(part, path)
        except Exception as e:
            logger.warning("Failed to download %s: %s", url, e)
            self._discard(part)
            return None
        return path

    async def read_bytes(self, url: str) -> Optional[bytes]:
        """Resolve ``url`` and return the cached content."""
        path = await self.resolve(url)
        if path is None:
            return None
        async with aiofiles.open(path, 'rb') as f:
            return await f.read()

    async def _download(self, url: str, dest: Path):
        """Default fetcher: stream ``url`` into ``dest`` with aiohttp."""
        headers = {"User-Agent": self._user_agent}
        timeout = aiohttp.ClientTimeout(total=self._timeout)
        async with aiohttp.ClientSession(headers=headers, timeout=timeout) as session:
            async with session.get(url, allow_redirects=True, raise_for_status=True) as response:
                async with aiofiles.open(dest, 'wb') as f:
                    async for chunk in response.content.iter_chunked(self.CHUNK_SIZE):
                        await f.write(chunk)

    @staticmethod
    def _discard(path: Path):
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove %s: %s", path, e)

    def clear_cache(self):
        """Remove all cached files."""
        if not self._cache_dir.is_dir():
            return
        for file in self._cache_dir.iterdir():
            if file.is_file():
                self._discard(file)
