import io
import sys
from pathlib import Path

import pytest
from PIL import Image


# Ensure tests can import the package regardless of how pytest is invoked.
ROOT = Path(__file__).resolve().parents[1]
ROOT_STR = str(ROOT)
if ROOT_STR not in sys.path:
    sys.path.insert(0, ROOT_STR)


SAMPLE_PLAYLIST = '''#EXTM3U
#EXTINF:-1 tvg-logo="http://x/l.png" group-title="News",CNN
http://stream/cnn.m3u8
#EXTINF:-1 group-title="News",BBC
http://stream/bbc.m3u8
'''


@pytest.fixture
def write_playlist(tmp_path):
    """Write playlist text to a file and return its path as a string."""
    def _write(text, name="channels.m3u"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def png_bytes():
    buf = io.BytesIO()
    Image.new("RGB", (16, 24), (200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


class CountingFetcher:
    """Fetcher double: writes canned bytes and counts calls."""

    def __init__(self, payload=b"logo-bytes", fail=False):
        self.payload = payload
        self.fail = fail
        self.calls = []

    async def __call__(self, url, dest):
        self.calls.append(url)
        with open(dest, "wb") as f:
            if self.fail:
                f.write(self.payload[:3])
                raise OSError("connection reset")
            f.write(self.payload)

    @property
    def count(self):
        return len(self.calls)


@pytest.fixture
def fetcher():
    return CountingFetcher()
