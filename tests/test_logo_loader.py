"""
Tests for lazy logo decoding on top of the image cache.
"""
import io

import pytest
from PIL import Image

from conftest import CountingFetcher
from m3u_viewer.errors import LogoDecodeError
from m3u_viewer.models.channel import Channel
from m3u_viewer.services.image_cache import ImageCache
from m3u_viewer.services.logo_loader import LogoLoader, decode_logo, to_png_bytes


@pytest.fixture
def channel():
    return Channel(url="http://stream/cnn.m3u8", name="CNN", logo="http://logos.example/cnn.png")


class TestDecodeLogo:

    def test_scales_to_fixed_size(self, tmp_path, png_bytes):
        path = tmp_path / "logo"
        path.write_bytes(png_bytes)

        image = decode_logo(path)
        assert image.size == (80, 80)
        assert image.mode == "RGBA"

    def test_custom_size(self, tmp_path, png_bytes):
        path = tmp_path / "logo"
        path.write_bytes(png_bytes)
        assert decode_logo(path, (32, 32)).size == (32, 32)

    def test_corrupt_bytes(self, tmp_path):
        path = tmp_path / "logo"
        path.write_bytes(b"<html>not an image</html>")
        with pytest.raises(LogoDecodeError):
            decode_logo(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(LogoDecodeError):
            decode_logo(tmp_path / "missing")

    def test_png_round_trip_for_widgets(self):
        data = to_png_bytes(Image.new("RGBA", (80, 80)))
        assert Image.open(io.BytesIO(data)).size == (80, 80)


class TestLogoLoader:

    async def test_decoded_logo_is_memoized(self, tmp_path, png_bytes, channel):
        fetcher = CountingFetcher(payload=png_bytes)
        loader = LogoLoader(ImageCache(cache_dir=str(tmp_path), fetcher=fetcher))

        first = await loader.get_logo(channel)
        second = await loader.get_logo(channel)

        assert first is not None
        assert first is second
        assert channel.decoded_logo is first
        assert first.size == (80, 80)
        assert fetcher.count == 1

    async def test_channel_without_logo(self, tmp_path, fetcher):
        loader = LogoLoader(ImageCache(cache_dir=str(tmp_path), fetcher=fetcher))
        assert await loader.get_logo(Channel(url="http://s", name="No logo")) is None
        assert fetcher.count == 0

    async def test_fetch_failure_gives_no_logo(self, tmp_path, channel):
        loader = LogoLoader(ImageCache(cache_dir=str(tmp_path), fetcher=CountingFetcher(fail=True)))
        assert await loader.get_logo(channel) is None
        assert channel.decoded_logo is None

    async def test_decode_failure_keeps_file_and_retries(self, tmp_path, png_bytes, channel):
        fetcher = CountingFetcher(payload=b"garbage")
        cache = ImageCache(cache_dir=str(tmp_path), fetcher=fetcher)
        loader = LogoLoader(cache)

        assert await loader.get_logo(channel) is None
        cached = cache.get_cached(channel.logo)
        assert cached is not None
        assert channel.decoded_logo is None

        # the bytes become usable; the next request decodes them without refetching
        cached.write_bytes(png_bytes)
        image = await loader.get_logo(channel)

        assert image is not None
        assert channel.decoded_logo is image
        assert fetcher.count == 1

    async def test_shared_logo_url_fetched_once_for_many_channels(self, tmp_path, png_bytes):
        fetcher = CountingFetcher(payload=png_bytes)
        loader = LogoLoader(ImageCache(cache_dir=str(tmp_path), fetcher=fetcher), size=(40, 40))
        channels = [Channel(url=f"http://s/{i}", logo="http://logos.example/shared.png") for i in range(3)]

        for ch in channels:
            assert (await loader.get_logo(ch)).size == (40, 40)

        assert fetcher.count == 1
        # each channel owns its own decoded bitmap
        assert len({id(ch.decoded_logo) for ch in channels}) == 3
