"""Lazy, memoized decoding of channel logos into fixed-size bitmaps."""
import io
import logging
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image

from ..errors import LogoDecodeError
from ..models.channel import Channel
from .image_cache import ImageCache

logger = logging.getLogger(__name__)

DEFAULT_LOGO_SIZE = (80, 80)


def decode_logo(path: Path, size: Tuple[int, int] = DEFAULT_LOGO_SIZE) -> Image.Image:
    """Decode an image file and scale it to exactly ``size``."""
    try:
        with Image.open(path) as image:
            image.load()
            return image.convert("RGBA").resize(size, Image.Resampling.BILINEAR)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise LogoDecodeError(f"Cannot decode logo {path}: {e}") from e


def to_png_bytes(image: Image.Image) -> bytes:
    """Encode a decoded logo as PNG, for widgets that take raw image data."""
    output = io.BytesIO()
    image.save(output, format="PNG")
    return output.getvalue()


class LogoLoader:
    """Fetches channel logos through an ImageCache and decodes each one once.

    A decoded logo is stored on the channel and reused for as long as the
    channel lives. Failures are not remembered: the next request tries again,
    and the cached file is left in place.
    """

    def __init__(self, cache: ImageCache, size: Tuple[int, int] = DEFAULT_LOGO_SIZE):
        self.cache = cache
        self.size = size

    async def get_logo(self, channel: Channel) -> Optional[Image.Image]:
        if channel.decoded_logo is not None:
            return channel.decoded_logo
        if not channel.logo:
            return None

        path = await self.cache.resolve(channel.logo)
        if path is None:
            return None
        if channel.decoded_logo is not None:
            # decoded by another task while we waited on the cache
            return channel.decoded_logo

        try:
            image = decode_logo(path, self.size)
        except LogoDecodeError as e:
            logger.debug("%s", e)
            return None

        channel.decoded_logo = image
        return image
