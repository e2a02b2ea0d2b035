"""Channel model for IPTV playlist entries."""
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class Channel:
    """Represents one playable IPTV channel.

    Channels are identified by their position inside a group; two channels
    with the same url are allowed.
    """

    url: str
    name: str = ""
    logo: str = ""
    # Filled in by LogoLoader the first time the logo decodes successfully.
    decoded_logo: Optional[Any] = field(default=None, repr=False, compare=False)

    def release_logo(self):
        """Drop the decoded logo, closing the image if it supports it."""
        image = self.decoded_logo
        self.decoded_logo = None
        close = getattr(image, "close", None)
        if close is not None:
            close()
