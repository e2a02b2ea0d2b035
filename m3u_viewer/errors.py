"""Exception types raised by the playlist model, parser and logo cache."""
from typing import Optional


class M3UViewerError(Exception):
    """Base class for all viewer errors."""


class InvalidArgumentError(M3UViewerError, ValueError):
    """A required field was None or empty."""


class PlaylistReadError(M3UViewerError, OSError):
    """The playlist source could not be read.

    Keeps the underlying ``errno`` (when there is one) so the command line
    entry point can exit with it.
    """

    def __init__(self, source: str, reason: str, errno: Optional[int] = None):
        message = f"Failed to read playlist {source}: {reason}"
        if errno is None:
            super().__init__(message)
        else:
            super().__init__(errno, message)
        self.source = source
        self.reason = reason


class LogoDecodeError(M3UViewerError):
    """Logo bytes are present but could not be decoded."""
