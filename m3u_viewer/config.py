"""Runtime settings for the viewer."""
import os
from dataclasses import dataclass
from typing import Optional


ENV_PREFIX = "M3U_VIEWER_"

# Same client identity the logo fetcher has always sent.
DEFAULT_USER_AGENT = "Mozilla/5.0 (X11; Ubuntu; Linux x86_64; rv:81.0) Gecko/20100101 Firefox/81.0"


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(ENV_PREFIX + name, "").strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(ENV_PREFIX + name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass
class Settings:
    """Viewer settings, passed explicitly to whatever needs them."""

    cache_dir: str = "cache"  # relative to the working directory
    user_agent: str = DEFAULT_USER_AGENT
    fetch_timeout: float = 10.0
    playlist_timeout: float = 120.0
    logo_size: int = 80
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``M3U_VIEWER_*`` environment variables."""
        defaults = cls()
        return cls(
            cache_dir=os.environ.get(ENV_PREFIX + "CACHE_DIR") or defaults.cache_dir,
            user_agent=os.environ.get(ENV_PREFIX + "USER_AGENT") or defaults.user_agent,
            fetch_timeout=_env_float("FETCH_TIMEOUT", defaults.fetch_timeout),
            playlist_timeout=_env_float("PLAYLIST_TIMEOUT", defaults.playlist_timeout),
            logo_size=_env_int("LOGO_SIZE", defaults.logo_size),
            log_level=(os.environ.get(ENV_PREFIX + "LOG_LEVEL") or defaults.log_level).upper(),
            log_file=os.environ.get(ENV_PREFIX + "LOG_FILE") or None,
        )
