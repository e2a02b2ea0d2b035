# Services package
from .m3u_parser import M3UParser
from .image_cache import ImageCache, cache_key
from .logo_loader import LogoLoader, decode_logo
