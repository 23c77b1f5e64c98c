from .detail_loader import DetailFileError, DetailLoader, strip_verbose_fields
from .keep_alive import DEFAULT_KEEP_ALIVE, KeepAliveError, parse_keep_alive

__all__ = [
    "DEFAULT_KEEP_ALIVE",
    "DetailFileError",
    "DetailLoader",
    "KeepAliveError",
    "parse_keep_alive",
    "strip_verbose_fields",
]
