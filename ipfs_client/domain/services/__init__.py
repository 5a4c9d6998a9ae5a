"""Domain services package."""

from .url_builder import UrlBuilder, DEFAULT_QUERY
from .response_decoder import decode, decode_lines, require_field, require_path
from .reply_folds import find_peer_addresses, collect_lines, merge_added_files

__all__ = [
    "UrlBuilder",
    "DEFAULT_QUERY",
    "decode",
    "decode_lines",
    "require_field",
    "require_path",
    "find_peer_addresses",
    "collect_lines",
    "merge_added_files",
]
