"""Utility helpers for the scanner."""

from .fileio import read_text_lines, read_yaml_text, write_json_text
from .http import CachedResponse, build_client, cached_get

__all__ = [
    "read_text_lines",
    "read_yaml_text",
    "write_json_text",
    "CachedResponse",
    "build_client",
    "cached_get",
]
