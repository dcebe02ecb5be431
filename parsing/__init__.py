"""Model response parsing with per-slot template fallback."""

from .json_extract import extract_json_object, find_balanced_object
from .response_parser import ResponseParser, extract_fenced_blocks, extract_json_slots

__all__ = [
    "extract_json_object",
    "find_balanced_object",
    "ResponseParser",
    "extract_fenced_blocks",
    "extract_json_slots",
]
