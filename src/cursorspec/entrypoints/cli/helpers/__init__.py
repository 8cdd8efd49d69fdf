"""CLI helpers for cursorspec.

Logger-level option parsing, credential-safe connector descriptions, and
stderr status lines with emoji/ASCII fallbacks.
"""

from .log_level_parser import parse_log_level
from .targets import describe_target, sanitize_url
from .terminal import error, success, warn

__all__ = [
    "describe_target",
    "error",
    "parse_log_level",
    "sanitize_url",
    "success",
    "warn",
]
