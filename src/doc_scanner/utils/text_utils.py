"""Text processing utilities."""

from __future__ import annotations

import re


def truncate_text(text: str, max_length: int, suffix: str = "...") -> str:
    """Truncate text to maximum length with suffix."""
    if len(text) <= max_length:
        return text

    # Try to truncate at word boundary
    truncated = text[:max_length - len(suffix)]
    last_space = truncated.rfind(' ')

    if last_space > max_length // 2:  # Only truncate at word if it's not too short
        truncated = truncated[:last_space]

    return truncated + suffix


def strip_marker(text: str, pattern: re.Pattern[str]) -> str:
    """Remove the first match of a marker pattern and trim the result."""
    return pattern.sub('', text, count=1).strip()
