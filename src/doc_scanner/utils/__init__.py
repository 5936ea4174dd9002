"""
Utility functions and helpers for the document scanner
"""

from .text_utils import truncate_text, strip_marker

__all__ = [
    'truncate_text',
    'strip_marker',
]
