"""
Core module for cross-cutting concerns.

This module provides:
- Structured logging configuration
- Request tracing middleware
- Text normalization helpers
"""

from core.logging import configure_logging, get_logger
from core.utils import normalize_slug, spanish_sort_key, strip_diacritics

__all__ = [
    "configure_logging",
    "get_logger",
    "normalize_slug",
    "spanish_sort_key",
    "strip_diacritics",
]
