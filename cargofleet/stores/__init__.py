"""Persistence helpers for cached analysis results."""

from .scan_cache import ScanCache

__all__ = ["ScanCache"]
