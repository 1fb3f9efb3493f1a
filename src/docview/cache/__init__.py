"""Local document cache."""

from docview.cache.manager import DocumentCache

__all__ = ["DocumentCache"]
