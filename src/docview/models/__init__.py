"""Data models."""

from docview.models.book import ChapterNode, EpubBook
from docview.models.content import ContentBlock, ImageBlock, TextBlock
from docview.models.source import (
    DocumentSource,
    DocumentType,
    LocalDocument,
    SourceKind,
)
from docview.models.thumbnail import Thumbnail

__all__ = [
    # Source models
    "SourceKind",
    "DocumentType",
    "DocumentSource",
    "LocalDocument",
    # Book models
    "ChapterNode",
    "EpubBook",
    # Content models
    "TextBlock",
    "ImageBlock",
    "ContentBlock",
    # Thumbnail models
    "Thumbnail",
]
