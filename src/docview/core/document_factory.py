"""Format-specific initialization of acquired documents."""

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from docview.config import ViewerConfig
from docview.core.chapters import flatten_chapters, walk_chapters
from docview.core.epub_reader import read_book
from docview.core.markup_parser import MarkupBlockParser
from docview.core.pdf_document import PdfDocument
from docview.core.thumbnails import (
    EpubThumbnailProducer,
    PdfThumbnailProducer,
    ThumbnailCache,
)
from docview.models.book import ChapterNode, EpubBook
from docview.models.content import ContentBlock
from docview.models.source import DocumentType, LocalDocument

log = logging.getLogger(__name__)


class OpenedDocument(ABC):
    """A document ready for paging, with its thumbnail cache."""

    def __init__(self, total_pages: int, title: str | None = None):
        self.total_pages = total_pages
        self.title = title
        self.thumbnails = ThumbnailCache(total_pages)

    @abstractmethod
    def start_thumbnails(self, config: ViewerConfig) -> None:
        """Fire thumbnail work for every page."""
        pass

    @abstractmethod
    def content_blocks(self, index: int) -> list[ContentBlock]:
        """Content of one page, recomputed on every call."""
        pass

    def outline(self) -> list[tuple[str | None, int]]:
        """(title, depth) per page, in page order."""
        return [(None, 0)] * self.total_pages

    def close(self) -> None:
        pass


class OpenedPdf(OpenedDocument):
    """PDF pages; thumbnails reopen the file per page."""

    def __init__(self, path: Path, handle: PdfDocument):
        super().__init__(handle.page_count, handle.title)
        self.path = path
        self.handle: PdfDocument | None = handle

    def start_thumbnails(self, config: ViewerConfig) -> None:
        PdfThumbnailProducer(self.path, config.thumbnail_scale).start(self.thumbnails)

    def content_blocks(self, index: int) -> list[ContentBlock]:
        # PDF pages carry no markup
        return []

    def close(self) -> None:
        if self.handle is not None:
            self.handle.close()
            self.handle = None


class OpenedEpub(OpenedDocument):
    """EPUB chapters flattened into pages."""

    def __init__(self, book: EpubBook):
        self.book = book
        self.chapters: list[ChapterNode] = flatten_chapters(book.chapters)
        self.parser = MarkupBlockParser()
        super().__init__(len(self.chapters), book.title)

    def start_thumbnails(self, config: ViewerConfig) -> None:
        EpubThumbnailProducer(config.placeholder).start(self.thumbnails, self.chapters)

    def content_blocks(self, index: int) -> list[ContentBlock]:
        chapter = self.chapters[index - 1]
        return self.parser.parse(chapter.html_content or "", self.book.images_by_path)

    def outline(self) -> list[tuple[str | None, int]]:
        return [(node.title, level) for node, level in walk_chapters(self.book.chapters)]


class DocumentFactory:
    """Open a local document according to its declared type."""

    SUPPORTED_FORMATS = {
        ".epub": DocumentType.EPUB,
        ".pdf": DocumentType.PDF,
    }

    @classmethod
    async def open(
        cls, local: LocalDocument, document_type: DocumentType
    ) -> OpenedDocument:
        """Open without blocking the event loop.

        Raises:
            FormatInitError: If the file is not a valid document of that type
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, cls.open_sync, local, document_type)

    @classmethod
    def open_sync(
        cls, local: LocalDocument, document_type: DocumentType
    ) -> OpenedDocument:
        log.info(f"Opening {local.filename} as {document_type.value}")
        if document_type == DocumentType.PDF:
            return OpenedPdf(local.path, PdfDocument.open(local.path))
        return OpenedEpub(read_book(local.read_bytes()))

    @classmethod
    def detect_format(cls, path: str) -> DocumentType | None:
        """Detect document type from a path's extension."""
        suffix = Path(path.split("?")[0]).suffix.lower()
        return cls.SUPPORTED_FORMATS.get(suffix)
