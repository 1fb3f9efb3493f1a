"""EPUB reading using ebooklib."""

import logging
import os
import tempfile
import warnings

import ebooklib
from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning
from ebooklib import epub

from docview.errors import FormatInitError
from docview.models.book import ChapterNode, EpubBook

# Suppress XML parsing warnings - EPUB files often use XHTML
warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)

log = logging.getLogger(__name__)

IMAGE_TYPES = (ebooklib.ITEM_IMAGE, ebooklib.ITEM_COVER)


def read_book(data: bytes) -> EpubBook:
    """Parse EPUB bytes into a chapter tree and image map.

    Raises:
        FormatInitError: If the bytes are not a readable EPUB container
    """
    # ebooklib wants a file name; spool the bytes to disk for the read.
    handle, spool_path = tempfile.mkstemp(suffix=".epub")
    try:
        with os.fdopen(handle, "wb") as f:
            f.write(data)
        try:
            book = epub.read_epub(spool_path)
        except Exception as e:
            raise FormatInitError(f"EPUB could not be parsed: {e}") from e
    finally:
        os.unlink(spool_path)

    return EpubReader(book).read()


class EpubReader:
    """Build docview models from an ebooklib book."""

    def __init__(self, book: epub.EpubBook):
        self.book = book

    def read(self) -> EpubBook:
        chapters = self._parse_toc_recursive(self.book.toc)
        if not chapters:
            log.info("EPUB has no navigation; using spine order")
            chapters = self._chapters_from_spine()

        return EpubBook(
            title=self._get_title(),
            chapters=chapters,
            images_by_path=self._get_images(),
        )

    def _get_title(self) -> str:
        title = self.book.get_metadata("DC", "title")
        return title[0][0] if title else "Unknown Title"

    def _parse_toc_recursive(self, toc_items) -> list[ChapterNode]:
        """Recursively convert navigation entries to chapter nodes."""
        nodes = []

        for item in toc_items:
            if isinstance(item, tuple):
                # Section with children: (Section, [children])
                section, children = item
                nodes.append(
                    ChapterNode(
                        title=section.title or None,
                        html_content=self._content_for_href(section.href),
                        sub_chapters=self._parse_toc_recursive(children),
                    )
                )
            elif isinstance(item, list):
                nodes.extend(self._parse_toc_recursive(item))
            else:
                nodes.append(
                    ChapterNode(
                        title=item.title or None,
                        html_content=self._content_for_href(item.href),
                    )
                )

        return nodes

    def _chapters_from_spine(self) -> list[ChapterNode]:
        nodes = []
        for item_id, _linear in self.book.spine:
            item = self.book.get_item_with_id(item_id)
            if item is None or item.get_type() != ebooklib.ITEM_DOCUMENT:
                continue
            content = _decode(item.get_content())
            nodes.append(
                ChapterNode(
                    title=self._extract_title_from_content(content),
                    html_content=content,
                )
            )
        return nodes

    def _content_for_href(self, href: str | None) -> str | None:
        if not href:
            return None
        item = self.book.get_item_with_href(href.split("#")[0])
        if item is None:
            log.debug(f"Navigation points at missing document: {href}")
            return None
        return _decode(item.get_content())

    def _get_images(self) -> dict[str, bytes]:
        return {
            item.get_name(): item.get_content()
            for item in self.book.get_items()
            if item.get_type() in IMAGE_TYPES
        }

    def _extract_title_from_content(self, content: str) -> str | None:
        """Try to extract title from HTML content."""
        try:
            soup = BeautifulSoup(content, "lxml")
        except Exception:
            return None
        # Try h1 first, then h2, then title tag
        for tag in ["h1", "h2", "title"]:
            element = soup.find(tag)
            if element:
                text = element.get_text(strip=True)
                if text:
                    return text
        return None


def _decode(content: bytes) -> str:
    return content.decode("utf-8", errors="replace")
