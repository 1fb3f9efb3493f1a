from __future__ import annotations

import io
from pathlib import Path

import pytest
import pypdf
from ebooklib import epub
from PIL import Image


def make_pdf(path: Path, pages: int = 2, width: float = 200, height: float = 300) -> Path:
    writer = pypdf.PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=width, height=height)
    with path.open("wb") as f:
        writer.write(f)
    return path


def make_png(color: str = "red", size: tuple[int, int] = (4, 4)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def _chapter(title: str, file_name: str, body: str) -> epub.EpubHtml:
    item = epub.EpubHtml(title=title, file_name=file_name, lang="en")
    item.content = f"<html><head><title>{title}</title></head><body>{body}</body></html>"
    return item


def make_epub(path: Path) -> Path:
    """Intro, then Body with two nested sub-chapters; one image."""
    book = epub.EpubBook()
    book.set_identifier("docview-sample")
    book.set_title("Sample Book")
    book.set_language("en")

    intro = _chapter("Intro", "intro.xhtml", "<h1>Intro</h1><p>Hello &amp; welcome</p>")
    body = _chapter("Body", "body.xhtml", '<p>Body text</p><img src="images/pic.png" alt="pic"/>')
    sub1 = _chapter("Body.sub1", "sub1.xhtml", "<p>First part</p>")
    sub2 = _chapter("Body.sub2", "sub2.xhtml", "<p>Second part</p>")
    for item in (intro, body, sub1, sub2):
        book.add_item(item)

    image = epub.EpubImage()
    image.file_name = "images/pic.png"
    image.media_type = "image/png"
    image.content = make_png()
    book.add_item(image)

    book.toc = (
        epub.Link("intro.xhtml", "Intro", "intro"),
        (
            epub.Section("Body", "body.xhtml"),
            (
                epub.Link("sub1.xhtml", "Body.sub1", "sub1"),
                epub.Link("sub2.xhtml", "Body.sub2", "sub2"),
            ),
        ),
    )
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav", intro, body, sub1, sub2]

    epub.write_epub(str(path), book)
    return path


@pytest.fixture
def pdf_path(tmp_path: Path) -> Path:
    return make_pdf(tmp_path / "sample.pdf")


@pytest.fixture
def epub_path(tmp_path: Path) -> Path:
    return make_epub(tmp_path / "sample.epub")
