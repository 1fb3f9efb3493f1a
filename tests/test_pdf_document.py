from __future__ import annotations

from pathlib import Path

import pytest

from conftest import make_pdf
from docview.core.pdf_document import PdfDocument, validate_pdf
from docview.errors import FormatInitError


def test_open_reports_pages(pdf_path: Path) -> None:
    with PdfDocument.open(pdf_path) as document:
        assert document.page_count == 2
        page = document.get_page(1)
        assert page.width == pytest.approx(200)
        assert page.height == pytest.approx(300)
        page.close()


def test_render_quarter_size(pdf_path: Path) -> None:
    with PdfDocument.open(pdf_path) as document:
        page = document.get_page(2)
        thumb = page.render(page.width / 4, page.height / 4)
        page.close()

    assert (thumb.width, thumb.height) == (50, 75)
    assert thumb.to_image().size == (50, 75)


def test_get_page_out_of_range(pdf_path: Path) -> None:
    with PdfDocument.open(pdf_path) as document:
        with pytest.raises(IndexError):
            document.get_page(3)
        with pytest.raises(IndexError):
            document.get_page(0)


def test_empty_file_is_rejected(tmp_path: Path) -> None:
    empty = tmp_path / "empty.pdf"
    empty.write_bytes(b"")
    with pytest.raises(FormatInitError, match="empty"):
        validate_pdf(empty)


def test_garbage_is_rejected(tmp_path: Path) -> None:
    garbage = tmp_path / "garbage.pdf"
    garbage.write_bytes(b"this is not a pdf at all")
    with pytest.raises(FormatInitError):
        PdfDocument.open(garbage)


def test_validate_returns_page_count(tmp_path: Path) -> None:
    assert validate_pdf(make_pdf(tmp_path / "five.pdf", pages=5)) == 5
