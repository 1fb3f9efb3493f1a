"""PDF access: pypdf validates, pdfplumber renders."""

import logging
from pathlib import Path

# Suppress warnings about malformed PDF object references from PDF libraries
logging.getLogger("pdfminer").setLevel(logging.ERROR)
logging.getLogger("pypdf").setLevel(logging.ERROR)

import pdfplumber
import pypdf
from PIL import Image
from pypdf.errors import EmptyFileError, FileNotDecryptedError, PdfReadError

from docview.errors import FormatInitError
from docview.models.thumbnail import Thumbnail


def validate_pdf(path: Path) -> int:
    """Check that a file is a readable PDF and return its page count.

    Raises:
        FormatInitError: If the PDF is encrypted, empty, corrupt or has no pages
    """
    try:
        reader = pypdf.PdfReader(str(path))
        page_count = len(reader.pages)
    except FileNotDecryptedError as e:
        raise FormatInitError("PDF is encrypted. Please decrypt first.") from e
    except EmptyFileError as e:
        raise FormatInitError("PDF file is empty.") from e
    except PdfReadError as e:
        raise FormatInitError(f"PDF appears corrupted: {e}") from e

    if page_count == 0:
        raise FormatInitError("PDF has no pages.")
    return page_count


class PdfPage:
    """A single page of an open PDF."""

    def __init__(self, page):
        self._page = page

    @property
    def width(self) -> float:
        return float(self._page.width)

    @property
    def height(self) -> float:
        return float(self._page.height)

    def render(self, width: float, height: float) -> Thumbnail:
        """Rasterize the page to exactly ``width`` x ``height`` pixels."""
        size = (max(1, round(width)), max(1, round(height)))
        page_image = self._page.to_image(width=size[0])
        image = page_image.original.convert("RGB")
        if image.size != size:
            image = image.resize(size, Image.Resampling.LANCZOS)
        return Thumbnail.from_image(image)

    def close(self) -> None:
        self._page.close()


class PdfDocument:
    """Open PDF handle; pages are numbered from 1."""

    def __init__(self, path: Path, pdf):
        self.path = path
        self._pdf = pdf

    @classmethod
    def open(cls, path: Path, validate: bool = True) -> "PdfDocument":
        """Open a PDF file.

        Args:
            path: Path to the PDF file
            validate: Run pypdf checks first so bad files fail with a clear message

        Raises:
            FormatInitError: If the file cannot be opened as a PDF
        """
        if validate:
            validate_pdf(path)
        try:
            pdf = pdfplumber.open(str(path))
        except Exception as e:
            raise FormatInitError(f"PDF could not be opened: {e}") from e
        return cls(path, pdf)

    @property
    def title(self) -> str:
        """Metadata title, falling back to the file name."""
        title = (self._pdf.metadata or {}).get("Title")
        return str(title) if title else self.path.stem

    @property
    def page_count(self) -> int:
        return len(self._pdf.pages)

    def get_page(self, number: int) -> PdfPage:
        if not 1 <= number <= self.page_count:
            raise IndexError(f"Page {number} out of range 1..{self.page_count}")
        return PdfPage(self._pdf.pages[number - 1])

    def close(self) -> None:
        self._pdf.close()

    def __enter__(self) -> "PdfDocument":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
