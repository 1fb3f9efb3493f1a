"""Document acquisition, pagination and thumbnails for PDF/EPUB viewers."""

__version__ = "0.1.0"
