"""Error taxonomy for document loading."""


class DocviewError(Exception):
    """Base class for all docview errors."""

    pass


class AcquisitionError(DocviewError):
    """Source unreachable, unreadable, or answered with a non-success status."""

    def __init__(self, reason: str, status_code: int | None = None):
        self.reason = reason
        self.status_code = status_code
        if status_code is not None:
            message = f"Failed to load document: {reason} (HTTP {status_code})"
        else:
            message = f"Failed to load document: {reason}"
        super().__init__(message)


class FormatInitError(DocviewError):
    """Opened bytes cannot be parsed as the declared document type."""

    pass


class ThumbnailRenderError(DocviewError):
    """A single page/chapter thumbnail could not be produced.

    Never escalates to the viewer; the affected index resolves to None.
    """

    def __init__(self, index: int, reason: str):
        self.index = index
        super().__init__(f"Thumbnail {index}: {reason}")
