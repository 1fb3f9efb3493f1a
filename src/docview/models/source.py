"""Data models for document sources."""

from enum import Enum
from pathlib import Path
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict


class SourceKind(str, Enum):
    """Where the bytes of a document come from."""

    ASSET = "asset"
    FILE = "file"
    NETWORK = "network"


class DocumentType(str, Enum):
    """Declared document format."""

    PDF = "pdf"
    EPUB = "epub"


class DocumentSource(BaseModel):
    """Immutable reference to a document.

    ``headers`` is only meaningful for network sources.
    """

    model_config = ConfigDict(frozen=True)

    kind: SourceKind
    path: str
    headers: dict[str, str] | None = None

    @classmethod
    def asset(cls, path: str) -> "DocumentSource":
        return cls(kind=SourceKind.ASSET, path=path)

    @classmethod
    def file(cls, path: str | Path) -> "DocumentSource":
        return cls(kind=SourceKind.FILE, path=str(path))

    @classmethod
    def network(
        cls, url: str, headers: dict[str, str] | None = None
    ) -> "DocumentSource":
        return cls(kind=SourceKind.NETWORK, path=url, headers=headers)

    @property
    def filename(self) -> str:
        """Last path segment, used as the cache file name."""
        path = self.path
        if self.kind == SourceKind.NETWORK:
            path = urlsplit(path).path
        return path.rstrip("/").split("/")[-1]


class LocalDocument(BaseModel):
    """A document available as a local file."""

    model_config = ConfigDict(frozen=True)

    path: Path
    filename: str

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()
