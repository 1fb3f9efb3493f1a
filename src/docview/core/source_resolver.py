"""Turn a DocumentSource into a local file."""

import asyncio
import logging
from pathlib import Path

import requests

from docview.cache.manager import DocumentCache
from docview.errors import AcquisitionError
from docview.models.source import DocumentSource, LocalDocument, SourceKind

log = logging.getLogger(__name__)


class AssetBundle:
    """Read-only bundle of documents shipped with the application."""

    def __init__(self, root: Path):
        self.root = root

    def load(self, path: str) -> bytes:
        """Return the bytes of a bundled resource.

        Raises:
            FileNotFoundError: If the resource does not exist
        """
        resource = self.root / path
        if not resource.is_file():
            raise FileNotFoundError(f"Asset not found: {path}")
        return resource.read_bytes()


class SourceResolver:
    """Acquire document bytes and place them where the opener can read them.

    Asset and network sources are (re)written into the cache on every
    call. File sources are returned in place, no copy is made.
    """

    def __init__(
        self,
        cache: DocumentCache,
        assets: AssetBundle,
        session: requests.Session | None = None,
        timeout: float = 60.0,
    ):
        self.cache = cache
        self.assets = assets
        self.session = session or requests.Session()
        self.timeout = timeout

    async def resolve(self, source: DocumentSource) -> LocalDocument:
        """Resolve a source without blocking the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.resolve_sync, source)

    def resolve_sync(self, source: DocumentSource) -> LocalDocument:
        """Resolve a source to a local document.

        Raises:
            AcquisitionError: On any I/O or transport failure
        """
        filename = source.filename
        log.info(f"Acquiring {source.kind.value} source: {source.path}")

        if source.kind == SourceKind.FILE:
            path = Path(source.path)
            if not path.is_file():
                raise AcquisitionError(f"file not found: {source.path}")
            return LocalDocument(path=path, filename=filename)

        if source.kind == SourceKind.ASSET:
            try:
                data = self.assets.load(source.path)
            except OSError as e:
                raise AcquisitionError(f"asset unavailable: {e}") from e
        else:
            data = self._download(source)

        try:
            path = self.cache.store(filename, data)
        except OSError as e:
            raise AcquisitionError(f"could not write cache file: {e}") from e

        log.info(f"Cached {len(data):,} bytes at {path}")
        return LocalDocument(path=path, filename=filename)

    def _download(self, source: DocumentSource) -> bytes:
        try:
            response = self.session.get(
                source.path, headers=source.headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise AcquisitionError(f"download failed: {e}") from e

        if response.status_code != 200:
            raise AcquisitionError("download failed", status_code=response.status_code)
        return response.content
