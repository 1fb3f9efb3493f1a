"""Cache directory holding downloaded and bundled documents."""

import shutil
from pathlib import Path


class DocumentCache:
    """Stores acquired documents under ``<app_data_dir>/.docview_cache``.

    That directory is the data directory sources are resolved into; every
    entry lives directly at ``<cache_root>/<basename>``.

    Entries are keyed by file name only: two sources sharing a basename
    overwrite each other, last writer wins.
    """

    CACHE_DIR = ".docview_cache"

    def __init__(self, app_data_dir: Path):
        self.cache_root = app_data_dir / self.CACHE_DIR

    def _ensure_cache_dir(self) -> None:
        """Create cache directory if it doesn't exist."""
        self.cache_root.mkdir(parents=True, exist_ok=True)

    def path_for(self, filename: str) -> Path:
        """Return the cache location for a file name."""
        return self.cache_root / filename

    def store(self, filename: str, data: bytes) -> Path:
        """Write bytes to the cache, replacing any previous entry."""
        self._ensure_cache_dir()
        path = self.path_for(filename)
        path.write_bytes(data)
        return path

    def clear_cache(self) -> int:
        """Clear all cached documents. Returns number of entries cleared."""
        if not self.cache_root.exists():
            return 0

        count = len(list(self.cache_root.iterdir()))
        shutil.rmtree(self.cache_root)
        return count

    def list_cached(self) -> list[tuple[str, int]]:
        """List cached documents. Returns list of (name, size in bytes)."""
        if not self.cache_root.exists():
            return []
        return sorted(
            (p.name, p.stat().st_size)
            for p in self.cache_root.iterdir()
            if p.is_file()
        )
