"""Viewer configuration."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class PlaceholderStyle:
    """Look of the synthesized EPUB chapter thumbnails."""

    width: int = 150
    height: int = 200
    background: str = "#ffffff"
    foreground: str = "#333333"
    accent: str = "#1e88e5"
    padding: int = 8
    max_excerpt_lines: int = 8
    max_excerpt_chars: int = 400


@dataclass
class ViewerConfig:
    """Configuration for loading and thumbnailing a document."""

    app_data_dir: Path = field(default_factory=lambda: Path.home() / ".docview")
    asset_root: Path = field(default_factory=lambda: Path("."))
    show_thumbnails: bool = True
    thumbnail_scale: float = 0.25
    request_timeout: float = 60.0
    placeholder: PlaceholderStyle = field(default_factory=PlaceholderStyle)
