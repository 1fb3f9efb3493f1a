"""Data models for EPUB book structure."""

from pydantic import BaseModel, Field


class ChapterNode(BaseModel):
    """One entry of the chapter tree; sibling order is presentation order."""

    title: str | None = None
    html_content: str | None = None
    sub_chapters: list["ChapterNode"] = Field(default_factory=list)


class EpubBook(BaseModel):
    """Parsed EPUB: chapter tree plus every image keyed by its path."""

    title: str = "Unknown Title"
    chapters: list[ChapterNode] = Field(default_factory=list)
    images_by_path: dict[str, bytes] = Field(default_factory=dict)
