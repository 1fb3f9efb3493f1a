"""Per-page thumbnail production.

Every page or chapter gets its own asyncio task, fired immediately and
awaited lazily by whoever asks for it. A failing page resolves to None
and never disturbs its neighbours.
"""

import asyncio
import logging
import re
import textwrap
from collections.abc import Awaitable, Sequence
from pathlib import Path

from bs4 import BeautifulSoup
from PIL import Image, ImageDraw, ImageFont

from docview.config import PlaceholderStyle
from docview.core.pdf_document import PdfDocument
from docview.errors import ThumbnailRenderError
from docview.models.book import ChapterNode
from docview.models.thumbnail import Thumbnail

log = logging.getLogger(__name__)

UNTITLED = "Untitled Chapter"


class ThumbnailCache:
    """Write-once map from 1-based index to a pending or settled thumbnail."""

    def __init__(self, total: int):
        self.total = total
        self._entries: dict[int, asyncio.Future] = {}

    def put(self, index: int, future: asyncio.Future) -> None:
        if not 1 <= index <= self.total:
            raise IndexError(f"Thumbnail index {index} out of range 1..{self.total}")
        if index in self._entries:
            raise ValueError(f"Thumbnail {index} already scheduled")
        self._entries[index] = future

    def get(self, index: int) -> Awaitable[Thumbnail | None] | None:
        """Return the awaitable for an index.

        None means nothing was scheduled or the work was cancelled, for
        instance because the event loop that started it has shut down.
        """
        future = self._entries.get(index)
        if future is None or future.cancelled():
            return None
        return future

    def __contains__(self, index: int) -> bool:
        return index in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    async def settle(self) -> dict[int, Thumbnail | None]:
        """Wait for every scheduled thumbnail and return the results."""
        pending = [f for f in self._entries.values() if not f.done()]
        if pending:
            await asyncio.wait(pending)
        return {i: _outcome(self._entries[i]) for i in sorted(self._entries)}


def _outcome(future: asyncio.Future) -> Thumbnail | None:
    """Settled value of a thumbnail; cancelled or failed work counts as None."""
    if future.cancelled() or future.exception() is not None:
        return None
    return future.result()


class PdfThumbnailProducer:
    """Render downsampled page rasters, one independent document handle per page."""

    def __init__(self, path: Path, scale: float = 0.25):
        self.path = path
        self.scale = scale

    def start(self, cache: ThumbnailCache) -> None:
        """Schedule a render task for every page. Must run inside the event loop."""
        loop = asyncio.get_running_loop()
        for number in range(1, cache.total + 1):
            cache.put(number, loop.create_task(self._produce(number)))

    async def _produce(self, number: int) -> Thumbnail | None:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, self.render_page, number)
        except Exception as e:
            error = ThumbnailRenderError(number, str(e))
            log.warning(f"Error generating thumbnail: {error}")
            return None

    def render_page(self, number: int) -> Thumbnail:
        with PdfDocument.open(self.path, validate=False) as document:
            page = document.get_page(number)
            try:
                return page.render(page.width * self.scale, page.height * self.scale)
            finally:
                page.close()


class EpubThumbnailProducer:
    """Synthesize placeholder previews: ordinal, title and a text excerpt."""

    def __init__(self, style: PlaceholderStyle | None = None):
        self.style = style or PlaceholderStyle()

    def start(self, cache: ThumbnailCache, chapters: Sequence[ChapterNode]) -> None:
        loop = asyncio.get_running_loop()
        for index, chapter in enumerate(chapters, start=1):
            cache.put(index, loop.create_task(self._produce(index, chapter)))

    async def _produce(self, index: int, chapter: ChapterNode) -> Thumbnail | None:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, self.synthesize, index, chapter)
        except Exception as e:
            error = ThumbnailRenderError(index, str(e))
            log.warning(f"Error synthesizing placeholder: {error}")
            return None

    def synthesize(self, index: int, chapter: ChapterNode) -> Thumbnail:
        style = self.style
        image = Image.new("RGB", (style.width, style.height), style.background)
        draw = ImageDraw.Draw(image)
        font = ImageFont.load_default()

        _, top, _, bottom = font.getbbox("Ag")
        line_height = bottom - top + 3
        usable_width = style.width - 2 * style.padding
        chars_per_line = max(1, int(usable_width // max(1, draw.textlength("n", font=font))))

        y = style.padding
        draw.text((style.padding, y), f"Chapter {index}", fill=style.accent, font=font)
        y += line_height

        for line in textwrap.wrap(chapter.title or UNTITLED, chars_per_line)[:2]:
            draw.text((style.padding, y), line, fill=style.foreground, font=font)
            y += line_height

        y += 2
        draw.line(
            (style.padding, y, style.width - style.padding, y), fill=style.accent
        )
        y += 4

        excerpt = chapter_excerpt(chapter.html_content or "", style.max_excerpt_chars)
        for line in textwrap.wrap(excerpt, chars_per_line)[: style.max_excerpt_lines]:
            if y + line_height > style.height - style.padding:
                break
            draw.text((style.padding, y), line, fill=style.foreground, font=font)
            y += line_height

        return Thumbnail.from_image(image)


def chapter_excerpt(html: str, max_chars: int = 400) -> str:
    """Plain text of a chapter with tags stripped and entities decoded."""
    if not html.strip():
        return ""
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style", "head"]):
        tag.decompose()
    text = re.sub(r"\s+", " ", soup.get_text(separator=" ", strip=True))
    return text[:max_chars]
