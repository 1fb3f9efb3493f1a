"""Convert chapter markup into ordered text and image blocks."""

import logging
import re
from collections.abc import Mapping
from urllib.parse import unquote

from docview.models.content import ContentBlock, ImageBlock, TextBlock

log = logging.getLogger(__name__)

IMG_TAG = re.compile(
    r"""<img[^>]+src=(?:"([^">]+)"|'([^'>]+)')[^>]*>""", re.IGNORECASE
)

COVER_MARKERS = ("cover", "title-page", "frontcover")

ENTITIES = {
    "&nbsp;": " ",
    "&quot;": '"',
    "&apos;": "'",
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&#160;": " ",
}
_ENTITY_PATTERN = re.compile("|".join(re.escape(e) for e in ENTITIES))

_WHITESPACE = re.compile(r"\s+")
_PARAGRAPH_OPEN = re.compile(r"<p(?:\s[^>]*)?>", re.IGNORECASE)
_PARAGRAPH_CLOSE = re.compile(r"</p\s*>", re.IGNORECASE)
_LINE_BREAK = re.compile(r"<br(?:\s[^>]*)?/?>", re.IGNORECASE)
_DIV_OPEN = re.compile(r"<div(?:\s[^>]*)?>", re.IGNORECASE)
_DIV_CLOSE = re.compile(r"</div\s*>", re.IGNORECASE)
# Matched image tags never reach text segments; leftovers without a src are dropped.
_OTHER_TAGS = re.compile(r"<[^>]+>")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_RELATIVE_PREFIX = re.compile(r"^(?:\.\.?/)+")


def decode_entities(text: str) -> str:
    """Decode the fixed entity table in a single pass.

    ``&amp;lt;`` becomes ``&lt;``, never ``<``.
    """
    return _ENTITY_PATTERN.sub(lambda m: ENTITIES[m.group(0)], text)


def is_cover_image(tag: str) -> bool:
    """Whether an image tag marks a cover or title page."""
    lowered = tag.lower()
    return any(marker in lowered for marker in COVER_MARKERS)


def _shared_suffix(a: str, b: str) -> int:
    count = 0
    for x, y in zip(reversed(a), reversed(b)):
        if x != y:
            break
        count += 1
    return count


class MarkupBlockParser:
    """Split chapter HTML into text runs and resolved images.

    Parsing never raises for malformed markup; the worst case is an
    empty block list.
    """

    def parse(
        self, html: str, images: Mapping[str, bytes] | None = None
    ) -> list[ContentBlock]:
        """Parse markup into content blocks in presentation order.

        A resolved cover image discards everything else and becomes the
        only block of the chapter.
        """
        images = images or {}
        blocks: list[ContentBlock] = []
        position = 0

        for match in IMG_TAG.finditer(html):
            self._append_text(blocks, html[position : match.start()])
            position = match.end()

            src = match.group(1) or match.group(2)
            data = self.resolve_image(src, images)
            if data is None:
                log.debug(f"Unresolved image reference: {src}")
                continue

            block = ImageBlock(data=data, is_cover=is_cover_image(match.group(0)))
            if block.is_cover:
                return [block]
            blocks.append(block)

        self._append_text(blocks, html[position:])
        return blocks

    def resolve_image(self, src: str, images: Mapping[str, bytes]) -> bytes | None:
        """Find the image whose path contains ``src`` or is contained by it.

        When several paths match, the one sharing the longest suffix with
        ``src`` wins; remaining ties go to the first in mapping order.
        """
        decoded = _RELATIVE_PREFIX.sub("", unquote(src))
        if not decoded:
            return None

        candidates = [
            (key, data)
            for key, data in images.items()
            if key and (key in decoded or decoded in key)
        ]
        if not candidates:
            return None

        _, data = max(candidates, key=lambda item: _shared_suffix(item[0], decoded))
        return data

    def format_text(self, content: str) -> str:
        """Turn a markup fragment into display text."""
        content = _WHITESPACE.sub(" ", content)

        # Block-level tags become line breaks
        content = _PARAGRAPH_OPEN.sub("\n\n", content)
        content = _PARAGRAPH_CLOSE.sub("", content)
        content = _LINE_BREAK.sub("\n", content)
        content = _DIV_OPEN.sub("\n", content)
        content = _DIV_CLOSE.sub("", content)

        content = _OTHER_TAGS.sub("", content)

        # Entities last so escaped angle brackets stay text
        content = decode_entities(content)

        lines = [line.strip() for line in content.split("\n")]
        content = _EXCESS_NEWLINES.sub("\n\n", "\n".join(lines))
        return content.strip("\n")

    def _append_text(self, blocks: list[ContentBlock], segment: str) -> None:
        if not segment:
            return
        text = self.format_text(segment)
        if text:
            blocks.append(TextBlock(text=text))
