"""Flatten the nested chapter tree into linear pages."""

from collections.abc import Iterator, Sequence

from docview.models.book import ChapterNode


def flatten_chapters(roots: Sequence[ChapterNode]) -> list[ChapterNode]:
    """Pre-order flatten: each node, then its sub-chapters in order.

    Nodes are not deduplicated; a node reachable twice appears twice.
    """
    return [node for node, _ in walk_chapters(roots)]


def walk_chapters(
    roots: Sequence[ChapterNode], level: int = 0
) -> Iterator[tuple[ChapterNode, int]]:
    """Yield (node, depth) pairs in pre-order."""
    for node in roots:
        yield node, level
        yield from walk_chapters(node.sub_chapters, level + 1)
