"""Fold per-page heading sequences into a single ToC tree."""

import logging
from collections.abc import Iterator

from html2epub.models.toc import ROOT, Heading, Page, TocNode, TocTree

log = logging.getLogger(__name__)


def iter_headings(pages: list[Page], depth: int) -> Iterator[tuple[Page, Heading]]:
    """Yield (page, heading) in document order, skipping levels >= depth."""
    for page in pages:
        for heading in page.headings:
            if heading.level < depth:
                yield page, heading


def build_toc_tree(pages: list[Page], depth: int, strict: bool = False) -> TocTree:
    """Build the ToC tree shared by every tree renderer.

    ``cursor`` is the arena index of the node that receives headings of
    ``current_level``, the level of the last inserted heading. A heading
    more than one level deeper than the previous one, or one whose parent
    does not exist yet, is non-contiguous: strict mode drops it, lenient
    mode inserts one placeholder node per missing level.
    """
    tree = TocTree()
    cursor = ROOT
    current_level = 0

    for page, heading in iter_headings(pages, depth):
        level = heading.level

        if level < current_level:
            cursor = ROOT
            for _ in range(level):
                cursor = tree.last_child(cursor)
        elif level > current_level:
            if level > current_level + 1 or tree.last_child(cursor) is None:
                message = (
                    f"non-contiguous heading (level {level}) in {page.href}: "
                    f"{heading.title}"
                )
                log.warning(message)
                tree.warnings.append(message)
                if strict:
                    continue
            cursor = _descend(tree, cursor, level - current_level, page.href)

        tree.add(
            cursor,
            TocNode(
                title=heading.title,
                href=heading.href,
                level=level,
                page_href=page.href,
            ),
        )
        current_level = level

    return tree


def _descend(tree: TocTree, cursor: int, steps: int, page_href: str) -> int:
    """Move the cursor ``steps`` levels down through the last children."""
    for _ in range(steps):
        child = tree.last_child(cursor)
        if child is None:
            child = tree.add(
                cursor,
                TocNode(
                    level=tree.nodes[cursor].level + 1,
                    page_href=page_href,
                    placeholder=True,
                ),
            )
        cursor = child
    return cursor
