"""Heading extraction from (X)HTML documents using BeautifulSoup."""

import logging
import warnings

from bs4 import BeautifulSoup, Tag, XMLParsedAsHTMLWarning

from html2epub.errors import ConfigError
from html2epub.models.toc import Heading, Page

# Suppress XML parsing warnings - source documents are often XHTML
warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)

log = logging.getLogger(__name__)

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")


def heading_rank(tag: str) -> int:
    """Return 1 for h1 ... 6 for h6."""
    try:
        return HEADING_TAGS.index(tag.lower()) + 1
    except ValueError:
        raise ConfigError(f"Not a heading tag: {tag!r}") from None


def parse_heading_selector(selector: str) -> list[str]:
    """Parse a heading selector into an ordered list of tags.

    Supports comma lists ("h1,h2,h3") and ranges ("h2..h4"), or both
    ("h1,h3..h5"). The result is ordered from topmost to bottommost tag.
    """
    tags: set[str] = set()
    for part in selector.split(","):
        part = part.strip().lower()
        if not part:
            continue
        if ".." in part:
            start, end = (p.strip() for p in part.split("..", 1))
            first, last = heading_rank(start), heading_rank(end)
            if first > last:
                first, last = last, first
            tags.update(HEADING_TAGS[first - 1 : last])
        else:
            heading_rank(part)
            tags.add(part)

    if not tags:
        raise ConfigError(f"Empty heading selector: {selector!r}")

    return sorted(tags, key=heading_rank)


def parse_document(markup: bytes | str) -> BeautifulSoup:
    """Parse a markup document into a navigable tree."""
    return BeautifulSoup(markup, "lxml")


def normalize_title(text: str) -> str:
    """Trim and collapse internal whitespace runs to a single space."""
    return " ".join(text.split())


def resolve_anchor(element: Tag) -> str | None:
    """Find an ID that can be used to deep-link to element.

    The element's own ID wins. Otherwise the walk climbs to the parent as
    long as no text precedes the current node within its parent: an
    ancestor ID is only safe when linking to it does not skip visible
    content.
    """
    node: Tag | None = element
    while node is not None:
        anchor = node.get("id")
        if anchor:
            return anchor
        leading_text = "".join(
            sibling.get_text() for sibling in node.find_previous_siblings()
        )
        if leading_text:
            return None
        node = node.parent
    return None


def extract_headings(
    soup: BeautifulSoup,
    href: str,
    tags: list[str],
    keep_all_headings: bool = False,
) -> list[Heading]:
    """Extract headings of a parsed document, in document order.

    Args:
        soup: Parsed document
        href: Document href inside the package
        tags: Heading tags, as returned by parse_heading_selector()
        keep_all_headings: Keep headings that have no usable link target

    Returns:
        Headings whose level is the position of their tag in ``tags``, so
        a selector with gaps ("h1,h3") still yields contiguous levels
    """
    headings: list[Heading] = []

    for index, element in enumerate(soup.select(",".join(tags))):
        anchor = resolve_anchor(element)
        if anchor:
            target = f"{href}#{anchor}"
        elif index == 0:
            # the first heading stands for the whole page
            target = href
        else:
            target = None

        if target is None and not keep_all_headings:
            log.debug("No anchor for heading in %s: %s", href, element.name)
            continue

        headings.append(
            Heading(
                level=tags.index(element.name.lower()),
                title=normalize_title(element.get_text()),
                href=target,
            )
        )

    return headings


def read_page(
    href: str,
    markup: bytes | str,
    tags: list[str],
    keep_all_headings: bool = False,
) -> Page:
    """Parse a document and extract its headings."""
    soup = parse_document(markup)
    return Page(href=href, headings=extract_headings(soup, href, tags, keep_all_headings))
