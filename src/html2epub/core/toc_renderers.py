"""Render the table of contents as text, JSON, NCX (EPUB2) or XHTML (EPUB3).

- txt   : quick-and-dirty flat listing of the headings
- json  : logical structure, for machine consumption
- ncx   : EPUB2 index, ugly but keeps old readers happy
- xhtml : EPUB3 navigation document, human-readable

The text renderer works on the flat page list; the three others serialize
the tree built by ``build_toc_tree`` and never re-derive its shape.
"""

import json
from itertools import count

from lxml import etree

from html2epub.core.toc_builder import iter_headings
from html2epub.models.toc import ROOT, Page, TocTree

NCX_NS = "http://www.daisy.org/z3986/2005/ncx/"
XHTML_NS = "http://www.w3.org/1999/xhtml"
OPS_NS = "http://www.idpf.org/2007/ops"

NAV_STYLE = "nav ol { list-style-type: none; }"


def _serialize(root: etree._Element, charset: str, doctype: str | None = None) -> str:
    data = etree.tostring(
        root,
        xml_declaration=True,
        encoding=charset,
        pretty_print=True,
        doctype=doctype,
    )
    return data.decode(charset)


def render_text(pages: list[Page], depth: int) -> str:
    """Indented heading titles in document order, one per line."""
    lines = [
        "\n    " + "  " * heading.level + heading.title
        for _, heading in iter_headings(pages, depth)
    ]
    return "".join(lines) + "\n"


def render_json(tree: TocTree) -> str:
    """Nested {title, href, children} objects; href is omitted when unknown."""
    entries = [entry.model_dump(exclude_none=True) for entry in tree.entries()]
    return json.dumps(entries, indent=2, ensure_ascii=False)


def render_ncx(
    tree: TocTree,
    identifier: str,
    title: str,
    depth: int,
    charset: str = "UTF-8",
) -> str:
    """EPUB2 navigation index.

    navPoints get a playOrder in pre-order traversal, starting at 1. NCX
    requires a target for every navPoint: unlinked nodes point at their
    first linked descendant, or at the page they come from.
    """

    def q(tag: str) -> str:
        return f"{{{NCX_NS}}}{tag}"

    ncx = etree.Element(q("ncx"), nsmap={None: NCX_NS}, version="2005-1")
    head = etree.SubElement(ncx, q("head"))
    etree.SubElement(head, q("meta"), name="dtb:uid", content=identifier)
    etree.SubElement(head, q("meta"), name="dtb:depth", content=str(depth))
    doc_title = etree.SubElement(ncx, q("docTitle"))
    etree.SubElement(doc_title, q("text")).text = title
    nav_map = etree.SubElement(ncx, q("navMap"))

    play_order = count(1)

    def add_points(parent: etree._Element, index: int) -> None:
        for child in tree.nodes[index].children:
            node = tree.nodes[child]
            order = next(play_order)
            point = etree.SubElement(
                parent, q("navPoint"), id=f"nav_{order}", playOrder=str(order)
            )
            label = etree.SubElement(point, q("navLabel"))
            etree.SubElement(label, q("text")).text = node.title
            src = tree.first_href(child) or node.page_href or ""
            etree.SubElement(point, q("content"), src=src)
            add_points(point, child)

    add_points(nav_map, ROOT)
    return _serialize(ncx, charset)


def render_xhtml(tree: TocTree, title: str, charset: str = "UTF-8") -> str:
    """EPUB3 navigation document: nested <ol> lists inside <nav epub:type="toc">."""

    def q(tag: str) -> str:
        return f"{{{XHTML_NS}}}{tag}"

    html = etree.Element(q("html"), nsmap={None: XHTML_NS, "epub": OPS_NS})
    head = etree.SubElement(html, q("head"))
    etree.SubElement(head, q("meta"), charset=charset)
    etree.SubElement(head, q("title")).text = title
    etree.SubElement(head, q("style"), type="text/css").text = NAV_STYLE
    body = etree.SubElement(html, q("body"))
    nav = etree.SubElement(body, q("nav"), {f"{{{OPS_NS}}}type": "toc"})

    def add_items(ol: etree._Element, index: int) -> None:
        for child in tree.nodes[index].children:
            node = tree.nodes[child]
            li = etree.SubElement(ol, q("li"))
            if node.href:
                etree.SubElement(li, q("a"), href=node.href).text = node.title
            else:
                etree.SubElement(li, q("span")).text = node.title
            if node.children:
                add_items(etree.SubElement(li, q("ol")), child)

    add_items(etree.SubElement(nav, q("ol")), ROOT)
    return _serialize(html, charset, doctype="<!DOCTYPE html>")
