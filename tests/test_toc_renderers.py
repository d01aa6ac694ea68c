"""Tests for the ToC renderers (html2epub.core.toc_renderers)."""

import json

from lxml import etree

from html2epub.core.toc_builder import build_toc_tree
from html2epub.core.toc_renderers import (
    NCX_NS,
    OPS_NS,
    XHTML_NS,
    render_json,
    render_ncx,
    render_text,
    render_xhtml,
)
from html2epub.models.toc import Heading, Page

NS = {"n": NCX_NS, "x": XHTML_NS}

PAGES = [
    Page(
        href="one.html",
        headings=[
            Heading(level=0, title="Book", href="one.html"),
            Heading(level=1, title="Chapter 1", href="one.html#c1"),
            Heading(level=2, title="Too deep", href="one.html#deep"),
        ],
    ),
    Page(
        href="two.html",
        headings=[Heading(level=1, title="Chapter 2", href="two.html#c2")],
    ),
]

GAP_PAGES = [
    Page(
        href="a.html",
        headings=[
            Heading(level=0, title="Book", href="a.html"),
            Heading(level=2, title="Sub", href="a.html#sub"),
        ],
    )
]


def parse(xml: str) -> etree._Element:
    return etree.fromstring(xml.encode("utf-8"))


class TestTextRenderer:
    def test_indented_listing(self):
        text = render_text(PAGES, depth=2)
        assert text == "\n    Book\n      Chapter 1\n      Chapter 2\n"

    def test_empty(self):
        assert render_text([], depth=3) == "\n"


class TestJsonRenderer:
    def test_nested_structure(self):
        data = json.loads(render_json(build_toc_tree(PAGES, depth=2)))
        assert data == [
            {
                "title": "Book",
                "href": "one.html",
                "children": [
                    {"title": "Chapter 1", "href": "one.html#c1", "children": []},
                    {"title": "Chapter 2", "href": "two.html#c2", "children": []},
                ],
            }
        ]

    def test_placeholder_has_no_href(self):
        data = json.loads(render_json(build_toc_tree(GAP_PAGES, depth=3)))
        placeholder = data[0]["children"][0]
        assert placeholder["title"] == ""
        assert "href" not in placeholder
        assert placeholder["children"][0]["title"] == "Sub"

    def test_deterministic(self):
        first = render_json(build_toc_tree(PAGES, depth=3))
        second = render_json(build_toc_tree(PAGES, depth=3))
        assert first == second

    def test_non_ascii_titles_are_kept(self):
        pages = [Page(href="a.html", headings=[Heading(level=0, title="Écrits", href="a.html")])]
        assert "Écrits" in render_json(build_toc_tree(pages, depth=1))


class TestNcxRenderer:
    def test_head_and_title(self):
        tree = build_toc_tree(PAGES, depth=2)
        root = parse(render_ncx(tree, "urn:uuid:1234", "Alice", depth=2))
        metas = {m.get("name"): m.get("content") for m in root.findall("n:head/n:meta", NS)}
        assert metas == {"dtb:uid": "urn:uuid:1234", "dtb:depth": "2"}
        assert root.findtext("n:docTitle/n:text", namespaces=NS) == "Alice"

    def test_play_order_is_preorder(self):
        tree = build_toc_tree(PAGES, depth=2)
        root = parse(render_ncx(tree, "id", "Alice", depth=2))
        points = root.findall(".//n:navPoint", NS)
        assert [p.findtext("n:navLabel/n:text", namespaces=NS) for p in points] == [
            "Book",
            "Chapter 1",
            "Chapter 2",
        ]
        assert [p.get("playOrder") for p in points] == ["1", "2", "3"]
        assert [p.get("id") for p in points] == ["nav_1", "nav_2", "nav_3"]
        assert points[1].find("n:content", NS).get("src") == "one.html#c1"

    def test_nesting(self):
        tree = build_toc_tree(PAGES, depth=2)
        root = parse(render_ncx(tree, "id", "Alice", depth=2))
        top = root.findall("n:navMap/n:navPoint", NS)
        assert len(top) == 1
        assert len(top[0].findall("n:navPoint", NS)) == 2

    def test_placeholder_points_to_first_linked_descendant(self):
        tree = build_toc_tree(GAP_PAGES, depth=3)
        root = parse(render_ncx(tree, "id", "Alice", depth=3))
        points = root.findall(".//n:navPoint", NS)
        assert [p.find("n:content", NS).get("src") for p in points] == [
            "a.html",
            "a.html#sub",
            "a.html#sub",
        ]

    def test_empty_tree(self):
        root = parse(render_ncx(build_toc_tree([], depth=3), "id", "Alice", depth=3))
        assert root.find("n:navMap", NS) is not None
        assert root.findall(".//n:navPoint", NS) == []


class TestXhtmlRenderer:
    def test_document_structure(self):
        xhtml = render_xhtml(build_toc_tree(PAGES, depth=2), "Alice")
        assert "<!DOCTYPE html>" in xhtml
        root = parse(xhtml)
        assert root.findtext("x:head/x:title", namespaces=NS) == "Alice"
        nav = root.find("x:body/x:nav", NS)
        assert nav.get(f"{{{OPS_NS}}}type") == "toc"

    def test_nested_lists(self):
        root = parse(render_xhtml(build_toc_tree(PAGES, depth=2), "Alice"))
        top = root.findall("x:body/x:nav/x:ol/x:li", NS)
        assert len(top) == 1
        assert top[0].find("x:a", NS).get("href") == "one.html"
        links = top[0].findall("x:ol/x:li/x:a", NS)
        assert [(a.text, a.get("href")) for a in links] == [
            ("Chapter 1", "one.html#c1"),
            ("Chapter 2", "two.html#c2"),
        ]

    def test_unlinked_nodes_use_span(self):
        root = parse(render_xhtml(build_toc_tree(GAP_PAGES, depth=3), "Alice"))
        placeholder = root.find("x:body/x:nav/x:ol/x:li/x:ol/x:li", NS)
        assert placeholder.find("x:a", NS) is None
        assert placeholder.find("x:span", NS) is not None
        assert placeholder.find("x:ol/x:li/x:a", NS).get("href") == "a.html#sub"

    def test_charset(self):
        xhtml = render_xhtml(build_toc_tree(PAGES, depth=2), "Alice", charset="UTF-8")
        root = parse(xhtml)
        assert root.find("x:head/x:meta", NS).get("charset") == "UTF-8"
