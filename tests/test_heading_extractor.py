"""Tests for heading extraction (html2epub.core.heading_extractor)."""

import pytest

from html2epub.core.heading_extractor import (
    extract_headings,
    heading_rank,
    normalize_title,
    parse_document,
    parse_heading_selector,
    read_page,
    resolve_anchor,
)
from html2epub.errors import ConfigError

ALL_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]


# ---------------------------------------------------------------------------
# Selector parsing
# ---------------------------------------------------------------------------


class TestHeadingSelector:
    def test_rank(self):
        assert heading_rank("h1") == 1
        assert heading_rank("H6") == 6

    def test_rank_rejects_other_tags(self):
        with pytest.raises(ConfigError):
            heading_rank("p")

    def test_comma_list_is_ordered(self):
        assert parse_heading_selector("h3, h1,h2") == ["h1", "h2", "h3"]

    def test_range(self):
        assert parse_heading_selector("h2..h4") == ["h2", "h3", "h4"]

    def test_reversed_range(self):
        assert parse_heading_selector("h4..h2") == ["h2", "h3", "h4"]

    def test_list_and_range(self):
        assert parse_heading_selector("h1,h4..h5") == ["h1", "h4", "h5"]

    def test_empty_selector(self):
        with pytest.raises(ConfigError):
            parse_heading_selector(" , ")

    def test_invalid_tag(self):
        with pytest.raises(ConfigError):
            parse_heading_selector("h1,div")


# ---------------------------------------------------------------------------
# Anchor resolution
# ---------------------------------------------------------------------------


class TestResolveAnchor:
    def test_own_id(self):
        soup = parse_document('<body><p>x</p><h2 id="here">T</h2></body>')
        assert resolve_anchor(soup.h2) == "here"

    def test_ancestor_id_without_leading_text(self):
        soup = parse_document('<body><div id="sec"><h2>T</h2><p>x</p></div></body>')
        assert resolve_anchor(soup.h2) == "sec"

    def test_leading_text_stops_the_walk(self):
        soup = parse_document('<body><div id="sec"><p>intro</p><h2>T</h2></div></body>')
        assert resolve_anchor(soup.h2) is None

    def test_empty_preceding_elements_do_not_stop_the_walk(self):
        soup = parse_document('<body><div id="sec"><span></span><br/><h2>T</h2></div></body>')
        assert resolve_anchor(soup.h2) == "sec"

    def test_no_id_anywhere(self):
        soup = parse_document("<body><h1>T</h1></body>")
        assert resolve_anchor(soup.h1) is None


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


class TestExtractHeadings:
    def test_first_heading_links_to_the_page(self):
        soup = parse_document("<html><body><h1>Intro</h1></body></html>")
        headings = extract_headings(soup, "a.xhtml", ALL_TAGS)
        assert len(headings) == 1
        assert headings[0].level == 0
        assert headings[0].title == "Intro"
        assert headings[0].href == "a.xhtml"

    def test_deep_links(self):
        soup = parse_document(
            '<body><h1 id="top">Book</h1><p>x</p><h2 id="one">One</h2></body>'
        )
        headings = extract_headings(soup, "book.html", ALL_TAGS)
        assert [h.href for h in headings] == ["book.html#top", "book.html#one"]
        assert [h.level for h in headings] == [0, 1]

    def test_unlinkable_headings_are_dropped(self):
        soup = parse_document("<body><h1>A</h1><p>x</p><h2>B</h2></body>")
        headings = extract_headings(soup, "a.html", ALL_TAGS)
        assert [h.title for h in headings] == ["A"]

    def test_keep_all_headings(self):
        soup = parse_document("<body><h1>A</h1><p>x</p><h2>B</h2></body>")
        headings = extract_headings(soup, "a.html", ALL_TAGS, keep_all_headings=True)
        assert [(h.title, h.href) for h in headings] == [("A", "a.html"), ("B", None)]

    def test_levels_are_relative_to_topmost_tag(self):
        soup = parse_document(
            '<body><h1 id="x">Ignored</h1><h2 id="a">A</h2><h3 id="b">B</h3></body>'
        )
        headings = extract_headings(soup, "a.html", ["h2", "h3"])
        assert [(h.title, h.level) for h in headings] == [("A", 0), ("B", 1)]

    def test_levels_follow_selector_position(self):
        soup = parse_document('<body><h1 id="a">A</h1><h2 id="x">X</h2><h3 id="b">B</h3></body>')
        headings = extract_headings(soup, "a.html", parse_heading_selector("h1,h3"))
        assert [(h.title, h.level) for h in headings] == [("A", 0), ("B", 1)]

    def test_document_order_across_tags(self):
        soup = parse_document(
            '<body><h2 id="a">A</h2><h1 id="b">B</h1><h3 id="c">C</h3></body>'
        )
        headings = extract_headings(soup, "a.html", ALL_TAGS)
        assert [h.title for h in headings] == ["A", "B", "C"]

    def test_title_whitespace_is_collapsed(self):
        assert normalize_title("  Down the \n\t Rabbit-Hole ") == "Down the Rabbit-Hole"

    def test_read_page(self, book_dir):
        markup = (book_dir / "chapter1.html").read_bytes()
        page = read_page("chapter1.html", markup, ALL_TAGS)
        assert page.href == "chapter1.html"
        assert [(h.level, h.title, h.href) for h in page.headings] == [
            (0, "Chapter 1", "chapter1.html#c1"),
            (1, "Down the Rabbit-Hole", "chapter1.html#rabbit-hole"),
        ]

    def test_section_id_is_used(self, book_dir):
        markup = (book_dir / "chapter2.html").read_bytes()
        page = read_page("chapter2.html", markup, ALL_TAGS)
        assert page.headings[0].href == "chapter2.html#c2"
