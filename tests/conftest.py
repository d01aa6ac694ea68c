"""Shared fixtures: a small local book and a fake remote site."""

import threading
from collections import Counter
from pathlib import Path

import pytest

from html2epub.errors import FetchError

CHAPTER_1 = """<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml">
<head><title>Chapter 1</title><link rel="stylesheet" href="style.css"/></head>
<body>
  <h1 id="c1">Chapter 1</h1>
  <p>Alice was beginning to get very tired of sitting by her sister on the bank.</p>
  <h2 id="rabbit-hole">Down the   Rabbit-Hole</h2>
  <p>Either the well was very deep, or she fell very slowly.</p>
  <h2>An unlinkable heading</h2>
  <img src="images/cover.png" alt="cover"/>
</body>
</html>
"""

CHAPTER_2 = """<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml">
<head><title>Chapter 2</title></head>
<body>
  <section id="c2">
    <h1>Chapter 2</h1>
    <p>Curiouser and curiouser!</p>
  </section>
</body>
</html>
"""

SITE = {
    "https://example.com/a.html": (
        b'<html><head><link rel="stylesheet" href="style.css"></head>'
        b'<body><h1 id="a">Page A</h1><h2 id="a1">Section A.1</h2>'
        b'<img src="img/one.png"></body></html>'
    ),
    "https://example.com/b.html": (
        b"<html><body><h1>Page B</h1>"
        b'<img src="img/one.png#fragment">'
        b'<img src="https://cdn.example.com/two.png"></body></html>'
    ),
    "https://example.com/style.css": b"h1 { color: black; }",
    "https://example.com/img/one.png": b"\x89PNG one",
    "https://cdn.example.com/two.png": b"\x89PNG two",
}


class FakeFetch:
    """Fetch callable serving a dict of URLs and counting requests."""

    def __init__(self, responses: dict[str, bytes], failing: set[str] | None = None):
        self.responses = responses
        self.failing = failing or set()
        self.calls: Counter[str] = Counter()
        self.lock = threading.Lock()

    def __call__(self, url: str) -> bytes:
        with self.lock:
            self.calls[url] += 1
        if url in self.failing or url not in self.responses:
            raise FetchError(url, "404 Not Found", 404)
        return self.responses[url]


@pytest.fixture
def book_dir(tmp_path: Path) -> Path:
    """Local book: two chapters, a stylesheet, an image and a hidden file."""
    book = tmp_path / "alice"
    (book / "images").mkdir(parents=True)
    (book / "chapter1.html").write_text(CHAPTER_1, encoding="utf-8")
    (book / "chapter2.html").write_text(CHAPTER_2, encoding="utf-8")
    (book / "style.css").write_text("body { margin: 0; }", encoding="utf-8")
    (book / "images" / "cover.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    (book / ".DS_Store").write_bytes(b"junk")
    return book


@pytest.fixture
def site() -> dict[str, bytes]:
    return dict(SITE)


@pytest.fixture
def fake_fetch(site: dict[str, bytes]) -> FakeFetch:
    return FakeFetch(site)
