"""Read back EPUB packages using ebooklib."""

import warnings
import zipfile
from pathlib import Path

from bs4 import XMLParsedAsHTMLWarning
from ebooklib import epub
from pydantic import BaseModel, Field

from html2epub.errors import PackageError
from html2epub.models.toc import TOCEntry

# Suppress XML parsing warnings - EPUB files often use XHTML
warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)


class PackageInfo(BaseModel):
    """Summary of an EPUB package."""

    title: str = "Untitled"
    identifier: str | None = None
    language: str | None = None
    modified: str | None = None
    dc: dict[str, list[str]] = Field(default_factory=dict)
    spine: list[str] = Field(default_factory=list)
    items: int = 0
    toc: list[TOCEntry] = Field(default_factory=list)

    def toc_entries(self) -> int:
        def count(entries: list[TOCEntry]) -> int:
            return sum(1 + count(entry.children) for entry in entries)

        return count(self.toc)


class PackageReader:
    """Parse an EPUB file and extract its metadata, spine and navigation."""

    def __init__(self, epub_path: Path):
        self.path = epub_path
        try:
            # the navigation document is authoritative for EPUB 3
            self.book = epub.read_epub(str(epub_path), {"ignore_ncx": True})
        except (OSError, KeyError, zipfile.BadZipFile, epub.EpubException) as e:
            raise PackageError(f"Cannot read {epub_path}: {e}") from e

    def read(self) -> PackageInfo:
        title = self._first("title")
        return PackageInfo(
            title=title or "Untitled",
            identifier=self._first("identifier"),
            language=self._first("language"),
            modified=self._modified(),
            dc=self._extra_metadata(),
            spine=self._get_spine(),
            items=len(list(self.book.get_items())),
            toc=self._parse_toc_recursive(self.book.toc),
        )

    def _first(self, name: str) -> str | None:
        values = self.book.metadata.get(epub.NAMESPACES["DC"], {}).get(name, [])
        return values[0][0] if values else None

    def _modified(self) -> str | None:
        # <meta property=...> elements land under whatever namespace
        # ebooklib files unnamed metas in
        for entries in self.book.metadata.values():
            for values in entries.values():
                for value, attributes in values:
                    if (attributes or {}).get("property") == "dcterms:modified":
                        return value
        return None

    def _extra_metadata(self) -> dict[str, list[str]]:
        """Dublin Core elements other than identifier, title and language."""
        dc_namespace = epub.NAMESPACES["DC"]
        extra: dict[str, list[str]] = {}
        for name, values in self.book.metadata.get(dc_namespace, {}).items():
            if name in ("identifier", "title", "language"):
                continue
            extra[name] = [value for value, _ in values if value]
        return extra

    def _get_spine(self) -> list[str]:
        """Reading order as hrefs relative to the package descriptor."""
        hrefs = []
        for idref, _linear in self.book.spine:
            item = self.book.get_item_with_id(idref)
            hrefs.append(item.get_name() if item is not None else idref)
        return hrefs

    def _parse_toc_recursive(self, toc_items: list) -> list[TOCEntry]:
        entries = []

        for item in toc_items:
            if isinstance(item, tuple):
                # Section with children: (Section, [children])
                section, children = item
                entries.append(
                    TOCEntry(
                        title=section.title or "",
                        href=section.href or None,
                        children=self._parse_toc_recursive(children),
                    )
                )
            else:
                entries.append(TOCEntry(title=item.title or "", href=item.href or None))

        return entries
