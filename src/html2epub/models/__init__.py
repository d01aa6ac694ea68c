"""Data models."""

from html2epub.models.manifest import Manifest, ManifestItem
from html2epub.models.output import ConversionResult
from html2epub.models.request import ConversionRequest, OutputFormat
from html2epub.models.toc import Heading, Page, TOCEntry, TocNode, TocTree

__all__ = [
    # ToC models
    "Heading",
    "Page",
    "TocNode",
    "TocTree",
    "TOCEntry",
    # Package models
    "ManifestItem",
    "Manifest",
    # Request / result models
    "OutputFormat",
    "ConversionRequest",
    "ConversionResult",
]
