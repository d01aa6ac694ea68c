"""Wrap a collection of HTML documents into an EPUB package."""

__version__ = "0.4.0"
