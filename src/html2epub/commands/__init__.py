"""Implementations of the html2epub commands."""
