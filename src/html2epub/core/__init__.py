"""Conversion pipeline: headings, table of contents, manifest, packaging."""
