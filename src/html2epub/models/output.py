"""Data models for conversion results."""

from pathlib import Path

from pydantic import BaseModel, Field

from html2epub.models.request import OutputFormat


class ConversionResult(BaseModel):
    """Outcome of a conversion run."""

    output_format: OutputFormat
    output_path: Path | None = None  # set for EPUB packages
    output: str | None = None  # set for printed formats (ToC, OPF)
    spine: list[str] = Field(default_factory=list)
    resources: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
    size: int = 0
    warnings: list[str] = Field(default_factory=list)
