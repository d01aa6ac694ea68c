"""Data models for conversion requests."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class OutputFormat(str, Enum):
    """What a conversion run produces."""

    EPUB = "epub"  # complete package
    OPF = "opf"  # package descriptor only
    TXT = "txt"  # flat text ToC
    JSON = "json"  # structured ToC
    XHTML = "xhtml"  # EPUB3 navigation document
    NCX = "ncx"  # EPUB2 navigation index


def new_identifier() -> str:
    return str(uuid.uuid4())


def utc_timestamp() -> str:
    """ISO-8601 timestamp without fractional seconds, as OPF expects."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class ConversionRequest(BaseModel):
    """Everything a conversion run needs to know.

    Field aliases match the keys of JSON configuration files
    (``keepAllHeadings``, ``outputFile``...), snake_case names work too.
    """

    model_config = ConfigDict(populate_by_name=True)

    # metadata
    title: str = "Untitled"
    identifier: str = Field(default_factory=new_identifier)
    charset: str = "UTF-8"
    language: str = "en"
    dc: dict[str, str] = Field(default_factory=dict)
    modified: str = Field(default_factory=utc_timestamp)

    # table of contents
    depth: int = Field(default=3, ge=1)
    headings: str = "h1,h2,h3,h4,h5,h6"
    keep_all_headings: bool = Field(default=False, alias="keepAllHeadings")
    strict: bool = False
    output_format: OutputFormat = Field(default=OutputFormat.EPUB, alias="format")

    # sources and output
    basedir: Path | None = None
    spine: list[str] = Field(default_factory=list)
    output_file: Path | None = Field(default=None, alias="outputFile")

    # remote fetching
    jobs: int = Field(default=8, ge=1)
    retries: int = Field(default=3, ge=0)
    timeout: float = Field(default=30.0, gt=0)

    @property
    def remote(self) -> bool:
        """True when every spine entry is an http(s) URL."""
        return bool(self.spine) and all(
            href.startswith(("http://", "https://")) for href in self.spine
        )
