"""Local document discovery and source expansion."""

import logging
import re
from pathlib import Path

from html2epub.errors import ConfigError

log = logging.getLogger(__name__)

MARKUP_PATTERN = re.compile(r"\.x?html?$", re.IGNORECASE)
REMOTE_PATTERN = re.compile(r"^https?://", re.IGNORECASE)


def is_remote(href: str) -> bool:
    """True for http(s) URLs."""
    return bool(REMOTE_PATTERN.match(href))


def is_markup(name: str) -> bool:
    """True for .htm, .html and .xhtml files."""
    return bool(MARKUP_PATTERN.search(name))


def find_files(
    basedir: Path,
    markup_only: bool = False,
    exclude: set[Path] | None = None,
) -> list[str]:
    """List files below basedir as sorted POSIX paths relative to it.

    Hidden files and directories are skipped.
    """
    exclude = {path.resolve() for path in exclude or set()}
    files: list[str] = []

    def walk(directory: Path) -> None:
        for entry in sorted(directory.iterdir(), key=lambda p: p.name):
            if entry.name.startswith("."):
                continue
            if entry.is_dir():
                walk(entry)
            elif entry.resolve() in exclude:
                continue
            elif not markup_only or is_markup(entry.name):
                files.append(entry.relative_to(basedir).as_posix())

    walk(basedir)
    return files


def check_spine(spine: list[str]) -> None:
    """Reject spines that mix remote URLs and local files."""
    remote = [href for href in spine if is_remote(href)]
    if remote and len(remote) != len(spine):
        raise ConfigError("Cannot mix remote URLs and local files in one book")


def expand_sources(sources: list[str], basedir: Path | None = None) -> tuple[Path, list[str]]:
    """Turn command-line sources into a base directory and a spine.

    Each source is an http(s) URL, a directory (all markup files below it)
    or a single file. When no base directory is given and the only source
    is a directory, that directory becomes the base directory; otherwise
    the current directory is used. Missing or unsupported sources are
    logged and skipped.

    Returns:
        (base directory, spine hrefs relative to it, or URLs)
    """
    local = [source for source in sources if not is_remote(source)]
    if basedir is None:
        if len(local) == 1 and Path(local[0]).is_dir():
            basedir = Path(local[0])
        else:
            basedir = Path.cwd()
    basedir = basedir.resolve()

    spine: list[str] = []

    def push(href: str) -> None:
        if href not in spine:
            spine.append(href)

    for source in sources:
        if is_remote(source):
            push(source)
            continue
        if "://" in source:
            log.error("Unsupported source: %s", source)
            continue

        path = Path(source)
        if not path.is_absolute() and (basedir / path).exists():
            path = basedir / path
        path = path.resolve()

        if not path.exists():
            log.error("Not supported or non-existing source: %s", source)
            continue
        try:
            relative = path.relative_to(basedir)
        except ValueError:
            log.error("Source is outside of %s: %s", basedir, source)
            continue

        if path.is_dir():
            for href in find_files(path, markup_only=True):
                push((relative / href).as_posix())
        else:
            push(relative.as_posix())

    check_spine(spine)
    return basedir, spine


def get_non_existing_file(path: Path) -> Path:
    """Return path, or path.1, path.2... if it already exists."""
    if not path.exists():
        return path
    suffix = 1
    while path.with_name(f"{path.name}.{suffix}").exists():
        suffix += 1
    return path.with_name(f"{path.name}.{suffix}")


class LocalDocumentSource:
    """Files of a local directory tree."""

    def __init__(self, basedir: Path, exclude: set[Path] | None = None):
        self.basedir = basedir
        self.exclude = exclude or set()

    def list_files(self) -> list[str]:
        return find_files(self.basedir, exclude=self.exclude)

    def path(self, href: str) -> Path:
        return self.basedir / href

    def read(self, href: str) -> bytes | None:
        """Read a document, or log and return None if it is missing."""
        try:
            return self.path(href).read_bytes()
        except OSError as e:
            log.error("Could not read %s: %s", href, e)
            return None
