"""EPUB archive writer.

Layout (fixed):

    mimetype
    META-INF/container.xml
    EPUB/content.opf
    EPUB/toc.ncx
    EPUB/toc.xhtml
    EPUB/[[content]]

The archive is written to a temporary file and only renamed to its final
name by finalize(), so a failed or cancelled run never leaves an EPUB
behind.
"""

import logging
import threading
import zipfile
from pathlib import Path

from html2epub.errors import PackageError

log = logging.getLogger(__name__)

MIMETYPE = "application/epub+zip"
CONTENT_DIR = "EPUB"
ROOTFILE = f"{CONTENT_DIR}/content.opf"
NCX_FILE = f"{CONTENT_DIR}/toc.ncx"
NAV_FILE = f"{CONTENT_DIR}/toc.xhtml"

CONTAINER_XML = """<?xml version="1.0"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="{rootfile}" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""


class EpubArchive:
    """Ordered, append-only EPUB (zip) writer.

    Appends are serialized with a lock, so fetch completions on several
    threads can write to the same archive. Each entry name is written once.

    Usage:
        with EpubArchive(path) as archive:
            archive.append("EPUB/toc.xhtml", xhtml)
            archive.finalize()
    """

    def __init__(self, output_path: Path, rootfile: str = ROOTFILE, charset: str = "UTF-8"):
        self.output_path = output_path
        self.rootfile = rootfile
        self.charset = charset
        self.size = 0
        self._tmp_path = output_path.with_name(f".{output_path.name}.part")
        self._zip: zipfile.ZipFile | None = None
        self._names: list[str] = []
        self._lock = threading.Lock()

    def __enter__(self) -> "EpubArchive":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        # not finalized (error, cancellation or early return): drop it
        if self._zip is not None:
            self.abort()

    def __contains__(self, name: str) -> bool:
        return name in self._names

    @property
    def names(self) -> list[str]:
        """Entry names, in append order."""
        return list(self._names)

    def open(self) -> "EpubArchive":
        """Create the archive and write the mimetype and container entries."""
        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            self._zip = zipfile.ZipFile(self._tmp_path, "w", zipfile.ZIP_DEFLATED)
        except OSError as e:
            raise PackageError(f"Cannot create {self.output_path}: {e}") from e

        # the mimetype must be the first entry and must be stored uncompressed,
        # otherwise readers report "Mimetype contains wrong type"
        self.append("mimetype", MIMETYPE, store=True)
        self.append(
            "META-INF/container.xml", CONTAINER_XML.format(rootfile=self.rootfile)
        )
        return self

    def append(self, name: str, data: bytes | str, store: bool = False) -> bool:
        """Append an entry. Returns False if the name was already written."""
        if isinstance(data, str):
            data = data.encode(self.charset)
        compress_type = zipfile.ZIP_STORED if store else zipfile.ZIP_DEFLATED

        with self._lock:
            zf = self._require_open()
            if name in self._names:
                log.warning("Skipping duplicate archive entry: %s", name)
                return False
            try:
                zf.writestr(name, data, compress_type=compress_type)
            except (OSError, ValueError) as e:
                raise PackageError(f"Cannot write {name}: {e}") from e
            self._names.append(name)
        return True

    def append_file(self, name: str, path: Path) -> bool:
        """Append a file from disk, streaming it into the archive."""
        with self._lock:
            zf = self._require_open()
            if name in self._names:
                log.warning("Skipping duplicate archive entry: %s", name)
                return False
            try:
                zf.write(path, arcname=name, compress_type=zipfile.ZIP_DEFLATED)
            except (OSError, ValueError) as e:
                raise PackageError(f"Cannot write {name}: {e}") from e
            self._names.append(name)
        return True

    def finalize(self) -> int:
        """Close the archive, move it into place and return its size."""
        with self._lock:
            zf = self._require_open()
            try:
                zf.close()
                self._zip = None
                self._tmp_path.replace(self.output_path)
                self.size = self.output_path.stat().st_size
            except OSError as e:
                self._zip = None
                self._tmp_path.unlink(missing_ok=True)
                raise PackageError(f"Cannot finalize {self.output_path}: {e}") from e

        log.info("%s - %d bytes", self.output_path, self.size)
        return self.size

    def abort(self) -> None:
        """Discard the archive being written."""
        with self._lock:
            if self._zip is not None:
                try:
                    self._zip.close()
                except (OSError, ValueError) as e:
                    log.debug("Error while closing aborted archive: %s", e)
                self._zip = None
            self._tmp_path.unlink(missing_ok=True)
        log.info("Discarded unfinished archive %s", self.output_path)

    def _require_open(self) -> zipfile.ZipFile:
        if self._zip is None:
            raise PackageError(f"Archive {self.output_path} is not open")
        return self._zip
