"""Conversion of HTML documents into an EPUB package."""

import logging
import threading
from pathlib import Path

from html2epub.core.descriptor import render_opf
from html2epub.core.document_source import (
    LocalDocumentSource,
    get_non_existing_file,
    is_markup,
)
from html2epub.core.fetcher import Fetch, HttpFetcher, RemoteFetchCoordinator
from html2epub.core.heading_extractor import parse_heading_selector, read_page
from html2epub.core.manifest_builder import build_manifest
from html2epub.core.package_assembler import (
    CONTENT_DIR,
    NAV_FILE,
    NCX_FILE,
    ROOTFILE,
    EpubArchive,
)
from html2epub.core.toc_builder import build_toc_tree
from html2epub.core.toc_renderers import render_json, render_ncx, render_text, render_xhtml
from html2epub.errors import ConfigError, ConversionError
from html2epub.models.output import ConversionResult
from html2epub.models.request import ConversionRequest, OutputFormat
from html2epub.models.toc import Page, TocTree

log = logging.getLogger(__name__)

NAV_NAME = "toc.xhtml"
NCX_NAME = "toc.ncx"
OPF_NAME = "content.opf"


def package_files(resources: list[str], spine: list[str]) -> list[str]:
    """Files of a remote package, each listed once."""
    return list(dict.fromkeys(resources + spine + [NAV_NAME, NCX_NAME]))


class EpubConverter:
    """Convert the documents of a ConversionRequest.

    Local documents are processed synchronously; remote ones are fetched
    concurrently by a RemoteFetchCoordinator.
    """

    def __init__(self, request: ConversionRequest, fetch: Fetch | None = None):
        self.request = request
        self.tags = parse_heading_selector(request.headings)
        self.basedir = (request.basedir or Path.cwd()).resolve()
        self.cancel_event = threading.Event()
        self.fetch = fetch or HttpFetcher(
            timeout=request.timeout,
            retries=request.retries,
            cancel_event=self.cancel_event,
        )
        self.warnings: list[str] = []

    def cancel(self) -> None:
        """Abort a remote conversion in progress."""
        self.cancel_event.set()

    # -------------------------------------------------------------------------
    # Headings and table of contents
    # -------------------------------------------------------------------------

    def parse_headings(self, spine: list[str] | None = None) -> list[Page]:
        """Read the headings of every local spine document."""
        source = LocalDocumentSource(self.basedir)
        pages = []
        for href in self.request.spine if spine is None else spine:
            markup = source.read(href)
            if markup is None:
                self._warn(f"Skipping missing document: {href}")
                continue
            pages.append(read_page(href, markup, self.tags, self.request.keep_all_headings))
        return pages

    def build_tree(self, pages: list[Page]) -> TocTree:
        tree = build_toc_tree(pages, self.request.depth, self.request.strict)
        self.warnings.extend(tree.warnings)
        return tree

    def show_toc(self, pages: list[Page], output_format: OutputFormat | None = None) -> str:
        """Render the table of contents of pages in the requested format."""
        request = self.request
        output_format = output_format or request.output_format

        if output_format == OutputFormat.TXT:
            return render_text(pages, request.depth)

        tree = self.build_tree(pages)
        if output_format == OutputFormat.JSON:
            return render_json(tree)
        if output_format == OutputFormat.NCX:
            return self._render_ncx(tree)
        if output_format == OutputFormat.XHTML:
            return render_xhtml(tree, request.title, request.charset)
        raise ConfigError(f"Unsupported ToC format: {output_format}")

    def show_opf(self, files: list[str], spine: list[str]) -> str:
        """Render the package descriptor for files, in spine order."""
        request = self.request
        manifest = build_manifest(files, spine)
        self.warnings.extend(manifest.warnings)
        return render_opf(
            manifest,
            identifier=request.identifier,
            title=request.title,
            language=request.language,
            modified=request.modified,
            dc=request.dc,
            charset=request.charset,
        )

    # -------------------------------------------------------------------------
    # Conversion
    # -------------------------------------------------------------------------

    def output_path(self) -> Path:
        """Target EPUB file; an existing file is never overwritten."""
        path = self.request.output_file or Path(f"{self.basedir.name or 'book'}.epub")
        return get_non_existing_file(path.resolve())

    def run(self) -> ConversionResult:
        """Produce whatever request.output_format asks for."""
        output_format = self.request.output_format
        if output_format == OutputFormat.EPUB:
            if self.request.remote:
                return self.convert_remote()
            return self.convert_local()

        if self.request.remote:
            fetched = self._fetch_remote(
                archive=None, fetch_resources=output_format == OutputFormat.OPF
            )
            pages, spine = fetched.pages, fetched.spine
            files = package_files(fetched.resources, spine)
        else:
            files = LocalDocumentSource(self.basedir).list_files()
            spine = self._local_spine(files)
            pages = self.parse_headings(spine)
            for name in (NAV_NAME, NCX_NAME):
                if name not in files:
                    files.append(name)

        if output_format == OutputFormat.OPF:
            output = self.show_opf(files, spine)
        else:
            output = self.show_toc(pages, output_format)

        return ConversionResult(
            output_format=output_format,
            output=output,
            spine=spine,
            warnings=self.warnings,
        )

    def convert_local(self) -> ConversionResult:
        """Wrap a local directory of documents and resources into an EPUB.

        toc.xhtml, toc.ncx and content.opf are generated unless the base
        directory already contains them; every file of the base directory
        is copied under EPUB/.
        """
        output = self.output_path()
        source = LocalDocumentSource(self.basedir, exclude={output})
        content_files = source.list_files()
        spine = self._local_spine(content_files)
        pages = self.parse_headings(spine)
        generated = [name for name in (NAV_NAME, NCX_NAME) if name not in content_files]
        files = content_files + generated
        tree = self.build_tree(pages)

        with EpubArchive(output, ROOTFILE, self.request.charset) as archive:
            if NAV_NAME in generated:
                archive.append(
                    NAV_FILE, render_xhtml(tree, self.request.title, self.request.charset)
                )
            if NCX_NAME in generated:
                archive.append(NCX_FILE, self._render_ncx(tree))
            if OPF_NAME not in content_files:
                archive.append(ROOTFILE, self.show_opf(files, spine))

            for href in content_files:
                archive.append_file(f"{CONTENT_DIR}/{href}", source.path(href))

            size = archive.finalize()

        return ConversionResult(
            output_format=OutputFormat.EPUB,
            output_path=output,
            spine=spine,
            resources=[href for href in content_files if href not in spine],
            size=size,
            warnings=self.warnings,
        )

    def convert_remote(self) -> ConversionResult:
        """Fetch remote documents and their resources into an EPUB.

        Documents and resources are stored under EPUB/<host>/<path>; the
        indexes and the package descriptor are appended once every fetch
        has completed.
        """
        output = self.output_path()

        with EpubArchive(output, ROOTFILE, self.request.charset) as archive:
            fetched = self._fetch_remote(archive)
            files = package_files(fetched.resources, fetched.spine)
            tree = self.build_tree(fetched.pages)

            archive.append(NAV_FILE, render_xhtml(tree, self.request.title, self.request.charset))
            archive.append(NCX_FILE, self._render_ncx(tree))
            archive.append(ROOTFILE, self.show_opf(files, fetched.spine))
            size = archive.finalize()

        return ConversionResult(
            output_format=OutputFormat.EPUB,
            output_path=output,
            spine=fetched.spine,
            resources=fetched.resources,
            failed=fetched.failed,
            size=size,
            warnings=self.warnings,
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _fetch_remote(self, archive: EpubArchive | None, fetch_resources: bool = True):
        coordinator = RemoteFetchCoordinator(
            self.fetch,
            self.tags,
            keep_all_headings=self.request.keep_all_headings,
            jobs=self.request.jobs,
            cancel_event=self.cancel_event,
        )
        fetched = coordinator.run(self.request.spine, archive, fetch_resources)
        self.warnings.extend(fetched.warnings)
        if not fetched.spine:
            raise ConversionError("None of the documents could be fetched")
        return fetched

    def _local_spine(self, files: list[str]) -> list[str]:
        """Spine entries that exist in the base directory.

        Without an explicit spine, every markup file but the navigation
        document is used, in path order.
        """
        if not self.request.spine:
            spine = [href for href in files if is_markup(href) and href != NAV_NAME]
            if not spine:
                raise ConfigError(f"No documents found in {self.basedir}")
            return spine

        spine = []
        for href in self.request.spine:
            if href in spine:
                self._warn(f"Skipping duplicate spine entry: {href}")
            elif href in files:
                spine.append(href)
            else:
                self._warn(f"Not found in {self.basedir}: {href}")
        if not spine:
            raise ConfigError(f"No documents found in {self.basedir}")
        return spine

    def _render_ncx(self, tree: TocTree) -> str:
        request = self.request
        return render_ncx(
            tree, request.identifier, request.title, request.depth, request.charset
        )

    def _warn(self, message: str) -> None:
        log.warning(message)
        self.warnings.append(message)
