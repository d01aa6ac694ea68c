"""Concurrent fetching of remote documents and their resources."""

import logging
import posixpath
import re
import threading
import time
from collections.abc import Callable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from urllib.parse import urldefrag, urljoin, urlsplit

import requests
from bs4 import BeautifulSoup

from html2epub import __version__
from html2epub.core.heading_extractor import extract_headings, parse_document
from html2epub.core.package_assembler import CONTENT_DIR, EpubArchive
from html2epub.errors import ConversionCancelled, FetchError
from html2epub.models.toc import Page

log = logging.getLogger(__name__)

USER_AGENT = f"html2epub/{__version__}"
CSS_URL_PATTERN = re.compile(r"""url\(\s*['"]?([^'")]*?)['"]?\s*\)""")
MEDIA_SELECTOR = "img[src], audio[src], video[src], audio source[src], video source[src]"
POLL_INTERVAL = 0.5  # seconds between cancellation checks while waiting

Fetch = Callable[[str], bytes]


# =============================================================================
# HTTP transport
# =============================================================================


class HttpFetcher:
    """Fetch URLs over HTTP(S) with a per-request timeout and bounded retries."""

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float = 30.0,
        retries: int = 3,
        backoff: float = 0.5,
        cancel_event: threading.Event | None = None,
    ):
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)
        self.timeout = timeout
        self.retries = retries
        self.backoff = backoff
        self.cancel_event = cancel_event or threading.Event()

    def __call__(self, url: str) -> bytes:
        """Return the body of url.

        Raises:
            FetchError: unsupported scheme, client error, or still failing
                after ``retries`` additional attempts
        """
        scheme = urlsplit(url).scheme
        if scheme not in ("http", "https"):
            raise FetchError(url, f"{scheme or 'no'} protocol is not supported")

        last_error: Exception | None = None
        for attempt in range(self.retries + 1):
            if self.cancel_event.is_set():
                raise FetchError(url, "cancelled")
            if attempt:
                log.info("Retrying %s (%d/%d): %s", url, attempt, self.retries, last_error)
                time.sleep(self.backoff * attempt)

            try:
                response = self.session.get(url, timeout=self.timeout)
                response.raise_for_status()
                return response.content
            except requests.HTTPError as e:
                status = e.response.status_code if e.response is not None else None
                # client errors other than rate limiting won't get better
                if status is not None and 400 <= status < 500 and status != 429:
                    raise FetchError(url, str(e), status) from e
                last_error = e
            except requests.RequestException as e:
                last_error = e

        raise FetchError(url, str(last_error)) from last_error


# =============================================================================
# Resource discovery
# =============================================================================


def package_href(url: str) -> str:
    """Path of a remote file inside the package: host + path, no scheme.

    >>> package_href("https://example.com/book/ch1.html#top")
    'example.com/book/ch1.html'
    """
    parts = urlsplit(url)
    path = parts.path or "/"
    if path.endswith("/"):
        path += "index.html"
    return f"{parts.netloc}{path}"


class PackageHrefs:
    """Collision-free package hrefs for remote URLs, keyed by URL.

    URLs that differ only by their query string share a package_href();
    each later one gets a numeric suffix (example.com/page,
    example.com/page-2, ...).
    """

    def __init__(self):
        self.by_url: dict[str, str] = {}
        self.taken: set[str] = set()

    def __contains__(self, url: str) -> bool:
        return urldefrag(url)[0] in self.by_url

    def __call__(self, url: str) -> str:
        url, _ = urldefrag(url)
        if url in self.by_url:
            return self.by_url[url]

        href = package_href(url)
        stem, ext = posixpath.splitext(href)
        number = 1
        while href in self.taken:
            number += 1
            href = f"{stem}-{number}{ext}"

        self.taken.add(href)
        self.by_url[url] = href
        return href


def base_url(soup: BeautifulSoup, document_url: str) -> str:
    """URL that relative references of the document resolve against."""
    bases = [base for base in soup.find_all("base") if base.get("href")]
    if bases:
        return urljoin(document_url, bases[-1]["href"])
    return document_url


def discover_resources(soup: BeautifulSoup, document_url: str) -> list[str]:
    """Absolute URLs of the resources a document embeds, in document order.

    Looks at url() references in <style> elements, media sources and
    linked stylesheets. Fragments are dropped; data: URIs and non-HTTP
    references are ignored.
    """
    base = base_url(soup, document_url)
    references: list[str] = []

    for style in soup.find_all("style"):
        references.extend(CSS_URL_PATTERN.findall(style.get_text()))
    for element in soup.select(MEDIA_SELECTOR):
        references.append(element["src"])
    for link in soup.select("link[rel~=stylesheet][href]"):
        references.append(link["href"])

    urls: list[str] = []
    for reference in references:
        reference = reference.strip()
        if not reference or reference.startswith("data:"):
            continue
        url, _ = urldefrag(urljoin(base, reference))
        if urlsplit(url).scheme not in ("http", "https"):
            log.warning("Unsupported resource reference: %s", reference)
            continue
        if url not in urls:
            urls.append(url)
    return urls


# =============================================================================
# Fetch coordination
# =============================================================================


@dataclass
class FetchOutcome:
    """Result of one fetch task; failures are recorded, not raised."""

    url: str
    data: bytes | None = None
    error: FetchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RemoteFetchResult:
    """Everything fetched by a RemoteFetchCoordinator run."""

    pages: list[Page] = field(default_factory=list)  # spine order
    spine: list[str] = field(default_factory=list)  # package hrefs
    resources: list[str] = field(default_factory=list)  # package hrefs
    failed: list[str] = field(default_factory=list)  # URLs
    warnings: list[str] = field(default_factory=list)


class RemoteFetchCoordinator:
    """Fetch remote documents and their resources concurrently.

    Every document is requested up front; each one that arrives is parsed
    for headings and resource references, and newly seen resources are
    requested in turn (deduplicated by absolute URL). ``run`` returns once
    no document and no resource fetch is pending. Completions are handled
    on the calling thread, which is also the only one appending to the
    archive.
    """

    def __init__(
        self,
        fetch: Fetch,
        tags: list[str],
        keep_all_headings: bool = False,
        jobs: int = 8,
        cancel_event: threading.Event | None = None,
    ):
        self.fetch = fetch
        self.tags = tags
        self.keep_all_headings = keep_all_headings
        self.jobs = jobs
        self.cancel_event = cancel_event or threading.Event()

    def cancel(self) -> None:
        """Stop issuing fetches; run() raises ConversionCancelled."""
        self.cancel_event.set()

    def _fetch(self, url: str) -> FetchOutcome:
        if self.cancel_event.is_set():
            return FetchOutcome(url, error=FetchError(url, "cancelled"))
        try:
            return FetchOutcome(url, data=self.fetch(url))
        except FetchError as e:
            return FetchOutcome(url, error=e)
        except Exception as e:
            return FetchOutcome(url, error=FetchError(url, f"{type(e).__name__}: {e}"))

    def run(
        self,
        urls: list[str],
        archive: EpubArchive | None = None,
        fetch_resources: bool = True,
    ) -> RemoteFetchResult:
        """Fetch every document of urls and, optionally, their resources.

        Args:
            urls: Spine, as absolute URLs
            archive: Archive receiving documents and resources as they arrive
            fetch_resources: Also fetch embedded resources

        Returns:
            Pages and hrefs of the successfully fetched files
        """
        result = RemoteFetchResult()
        hrefs = PackageHrefs()
        spine_urls: list[str] = []
        for url in urls:
            if url in hrefs:
                message = f"Skipping duplicate document: {url}"
                log.warning(message)
                result.warnings.append(message)
                continue
            # spine documents claim their hrefs first, in spine order
            hrefs(url)
            spine_urls.append(url)

        pages: list[Page | None] = [None] * len(spine_urls)
        documents: dict[Future, int] = {}
        resources: dict[Future, str] = {}

        def failed(outcome: FetchOutcome) -> None:
            message = f"Could not get {outcome.url} - {outcome.error.message}"
            log.warning(message)
            result.failed.append(outcome.url)
            result.warnings.append(message)

        def store(url: str, data: bytes) -> str:
            href = hrefs(url)
            if archive is not None:
                archive.append(f"{CONTENT_DIR}/{href}", data)
            return href

        executor = ThreadPoolExecutor(max_workers=self.jobs)
        try:
            for index, url in enumerate(spine_urls):
                log.info("  downloading: %s", url)
                documents[executor.submit(self._fetch, url)] = index

            while documents or resources:
                if self.cancel_event.is_set():
                    raise ConversionCancelled("Conversion cancelled")

                done, _ = wait(
                    [*documents, *resources],
                    timeout=POLL_INTERVAL,
                    return_when=FIRST_COMPLETED,
                )
                for future in done:
                    if future in documents:
                        index = documents.pop(future)
                        outcome = future.result()
                        if not outcome.ok:
                            failed(outcome)
                            continue

                        soup = parse_document(outcome.data)
                        href = store(outcome.url, outcome.data)
                        pages[index] = Page(
                            href=href,
                            headings=extract_headings(
                                soup, href, self.tags, self.keep_all_headings
                            ),
                        )
                        if not fetch_resources:
                            continue
                        for resource_url in discover_resources(soup, outcome.url):
                            if resource_url in hrefs:
                                continue
                            hrefs(resource_url)
                            log.info("  downloading: %s", resource_url)
                            resources[executor.submit(self._fetch, resource_url)] = resource_url
                    else:
                        resources.pop(future)
                        outcome = future.result()
                        if not outcome.ok:
                            failed(outcome)
                            continue
                        href = store(outcome.url, outcome.data)
                        if href not in result.resources:
                            result.resources.append(href)
        except BaseException:
            self.cancel_event.set()
            raise
        finally:
            executor.shutdown(wait=not self.cancel_event.is_set(), cancel_futures=True)

        result.pages = [page for page in pages if page is not None]
        result.spine = [page.href for page in result.pages]
        return result
