"""Exceptions raised by html2epub."""


class Html2EpubError(Exception):
    """Base class for html2epub errors."""


class ConfigError(Html2EpubError):
    """Invalid conversion request or no usable input documents."""


class FetchError(Html2EpubError):
    """A remote document or resource could not be fetched."""

    def __init__(self, url: str, message: str, status: int | None = None):
        self.url = url
        self.message = message
        self.status = status
        super().__init__(f"{url}: {message}")


class PackageError(Html2EpubError):
    """Writing the EPUB archive failed."""


class ConversionError(Html2EpubError):
    """The conversion run cannot complete."""


class ConversionCancelled(Html2EpubError):
    """The conversion run was cancelled before completion."""
