"""Main CLI application."""

from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape

from html2epub import __version__
from html2epub.config import load_request
from html2epub.errors import Html2EpubError
from html2epub.logging_setup import setup_logging
from html2epub.models.request import OutputFormat

app = typer.Typer(
    name="html2epub",
    help="Package HTML documents, local or remote, into an EPUB 3 book.",
    add_completion=False,
)

console = Console()


class TocFormat(str, Enum):
    """Formats of the toc command."""

    TXT = "txt"
    JSON = "json"
    XHTML = "xhtml"
    NCX = "ncx"


# =============================================================================
# Shared arguments and options
# =============================================================================

Sources = Annotated[
    Optional[list[str]],
    typer.Argument(
        help="HTML files, directories or http(s) URLs. Default: all HTML files of --basedir",
        show_default=False,
    ),
]
ConfigFile = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        "-c",
        help="JSON configuration file (command-line options take precedence)",
        exists=True,
        dir_okay=False,
    ),
]
BaseDir = Annotated[
    Optional[Path],
    typer.Option("--basedir", "-b", help="Base directory of local documents", file_okay=False),
]
Title = Annotated[Optional[str], typer.Option("--title", "-t", help="Book title")]
Identifier = Annotated[
    Optional[str], typer.Option("--identifier", help="Unique identifier (default: random UUID)")
]
Language = Annotated[Optional[str], typer.Option("--language", "-l", help="Language code")]
Charset = Annotated[Optional[str], typer.Option("--charset", help="Encoding of generated files")]
DublinCore = Annotated[
    Optional[list[str]],
    typer.Option("--dc", help="Extra Dublin Core metadata: 'creator=Lewis Carroll' (repeatable)"),
]
Depth = Annotated[Optional[int], typer.Option("--depth", "-d", min=1, help="ToC depth")]
Headings = Annotated[
    Optional[str],
    typer.Option("--headings", help="Heading elements to index: 'h1,h2,h3' or 'h2..h4'"),
]
KeepAllHeadings = Annotated[
    Optional[bool],
    typer.Option(
        "--keep-all-headings/--linked-headings-only",
        help="Keep headings that no link can point to",
        show_default=False,
    ),
]
Strict = Annotated[
    Optional[bool],
    typer.Option(
        "--strict/--lenient",
        help="Drop headings that skip a level instead of inserting placeholders",
        show_default=False,
    ),
]
Jobs = Annotated[Optional[int], typer.Option("--jobs", "-j", min=1, help="Concurrent downloads")]
Retries = Annotated[
    Optional[int], typer.Option("--retries", min=0, help="Retries per failed download")
]
Timeout = Annotated[
    Optional[float], typer.Option("--timeout", min=0.1, help="Per-request timeout (seconds)")
]
Quiet = Annotated[bool, typer.Option("--quiet", "-q", help="Only show warnings and errors")]
Verbose = Annotated[bool, typer.Option("--verbose", "-v", help="Show debug output")]


def version_callback(value: bool) -> None:
    if value:
        console.print(f"html2epub {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
) -> None:
    """Package HTML documents, local or remote, into an EPUB 3 book."""


def fail(error: Exception) -> None:
    """Print a fatal error and exit with status 1."""
    error_console = Console(stderr=True)
    error_console.print(f"[red]Error: {escape(str(error))}[/]")
    raise typer.Exit(1)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def build(
    sources: Sources = None,
    config: ConfigFile = None,
    basedir: BaseDir = None,
    title: Title = None,
    identifier: Identifier = None,
    language: Language = None,
    charset: Charset = None,
    dc: DublinCore = None,
    depth: Depth = None,
    headings: Headings = None,
    keep_all_headings: KeepAllHeadings = None,
    strict: Strict = None,
    output: Annotated[
        Optional[Path],
        typer.Option(
            "--output",
            "-o",
            help="EPUB file to write (default: <config name or base directory>.epub)",
            dir_okay=False,
        ),
    ] = None,
    jobs: Jobs = None,
    retries: Retries = None,
    timeout: Timeout = None,
    quiet: Quiet = False,
    verbose: Verbose = False,
) -> None:
    """Build an EPUB package.

    Local documents are copied with every file of the base directory;
    remote documents are downloaded together with their images, media
    and stylesheets.
    """
    setup_logging(verbose=verbose, quiet=quiet)

    from html2epub.commands.build import execute_build

    try:
        request = load_request(
            config_path=config,
            sources=sources,
            dc_options=dc,
            basedir=basedir,
            title=title,
            identifier=identifier,
            language=language,
            charset=charset,
            depth=depth,
            headings=headings,
            keep_all_headings=keep_all_headings,
            strict=strict,
            output_format=OutputFormat.EPUB,
            output_file=output,
            jobs=jobs,
            retries=retries,
            timeout=timeout,
        )
        execute_build(request, console, quiet=quiet)
    except Html2EpubError as e:
        fail(e)


@app.command()
def toc(
    sources: Sources = None,
    output_format: Annotated[
        TocFormat,
        typer.Option("--format", "-f", help="Output format", case_sensitive=False),
    ] = TocFormat.TXT,
    config: ConfigFile = None,
    basedir: BaseDir = None,
    title: Title = None,
    identifier: Identifier = None,
    charset: Charset = None,
    depth: Depth = None,
    headings: Headings = None,
    keep_all_headings: KeepAllHeadings = None,
    strict: Strict = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write to a file instead of stdout", dir_okay=False),
    ] = None,
    jobs: Jobs = None,
    retries: Retries = None,
    timeout: Timeout = None,
    quiet: Quiet = False,
    verbose: Verbose = False,
) -> None:
    """Print the table of contents of the documents."""
    setup_logging(verbose=verbose, quiet=quiet)

    from html2epub.commands.show import execute_show

    try:
        request = load_request(
            config_path=config,
            sources=sources,
            basedir=basedir,
            title=title,
            identifier=identifier,
            charset=charset,
            depth=depth,
            headings=headings,
            keep_all_headings=keep_all_headings,
            strict=strict,
            output_format=OutputFormat(output_format.value),
            jobs=jobs,
            retries=retries,
            timeout=timeout,
        )
        execute_show(request, console, output_file=output, quiet=quiet)
    except Html2EpubError as e:
        fail(e)


@app.command()
def opf(
    sources: Sources = None,
    config: ConfigFile = None,
    basedir: BaseDir = None,
    title: Title = None,
    identifier: Identifier = None,
    language: Language = None,
    charset: Charset = None,
    dc: DublinCore = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write to a file instead of stdout", dir_okay=False),
    ] = None,
    jobs: Jobs = None,
    retries: Retries = None,
    timeout: Timeout = None,
    quiet: Quiet = False,
    verbose: Verbose = False,
) -> None:
    """Print the package descriptor (content.opf) of the documents."""
    setup_logging(verbose=verbose, quiet=quiet)

    from html2epub.commands.show import execute_show

    try:
        request = load_request(
            config_path=config,
            sources=sources,
            dc_options=dc,
            basedir=basedir,
            title=title,
            identifier=identifier,
            language=language,
            charset=charset,
            output_format=OutputFormat.OPF,
            jobs=jobs,
            retries=retries,
            timeout=timeout,
        )
        execute_show(request, console, output_file=output, quiet=quiet)
    except Html2EpubError as e:
        fail(e)


@app.command()
def info(
    epub_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the EPUB file",
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
) -> None:
    """Display the metadata and table of contents of an EPUB file."""
    setup_logging()

    from html2epub.commands.info import execute_info

    try:
        execute_info(epub_path, console)
    except Html2EpubError as e:
        fail(e)


if __name__ == "__main__":
    app()
