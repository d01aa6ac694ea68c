"""Build command implementation."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from html2epub.core.converter import EpubConverter
from html2epub.core.fetcher import Fetch
from html2epub.errors import ConversionCancelled
from html2epub.models.output import ConversionResult
from html2epub.models.request import ConversionRequest


def format_size(size: int) -> str:
    """Human readable byte count."""
    if size < 1024:
        return f"{size} bytes"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def run_conversion(
    converter: EpubConverter,
    console: Console,
    description: str,
    quiet: bool = False,
) -> ConversionResult:
    """Run a conversion, cancelling it cleanly on Ctrl-C."""
    try:
        if quiet:
            return converter.run()
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(description, total=None)
            return converter.run()
    except KeyboardInterrupt:
        converter.cancel()
        raise ConversionCancelled("Interrupted") from None


def execute_build(
    request: ConversionRequest,
    console: Console,
    quiet: bool = False,
    fetch: Fetch | None = None,
) -> ConversionResult:
    """Execute the build command."""
    converter = EpubConverter(request, fetch=fetch)
    result = run_conversion(converter, console, "Building EPUB...", quiet)

    if not quiet:
        summary_lines = [
            f"[bold]{escape(request.title)}[/]",
            "",
            f"[dim]Output:[/] {escape(str(result.output_path))}",
            f"[dim]Size:[/] {format_size(result.size)}",
            f"[dim]Documents:[/] {len(result.spine)}",
            f"[dim]Resources:[/] {len(result.resources)}",
        ]
        if result.failed:
            summary_lines.append(f"[dim]Failed downloads:[/] [red]{len(result.failed)}[/]")
        if result.warnings:
            summary_lines.append(f"[yellow]{len(result.warnings)} warning(s)[/]")

        console.print()
        console.print(
            Panel(
                "\n".join(summary_lines),
                title="EPUB Created",
                border_style="yellow" if result.warnings else "green",
            )
        )

    return result
