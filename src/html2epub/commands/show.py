"""Toc and opf command implementation."""

from pathlib import Path

import typer
from rich.console import Console

from html2epub.commands.build import run_conversion
from html2epub.core.converter import EpubConverter
from html2epub.core.fetcher import Fetch
from html2epub.models.request import ConversionRequest, OutputFormat


def execute_show(
    request: ConversionRequest,
    console: Console,
    output_file: Path | None = None,
    quiet: bool = False,
    fetch: Fetch | None = None,
) -> str:
    """Render a ToC or the package descriptor, to stdout or to output_file."""
    converter = EpubConverter(request, fetch=fetch)
    description = (
        "Building package descriptor..."
        if request.output_format == OutputFormat.OPF
        else "Building table of contents..."
    )
    # the spinner would interleave with the output otherwise
    result = run_conversion(converter, console, description, quiet=quiet or output_file is None)
    output = result.output or ""

    if output_file is None:
        typer.echo(output, nl=not output.endswith("\n"))
    else:
        output_file.write_text(output, encoding=request.charset)
        if not quiet:
            console.print(f"[green]Wrote {output_file}[/]")
    return output
