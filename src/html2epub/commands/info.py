"""Info command implementation."""

from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from html2epub.core.package_reader import PackageInfo, PackageReader
from html2epub.models.toc import TOCEntry


def flatten_toc(entries: list[TOCEntry], level: int = 0) -> list[tuple[int, TOCEntry]]:
    """Pre-order (level, entry) pairs of a nested ToC."""
    rows = []
    for entry in entries:
        rows.append((level, entry))
        rows.extend(flatten_toc(entry.children, level + 1))
    return rows


def display_info(info: PackageInfo, console: Console) -> None:
    """Display package metadata and table of contents."""
    info_lines = [
        f"[bold]{escape(info.title)}[/]",
        "",
        f"[dim]Identifier:[/] {escape(info.identifier or 'Unknown')}",
        f"[dim]Language:[/] {escape(info.language or 'Unknown')}",
        f"[dim]Modified:[/] {escape(info.modified or 'Unknown')}",
    ]
    for name, values in sorted(info.dc.items()):
        info_lines.append(f"[dim]{name.capitalize()}:[/] {escape(', '.join(values))}")
    info_lines.append(f"[dim]Spine:[/] {len(info.spine)} document(s)")
    info_lines.append(f"[dim]Manifest:[/] {info.items} item(s)")
    info_lines.append(f"[dim]ToC:[/] {info.toc_entries()} entries")

    console.print()
    console.print(
        Panel(
            "\n".join(info_lines),
            title="Package Information",
            border_style="green",
        )
    )

    console.print()
    table = Table(title="Table of Contents", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Title", style="white")
    table.add_column("Href", style="dim")

    for i, (level, entry) in enumerate(flatten_toc(info.toc), start=1):
        table.add_row(str(i), "  " * level + escape(entry.title), escape(entry.href or ""))

    console.print(table)


def execute_info(epub_path: Path, console: Console) -> PackageInfo:
    """Execute the info command."""
    info = PackageReader(epub_path).read()
    display_info(info, console)
    return info
