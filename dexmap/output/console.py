"""
DexMap Console Output
======================

Rich terminal display for a DEX structure map: the header dump that
droidcolors prints with ``-l``, a per-category coverage table with colour
swatches matching the image, and any findings.

Uses the PrismConsole abstraction for consistent styling across all
Prism tools.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from shared.console import PrismConsole

from dexmap.core.models import CATEGORY_COLOURS, DexHeader, DexMapResult, RegionCategory


def _swatch(category: RegionCategory) -> Text:
    r, g, b = CATEGORY_COLOURS[category]
    return Text("    ", style=f"on rgb({r},{g},{b})")


class DexMapConsoleOutput:
    """Rich terminal display for DexMap results.

    Usage::

        output = DexMapConsoleOutput()
        output.display(result)
    """

    def __init__(self, console: PrismConsole | None = None) -> None:
        self._console: PrismConsole = console or PrismConsole()

    def display(self, result: DexMapResult) -> None:
        """Display header, coverage and findings for *result*."""
        self._console.section("DEX Structure Map")
        self.display_summary(result)
        self.display_header(result.header, result.width, result.height)
        if result.coverage:
            self.display_coverage(result)
        if result.findings:
            self._console.findings_table(result.findings)
        self._console.divider()

    def display_summary(self, result: DexMapResult) -> None:
        hdr = result.header
        lines = [
            f"[bold]File:[/bold]       {result.path}",
            f"[bold]Size:[/bold]       {hdr.file_size:,} bytes ({hdr.file_size / 1024:.1f} KiB)",
            f"[bold]Version:[/bold]    {hdr.version}",
            f"[bold]Checksum:[/bold]   0x{hdr.checksum:08x}",
            f"[bold]Signature:[/bold]  {hdr.signature}",
            f"[bold]Image:[/bold]      {result.width} x {result.height} "
            f"({result.painted_pixels:,} pixels painted)",
        ]
        panel = Panel(
            "\n".join(lines),
            title="[bold bright_cyan]DEX Information[/bold bright_cyan]",
            border_style="bright_cyan",
            padding=(1, 2),
        )
        self._console.rich.print(panel)
        self._console.blank()

    def display_header(self, header: DexHeader, width: int, height: int) -> None:
        """Print the header sizes and offsets, one row per section."""
        rows: list[tuple[str, str, str]] = [
            ("file", f"{header.file_size:,}", "-"),
            ("header", f"{header.header_size:,}", "0x0"),
            ("link", f"{header.link_size:,}", f"0x{header.link_off:x}"),
            ("map", "-", f"0x{header.map_off:x}"),
        ]
        for section in header.sections():
            rows.append((section.name, f"{section.count:,}", f"0x{section.offset:x}"))
        rows.append(("data", f"{header.data_size:,}", f"0x{header.data_off:x}"))
        rows.append(("image width", str(width), "-"))
        rows.append(("image height", str(height), "-"))

        self._console.table(
            "Header",
            ["Item", "Size", "Offset"],
            rows,
            styles=["bold", "", "bright_cyan"],
        )
        self._console.blank()

    def display_coverage(self, result: DexMapResult) -> None:
        """Print how many pixels each category owns in the final image."""
        total = result.width * result.height or 1

        tbl = Table(
            title="Coverage",
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=False,
            padding=(0, 1),
        )
        tbl.add_column("Colour", width=6)
        tbl.add_column("Category", style="bold")
        tbl.add_column("Pixels", justify="right")
        tbl.add_column("Share", justify="right")

        ranked = sorted(result.coverage.items(), key=lambda kv: kv[1], reverse=True)
        for category, pixels in ranked:
            tbl.add_row(
                _swatch(category),
                category.value,
                f"{pixels:,}",
                f"{pixels / total:.1%}",
            )

        self._console.rich.print(tbl)
        self._console.blank()
