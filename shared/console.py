"""
Prism Console Interface
========================

Rich-powered console abstraction shared by every Prism tool.

Wraps :class:`rich.console.Console` with helpers for the startup banner,
section rules, severity-coloured status lines and tables, so that all tools
print with the same palette.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from typing import Any, Sequence

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

_PRISM_THEME = Theme(
    {
        "prism.banner": "bold bright_cyan",
        "prism.section": "bold bright_magenta",
        "prism.success": "bold green",
        "prism.warning": "bold yellow",
        "prism.error": "bold red",
        "prism.dim": "dim white",
        "prism.high": "bold red",
        "prism.medium": "bold yellow",
        "prism.low": "bold bright_cyan",
        "prism.informational": "bold bright_blue",
        "prism.critical": "bold white on red",
    }
)

_BANNER_ART = r"""[bright_cyan]
  ____  _____  __  __ __  __    _    ____
 |  _ \| ____| \ \/ /|  \/  |  / \  |  _ \
 | | | |  _|    \  / | |\/| | / _ \ | |_) |
 | |_| | |___   /  \ | |  | |/ ___ \|  __/
 |____/|_____| /_/\_\|_|  |_/_/   \_\_|
[/bright_cyan]"""

_TAGLINE = "Visual exploration of Android binaries"
_PAPER = (
    "Enriching Reverse Engineering through Visual Exploration of Android "
    "Binaries (PPREW-5) -- http://dx.doi.org/10.1145/2843859.2843866"
)


class PrismConsole:
    """Unified console interface for all Prism tools.

    Usage::

        con = PrismConsole()
        con.banner()
        con.section("Header")
        con.success("Image written")
    """

    def __init__(self, *, quiet: bool = False) -> None:
        """Initialise the console.

        Args:
            quiet: Suppress all output (useful in library / test mode).
        """
        self._console = Console(
            theme=_PRISM_THEME,
            quiet=quiet,
            highlight=False,
        )

    @property
    def rich(self) -> Console:
        """Direct access to the underlying Rich Console instance."""
        return self._console

    # ------------------------------------------------------------------ #
    #  Banner / sections
    # ------------------------------------------------------------------ #

    def banner(self, version: str = "0.9.0") -> None:
        """Display the startup banner with the tool version and paper reference."""
        subtitle = (
            f"[prism.banner]{_TAGLINE}[/prism.banner]\n"
            f"[prism.dim]Version: {version}[/prism.dim]\n"
            f"[prism.dim]{_PAPER}[/prism.dim]"
        )
        panel = Panel(
            Align.center(Text.from_markup(_BANNER_ART + "\n" + subtitle)),
            border_style="bright_cyan",
            padding=(0, 2),
        )
        self._console.print(panel)

    def section(self, title: str) -> None:
        """Print a prominent section rule."""
        self._console.rule(f"  {title}  ", style="prism.section", characters="─")
        self._console.print()

    # ------------------------------------------------------------------ #
    #  Message helpers (severity-coloured)
    # ------------------------------------------------------------------ #

    def success(self, message: str) -> None:
        self._console.print(f"[prism.success][✔] SUCCESS:[/prism.success] {message}")

    def warning(self, message: str) -> None:
        self._console.print(f"[prism.warning][⚠] WARNING:[/prism.warning] {message}")

    def error(self, message: str) -> None:
        self._console.print(f"[prism.error][✘] ERROR:[/prism.error] {message}")

    # ------------------------------------------------------------------ #
    #  Table display
    # ------------------------------------------------------------------ #

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        caption: str | None = None,
        styles: Sequence[str] | None = None,
    ) -> None:
        """Render a styled Rich table; each cell is stringified."""
        tbl = Table(
            title=title,
            caption=caption,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=False,
            padding=(0, 1),
        )
        for idx, col_name in enumerate(columns):
            style = styles[idx] if styles and idx < len(styles) else ""
            tbl.add_column(col_name, style=style)

        for row in rows:
            tbl.add_row(*(str(cell) for cell in row))

        self._console.print(tbl)

    def findings_table(self, findings: Sequence[Any]) -> None:
        """Render findings with severity colouring.

        Expects objects with ``severity``, ``title`` and ``description``
        attributes (e.g. :class:`shared.models.Finding`).
        """
        severity_style_map: dict[str, str] = {
            "CRITICAL": "prism.critical",
            "HIGH": "prism.high",
            "MEDIUM": "prism.medium",
            "LOW": "prism.low",
            "INFO": "prism.informational",
        }

        tbl = Table(
            title="Findings",
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=True,
            padding=(0, 1),
        )
        tbl.add_column("#", style="dim", width=4, justify="right")
        tbl.add_column("Severity", width=10)
        tbl.add_column("Title")
        tbl.add_column("Description", ratio=2)

        for idx, finding in enumerate(findings, start=1):
            sev = getattr(finding, "severity", "INFO")
            sev_name = sev.value if hasattr(sev, "value") else str(sev).upper()
            sev_style = severity_style_map.get(sev_name, "")
            sev_cell = f"[{sev_style}]{sev_name}[/{sev_style}]" if sev_style else sev_name
            tbl.add_row(
                str(idx),
                sev_cell,
                str(getattr(finding, "title", "")),
                str(getattr(finding, "description", "")),
            )

        self._console.print(tbl)

    # ------------------------------------------------------------------ #
    #  Utility
    # ------------------------------------------------------------------ #

    def blank(self, count: int = 1) -> None:
        for _ in range(count):
            self._console.print()

    def divider(self, style: str = "dim") -> None:
        self._console.rule(style=style)
