"""
DexMap Engine
==============

Orchestrates one DEX-to-image run: load the file, parse and validate the
header, size the canvas, walk every structure and paint the regions.

Analysis Pipeline:
    1. Read the file (bounded by ``dexmap.max_file_size``)
    2. Parse the header; fatal problems stop here, before any allocation
    3. Turn header warnings into LOW findings
    4. Allocate the canvas: ``ceil(size / width) + 1`` rows
    5. Walk header, tables, strings, protos and class definitions
    6. Paint the regions in emission order (last write wins)
    7. Turn locally aborted substructures into INFO findings

The async :meth:`DexMapEngine.analyze` entry point matches the other Prism
tools; the pipeline itself is synchronous and runs in the default executor.

References:
    - Jain, A., Gonzalez, H., & Stakhanova, N. (2015). Enriching Reverse
      Engineering through Visual Exploration of Android Binaries. PPREW-5.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path
from typing import NamedTuple

from shared.config import PrismConfig
from shared.logger import PrismLogger
from shared.models import Finding, ScanResult, Severity

from dexmap.analyzers.sections import SectionWalker
from dexmap.core.errors import FileTooLargeError
from dexmap.core.models import DecodeIssue, DexHeader, DexMapResult, HeaderWarning
from dexmap.output.canvas import Canvas, RegionPainter
from dexmap.parsers.header import describe_warning, parse_header


class DexMapRun(NamedTuple):
    """The result model and the painted canvas it describes."""
    result: DexMapResult
    canvas: Canvas


# ---------------------------------------------------------------------------
# DexMapEngine
# ---------------------------------------------------------------------------

class DexMapEngine:
    """Runs the DexMap pipeline on one file.

    Fatal errors (:class:`~dexmap.core.errors.MalformedHeaderError`,
    :class:`~dexmap.core.errors.SizeMismatchError`,
    :class:`~dexmap.core.errors.FileTooLargeError`) propagate to the
    caller; nothing is painted in that case.

    Usage::

        engine = DexMapEngine()
        run = await engine.analyze("classes.dex")
        DexMapReportGenerator().generate_ppm(run.canvas, "classes.dex.ppn")

    Or synchronously::

        run = engine.analyze_sync("classes.dex")
    """

    def __init__(
        self,
        config: PrismConfig | None = None,
        logger: PrismLogger | None = None,
    ) -> None:
        """Initialise the engine.

        Args:
            config: Prism configuration.  Defaults are used if not provided.
            logger: Logger instance.  A new one is created if not provided.
        """
        self._config: PrismConfig = config or PrismConfig()
        self._logger: PrismLogger = logger or PrismLogger("dexmap.engine")

    # ------------------------------------------------------------------ #
    #  Entry points
    # ------------------------------------------------------------------ #

    async def analyze(self, file_path: str | Path) -> DexMapRun:
        """Read *file_path* and map it.

        Raises:
            FileNotFoundError: *file_path* does not exist.
            FileTooLargeError: The file exceeds ``dexmap.max_file_size``.
            MalformedHeaderError: Not a DEX file.
            SizeMismatchError: Declared size differs from the file size.
        """
        path = Path(file_path)
        self._logger.info(f"Starting analysis of {path}")

        file_size = path.stat().st_size
        max_size = self._config.dexmap.max_file_size
        if file_size > max_size:
            raise FileTooLargeError(file_size, max_size)

        data = path.read_bytes()
        return await asyncio.get_running_loop().run_in_executor(
            None,
            self.analyze_data,
            data,
            str(path.resolve()),
        )

    def analyze_sync(self, file_path: str | Path) -> DexMapRun:
        """Synchronous wrapper around :meth:`analyze`."""
        return asyncio.run(self.analyze(file_path))

    def analyze_data(self, data: bytes, file_path: str = "<memory>") -> DexMapRun:
        """Map raw bytes already in memory.

        Args:
            data: Complete DEX file contents.
            file_path: Display path for the result.
        """
        settings = self._config.dexmap
        with self._logger.timed(f"dexmap {file_path}"):
            header, warnings = parse_header(data)
            findings = self._header_findings(header, warnings)
            self._logger.info(
                f"DEX {header.version}: {len(data):,} bytes, "
                f"{header.string_ids_size} strings, {header.class_defs_size} classes"
            )

            canvas = Canvas(settings.canvas_width, len(data))
            self._logger.debug(f"Canvas {canvas.width}x{canvas.height}")

            with self._logger.operation("walk"):
                walker = SectionWalker(
                    data, header, strict_values=settings.strict_encoded_values
                )
                regions, issues = walker.walk()
                findings.extend(self._issue_findings(issues))

            coverage = RegionPainter(canvas).apply(regions)
            self._logger.info(
                f"Painted {len(regions)} regions, {len(issues)} substructures skipped"
            )

        result = DexMapResult(
            path=file_path,
            header=header,
            header_warnings=warnings,
            width=canvas.width,
            height=canvas.height,
            regions=regions,
            coverage=coverage,
            findings=findings,
        )
        return DexMapRun(result, canvas)

    # ------------------------------------------------------------------ #
    #  Findings
    # ------------------------------------------------------------------ #

    def _header_findings(
        self, header: DexHeader, warnings: list[HeaderWarning]
    ) -> list[Finding]:
        findings: list[Finding] = []
        for warning in warnings:
            message = describe_warning(warning, header)
            self._logger.warning(message)
            findings.append(Finding(
                severity=Severity.LOW,
                title=f"Header anomaly: {warning.value}",
                description=message,
                evidence={"warning": warning.value},
            ))
        return findings

    def _issue_findings(self, issues: list[DecodeIssue]) -> list[Finding]:
        findings: list[Finding] = []
        for issue in issues:
            self._logger.debug(
                f"Skipped {issue.structure} at 0x{issue.offset:x}: {issue.message}"
            )
            findings.append(Finding(
                severity=Severity.INFO,
                title=f"Skipped {issue.structure}",
                description=issue.message,
                evidence={"structure": issue.structure, "offset": issue.offset},
                recommendation="The structure's bytes are left unpainted.",
            ))
        return findings

    # ------------------------------------------------------------------ #
    #  Scan envelope
    # ------------------------------------------------------------------ #

    @staticmethod
    def to_scan_result(result: DexMapResult, started: datetime) -> ScanResult:
        """Wrap *result* in the suite-wide :class:`ScanResult` envelope."""
        scan = ScanResult(
            tool_name="dexmap",
            target=result.path or "<memory>",
            start_time=started,
            findings=list(result.findings),
            metadata={"dexmap": result.model_dump(mode="json")},
        )
        return scan.finalize(
            f"Map complete: {result.width}x{result.height} | "
            f"Regions: {len(result.regions)} | "
            f"Findings: {len(result.findings)}"
        )