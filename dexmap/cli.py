"""
DexMap CLI -- DEX Structure Visualiser
=======================================

Click-based command-line interface for DexMap.  Maps one DEX file to a
PPM image whose pixels follow the file's byte order, each coloured by the
structure that occupies the byte.

Usage::

    # Write classes.dex.ppn in the current directory
    dexmap classes.dex

    # Print the header and coverage tables, no banner
    dexmap classes.dex --log --silent

    # Size static values by type and keep a JSON region report
    dexmap classes.dex --strict-values --regions-json regions.json

    # Machine-readable scan envelope on stdout
    dexmap classes.dex --json

References:
    - Click documentation: https://click.palletsprojects.com/
"""

from __future__ import annotations

import asyncio
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

import click

from shared.config import PrismConfig
from shared.console import PrismConsole
from shared.logger import PrismLogger

from dexmap import __version__
from dexmap.core.engine import DexMapEngine
from dexmap.core.errors import DexMapError
from dexmap.output.console import DexMapConsoleOutput
from dexmap.output.report import DexMapReportGenerator


def _load_config(config_path: str | None) -> PrismConfig:
    if config_path is not None:
        return PrismConfig.load(config_path)
    try:
        return PrismConfig.load()
    except (OSError, ValueError):
        return PrismConfig()


# ---------------------------------------------------------------------------
# CLI command
# ---------------------------------------------------------------------------

@click.command("dexmap")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output-dir", "-o",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for the image.  Default: global.output_dir.",
)
@click.option(
    "--silent", "-s",
    is_flag=True,
    default=False,
    help="Do not print the banner.",
)
@click.option(
    "--log", "-l",
    "show_log",
    is_flag=True,
    default=False,
    help="Print the header and coverage tables.",
)
@click.option(
    "--strict-values",
    is_flag=True,
    default=False,
    help="Size static-value arrays by value type instead of the droidcolors heuristic.",
)
@click.option(
    "--regions-json",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also write a JSON region report to this path.",
)
@click.option(
    "--json", "json_output",
    is_flag=True,
    default=False,
    help="Output the scan result as JSON to stdout.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable verbose/debug output.",
)
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="TOML configuration file.",
)
def dexmap_cli(
    path: str,
    output_dir: str | None,
    silent: bool,
    show_log: bool,
    strict_values: bool,
    regions_json: str | None,
    json_output: bool,
    verbose: bool,
    config_path: str | None,
) -> None:
    """DexMap -- DEX Structure Visualiser.

    Paint every byte of a DEX file with the colour of the structure that
    occupies it and save the result as a PPM image.

    PATH is the DEX file to map.

    Examples:

    \b
        # Map a DEX file
        python -m dexmap classes.dex

    \b
        # Header dump, no banner
        python -m dexmap classes.dex -l -s
    """
    console = PrismConsole(quiet=json_output)

    try:
        config = _load_config(config_path)
    except (OSError, ValueError) as exc:
        console.error(f"Could not load configuration: {exc}")
        sys.exit(1)

    if strict_values:
        config.dexmap.strict_encoded_values = True

    settings = config.global_settings
    logger = PrismLogger(
        "dexmap",
        log_level="DEBUG" if verbose else settings.log_level,
        log_file=settings.log_file or None,
        json_logs=settings.log_json,
    )

    if not silent:
        console.banner(__version__)

    started = datetime.now(timezone.utc)
    engine = DexMapEngine(config=config, logger=logger)

    try:
        run = asyncio.run(engine.analyze(path))
    except KeyboardInterrupt:
        console.warning("Analysis interrupted by user.")
        sys.exit(130)
    except (DexMapError, OSError) as exc:
        console.error(f"Analysis failed: {exc}")
        logger.debug("Analysis failed", exc_info=True)
        sys.exit(1)

    result = run.result
    report_gen = DexMapReportGenerator()

    out_dir = Path(output_dir or settings.output_dir)
    image_path = out_dir / f"{Path(path).name}{config.dexmap.output_extension}"
    try:
        written = report_gen.generate_ppm(run.canvas, image_path)
    except OSError as exc:
        console.error(f"Could not write image: {exc}")
        sys.exit(1)

    report_path = None
    if regions_json or config.dexmap.write_region_report:
        try:
            report_path = report_gen.generate_json(
                result, regions_json or out_dir / f"{Path(path).name}.json"
            )
        except OSError as exc:
            # A failed run leaves no image behind.
            Path(written).unlink(missing_ok=True)
            console.error(f"Could not write region report: {exc}")
            sys.exit(1)

    if json_output:
        scan = engine.to_scan_result(result, started)
        click.echo(json.dumps({"scan": scan.model_dump(mode="json")}, indent=2, default=str))
        return

    if show_log:
        DexMapConsoleOutput(console=console).display(result)
    elif result.findings:
        console.findings_table(result.findings)

    console.success(f"Image saved: {written} ({result.width}x{result.height})")
    if report_path:
        console.success(f"Region report saved: {report_path}")


# ---------------------------------------------------------------------------
# Module entry point
# ---------------------------------------------------------------------------

def main() -> None:
    """Entry point for the ``dexmap`` console script."""
    dexmap_cli()


if __name__ == "__main__":
    main()
