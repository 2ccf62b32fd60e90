"""CLI application entry point for atlasify.

This module provides the main CLI interface using Typer.
"""

import os
from pathlib import Path
from typing import Annotated

import typer

from atlasify import __version__
from atlasify.cli.output import (
    console,
    create_progress,
    print_cancellation_notice,
    print_cancellation_summary,
    print_document_info,
    print_error,
    print_header,
    print_processing_info,
    print_regions,
    print_step,
    print_success,
)
from atlasify.config import (
    AtlasifySettings,
    LoggingConfig,
    OutputConfig,
    ProcessingConfig,
)
from atlasify.core import MapProcessor
from atlasify.exceptions import (
    AtlasifyError,
    DocumentError,
    OutputError,
)
from atlasify.io import GeoJsonWriter, MapReader

app = typer.Typer(
    name="atlasify",
    help="Convert an SVG Winkel Tripel world map into GeoJSON regions.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Atlasify[/bold blue] v{__version__}")
        raise typer.Exit()


@app.command()
def convert(
    input_map: Annotated[
        Path,
        typer.Argument(
            help="Path to the input SVG map",
            show_default=False,
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output path (default: {name}.geojson)",
        ),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option(
            "--workers",
            "-j",
            help="Number of parallel workers (default: auto)",
            min=1,
        ),
    ] = None,
    unloop_rings: Annotated[
        bool,
        typer.Option(
            "--unloop",
            help="Reduce self-crossing rings to their largest face",
        ),
    ] = False,
    clean: Annotated[
        bool,
        typer.Option(
            "--clean",
            help="Clean the output with mapshaper (must be on PATH)",
        ),
    ] = False,
    list_regions: Annotated[
        bool,
        typer.Option(
            "--list-regions",
            help="List region names with their shape counts and exit",
        ),
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbose console output",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Convert an SVG world map to GeoJSON.

    Shapes are grouped into regions by their element ids, flattened,
    unprojected from Winkel Tripel to longitude/latitude, nested into
    polygons with holes and merged per region.

    Example:
        atlasify world.svg

    This will create world.geojson with one feature per region.
    """
    if verbose and quiet:
        print_error("Cannot use --verbose and --quiet together")
        raise typer.Exit(code=1)

    if not input_map.exists():
        print_error(
            f"Input file not found: {input_map}",
            details=f"The file '{input_map}' does not exist or is not accessible.",
        )
        raise typer.Exit(code=1)

    if not input_map.is_file():
        print_error(
            f"Input path is not a file: {input_map}",
            details="Please provide a path to an SVG file.",
        )
        raise typer.Exit(code=1)

    if not quiet:
        print_header(__version__)

    settings = AtlasifySettings(
        processing=ProcessingConfig(
            max_workers=workers,
            unloop_rings=unloop_rings,
        ),
        output=OutputConfig(run_mapshaper=clean),
        logging=LoggingConfig(
            log_file=log_file,
            log_level="INFO" if verbose else log_level,
        ),
    )

    try:
        if list_regions:
            _handle_list_regions(input_map, settings, quiet)
            raise typer.Exit(code=0)

        if not quiet:
            print_step("Loading map")

        reader = MapReader(input_map, settings.document)
        reader.load()
        shapes = list(reader.iter_shapes())
        region_names = {shape.name for shape in shapes}

        if not quiet:
            print_document_info(
                path=str(input_map),
                shape_count=len(shapes),
                region_count=len(region_names),
                rejected_count=len(reader.rejected),
            )
            if verbose:
                for element_id, reason in reader.rejected:
                    console.print(f"  [yellow]{element_id}[/yellow]: {reason}")

        if not shapes:
            if not quiet:
                console.print("\nNo named shapes found. Nothing to convert.")
            raise typer.Exit(code=0)

        if not quiet:
            actual_workers = workers if workers else os.cpu_count() or 1
            print_step("Processing")
            print_processing_info(actual_workers, is_auto=(workers is None))

        output_path = output if output is not None else GeoJsonWriter.get_output_path(input_map)

        processor = MapProcessor(settings, quiet=quiet)

        try:
            if not quiet:
                with create_progress() as progress:
                    stage_tasks = {
                        "shapes": progress.add_task("shapes", total=len(shapes)),
                        "regions": progress.add_task("regions", total=len(region_names)),
                    }

                    def update_progress(
                        stage: str, completed: int, total: int, *_: object
                    ) -> None:
                        progress.update(stage_tasks[stage], completed=completed, total=total)

                    stats = processor.process(
                        input_path=input_map,
                        output_path=output_path,
                        max_workers=workers,
                        progress_callback=update_progress,
                    )
            else:
                stats = processor.process(
                    input_path=input_map,
                    output_path=output_path,
                    max_workers=workers,
                )
        except KeyboardInterrupt:
            if not quiet:
                partial = processor.stats
                print_cancellation_notice()
                print_cancellation_summary(
                    processed=partial.processed_count if partial else 0,
                    cancelled=partial.cancelled_count if partial else 0,
                )
            raise typer.Exit(code=130) from None

        if not quiet:
            print_success(
                output_path=str(output_path),
                file_size=_format_file_size(output_path),
                total_time_s=stats.duration_seconds,
                shapes=stats.processed_count,
                regions=stats.region_count,
                errors=stats.error_count,
                diagnostics=stats.diagnostic_counts if verbose else None,
                avg_time_ms=stats.avg_shape_time_ms,
                min_time_ms=stats.min_shape_time_ms,
                max_time_ms=stats.max_shape_time_ms,
            )

        if stats.error_count and not quiet:
            for name, message in stats.errors[:10]:
                console.print(f"  [red]{name}[/red]: {message}")

    except DocumentError as e:
        print_error(f"Could not read map: {e}")
        raise typer.Exit(code=1)
    except OutputError as e:
        print_error(f"Could not write output: {e}")
        raise typer.Exit(code=1)
    except AtlasifyError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except typer.Exit:
        raise
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)


def _handle_list_regions(path: Path, settings: AtlasifySettings, quiet: bool) -> None:
    """Handle --list-regions mode.

    Args:
        path: Path to the SVG map
        settings: Atlasify settings
        quiet: Suppress everything but the region list
    """
    if not quiet:
        print_step("Loading map")

    reader = MapReader(path, settings.document)
    reader.load()

    counts: dict[str, int] = {}
    for shape in reader.iter_shapes():
        counts[shape.name] = counts.get(shape.name, 0) + 1

    if not quiet:
        print_document_info(
            path=str(path),
            shape_count=sum(counts.values()),
            region_count=len(counts),
            rejected_count=len(reader.rejected),
        )
        console.print()

    print_regions(list(counts.items()))


def _format_file_size(path: Path) -> str:
    """Format file size in human-readable form (e.g., "428 KB")."""
    try:
        size_bytes = path.stat().st_size
    except OSError:
        return "unknown"
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.0f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
