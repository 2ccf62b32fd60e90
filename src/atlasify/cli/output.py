"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with progress bars, tables, and formatted messages.
"""

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

console = Console()

SYM_STEP = "▸"
SYM_OK = "✓"
SYM_ERR = "✗"
SYM_DOT = "·"


def create_progress() -> Progress:
    """Create a rich progress bar for shape and region processing.

    Returns:
        Configured Progress instance with description, bar and time elapsed.
    """
    return Progress(
        TextColumn("  {task.description:<10}"),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


def print_header(version: str) -> None:
    """Print application header."""
    console.print(f"\n[bold]Atlasify[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator."""
    console.print(f"\n{SYM_STEP} {message}")


def print_document_info(
    path: str,
    shape_count: int,
    region_count: int,
    rejected_count: int,
) -> None:
    """Print drawing information.

    Args:
        path: Path to the drawing
        shape_count: Named shapes found in the shape groups
        region_count: Distinct region names
        rejected_count: Shapes whose geometry could not be parsed
    """
    line = Text("  ")
    line.append(path)
    console.print(line)
    summary = f"  {shape_count:,} shapes {SYM_DOT} {region_count:,} regions"
    if rejected_count:
        summary += f" {SYM_DOT} [yellow]{rejected_count} rejected[/yellow]"
    console.print(summary)


def print_regions(regions: list[tuple[str, int]]) -> None:
    """Print a table of region names with their shape counts."""
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("  Region")
    table.add_column("Shapes", justify="right")
    for name, count in regions:
        table.add_row(f"  {name}", str(count))
    console.print(table)


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def print_processing_info(workers: int, is_auto: bool = False) -> None:
    """Print processing configuration."""
    auto_suffix = " (auto)" if is_auto else ""
    console.print(f"  {workers} workers{auto_suffix} {SYM_DOT} Ctrl+C to cancel")


def print_success(
    output_path: str,
    file_size: str,
    total_time_s: float,
    shapes: int,
    regions: int,
    errors: int,
    diagnostics: dict[str, int] | None = None,
    avg_time_ms: float | None = None,
    min_time_ms: float | None = None,
    max_time_ms: float | None = None,
) -> None:
    """Print success message with summary.

    Args:
        output_path: Path to output file
        file_size: Human-readable file size string
        total_time_s: Total processing time in seconds
        shapes: Number of shapes processed
        regions: Number of regions written
        errors: Number of errors encountered
        diagnostics: Diagnostic counts by code
        avg_time_ms: Average processing time per shape in milliseconds
        min_time_ms: Minimum processing time per shape in milliseconds
        max_time_ms: Maximum processing time per shape in milliseconds
    """
    console.print(f"\n[bold green]{SYM_OK} Complete[/bold green] in {_format_time(total_time_s)}")

    line = Text("  ")
    line.append(output_path, style="bold")
    line.append(f" ({file_size})")
    console.print(line)

    error_style = "red" if errors > 0 else "green"
    console.print(
        f"  {shapes} shapes {SYM_DOT} {regions} regions {SYM_DOT} "
        f"[{error_style}]{errors} errors[/{error_style}]"
    )

    if diagnostics:
        parts = [f"{count} {code.lower()}" for code, count in sorted(diagnostics.items())]
        console.print(f"  [yellow]{f' {SYM_DOT} '.join(parts)}[/yellow]")

    if avg_time_ms is not None:
        timing_str = f"{avg_time_ms:.1f}ms avg per shape"
        if min_time_ms is not None and max_time_ms is not None:
            timing_str += f" ({min_time_ms:.1f}–{max_time_ms:.1f}ms range)"
        console.print(f"  {timing_str}")


def print_error(message: str, details: str | None = None) -> None:
    """Print error message."""
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")


def print_cancellation_notice() -> None:
    """Print cancellation acknowledgment."""
    console.print(f"\n{SYM_DOT} Cancelling... waiting for in-progress shapes")


def print_cancellation_summary(processed: int, cancelled: int) -> None:
    """Print cancellation summary.

    Args:
        processed: Number of shapes processed before cancellation
        cancelled: Number of pending tasks that were cancelled
    """
    console.print(f"\n{SYM_DOT} [bold]Cancelled[/bold]")
    console.print(f"  {processed} shapes completed {SYM_DOT} {cancelled} tasks cancelled")
    console.print("  No output file created")
