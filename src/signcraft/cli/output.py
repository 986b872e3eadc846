"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with formatted step, summary and error messages.
"""

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from signcraft.utils import GenerationStats

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_DOT = "·"  # Separator/secondary info


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]SignCraft[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_input(source: str, detail: str | None = None) -> None:
    """Print the input being processed.

    Args:
        source: File path or inline input
        detail: Secondary information shown after the source
    """
    # Use Text to safely handle paths with special characters
    line = Text("  ")
    line.append(source)
    if detail:
        line.append(f" {SYM_DOT} {detail}")
    console.print(line)


def format_size(size_bytes: int) -> str:
    """Format a byte count in human-readable form (e.g. "428 KB")."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.0f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


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


def print_success(output_path: str, stats: GenerationStats) -> None:
    """Print success message with summary.

    Args:
        output_path: Path to output file
        stats: Statistics of the finished run
    """
    console.print(
        f"\n[bold green]{SYM_OK} Complete[/bold green] in {_format_time(stats.duration_seconds)}"
    )

    line = Text("  ")
    line.append(output_path, style="bold")
    line.append(f" ({format_size(stats.output_bytes)})")
    console.print(line)

    parts = [f"{stats.triangle_count:,} triangles"]
    if stats.path_count:
        parts.append(f"{stats.path_count} paths")
    if stats.connection_count:
        parts.append(f"{stats.connection_count} bridges")
    console.print("  " + f" {SYM_DOT} ".join(parts))

    problems = stats.skipped_count + stats.error_count
    if problems:
        console.print(
            f"  [yellow]{stats.skipped_count} skipped {SYM_DOT} "
            f"{stats.error_count} errors[/yellow]"
        )
        for element, message in stats.errors[:5]:
            console.print(f"  {SYM_DOT} {element}: {message}")


def print_error(message: str, details: str | None = None) -> None:
    """Print an error panel.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    body = Text(message, style="bold")
    if details:
        body.append(f"\n{details}", style="default")
    console.print()
    console.print(
        Panel(body, title=f"[bold red]{SYM_ERR} Error[/bold red]", border_style="red", expand=False)
    )
