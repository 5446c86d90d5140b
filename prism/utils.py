"""Shared utility functions for PRISM.

Provides logging setup, requirement-file discovery and I/O, JSON output,
and Rich-based console helpers used by the CLI. The analysis core never
imports this module; it only logs through ``logging``.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.rule import Rule
from rich.table import Table

from prism.analysis.models import AnalysisResult, Severity

console = Console()

REQUIREMENT_SUFFIXES = (".txt", ".md", ".markdown", ".rst")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def configure_logging(verbose: bool = False) -> None:
    """Route ``logging`` output through Rich.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=verbose)],
        force=True,
    )
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ---------------------------------------------------------------------------
# File helpers
# ---------------------------------------------------------------------------


def read_requirement_file(path: str | Path) -> str:
    """Read a UTF-8 requirement document.

    Raises:
        FileNotFoundError: If the file does not exist.
        UnicodeDecodeError: If the file is not UTF-8 text.
    """
    return Path(path).read_text(encoding="utf-8")


def discover_requirement_files(directory: str | Path) -> list[Path]:
    """Return every requirement document under *directory*, sorted by path."""
    root = Path(directory)
    if not root.is_dir():
        return []
    return sorted(
        p for p in root.rglob("*")
        if p.is_file() and p.suffix.lower() in REQUIREMENT_SUFFIXES
    )


async def save_json(data: dict[str, Any] | list[Any], path: str | Path) -> None:
    """Save data as pretty-printed JSON.

    Parent directories are created automatically. The write itself runs in a
    worker thread to avoid blocking the event loop on large files.
    """
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    content = json.dumps(data, indent=2, ensure_ascii=False, default=str)
    await asyncio.to_thread(file_path.write_text, content, "utf-8")


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
    """
    if seconds < 0:
        return "0.0s"

    minutes = int(seconds // 60)
    secs = seconds % 60
    if minutes > 0:
        return f"{minutes}m {int(secs)}s"
    return f"{secs:.1f}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------

SEVERITY_COLORS: dict[Severity, str] = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "cyan",
}


def print_section_header(title: str, color: str = "bright_cyan") -> None:
    """Print a full-width rule with *title*."""
    console.print()
    console.print(Rule(f"[bold {color}] {title} [/bold {color}]", style=color))
    console.print()


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, escape(str(value)))

    console.print(table)
    console.print()


def print_ambiguity_table(result: AnalysisResult) -> None:
    """Print the detected ambiguities, most severe first."""
    if not result.ambiguities:
        print_success("No ambiguities detected")
        return
    table = Table(title="Ambiguities", show_header=True, header_style="bold cyan")
    table.add_column("Severity", no_wrap=True)
    table.add_column("Text")
    table.add_column("Reason")
    table.add_column("Source", style="dim", no_wrap=True)
    for ambiguity in result.ambiguities:
        color = SEVERITY_COLORS[ambiguity.severity]
        table.add_row(
            f"[{color}]{ambiguity.severity.value}[/{color}]",
            escape(ambiguity.matched_text),
            escape(ambiguity.reason),
            ambiguity.origin,
        )
    console.print(table)
    console.print()


def analysis_summary(result: AnalysisResult) -> dict[str, str]:
    """Key figures of *result* for :func:`print_summary_table`."""
    story = result.story_validation
    return {
        "Source": result.requirement.source,
        "Actors": ", ".join(result.entities.actors) or "-",
        "Actions": ", ".join(result.entities.actions) or "-",
        "Objects": ", ".join(result.entities.objects) or "-",
        "Ambiguities": str(len(result.ambiguities)),
        "Completeness": f"{result.completeness.score:.0f}/100",
        "User story format": "valid" if story.is_valid_format else "invalid",
        "Business value": f"{story.business_value_score:.0f}/100",
        "NFR suggestions": str(len(result.nfr_suggestions)),
        "AI": "degraded" if result.degraded else ("augmented" if result.ai_augmented else "off"),
    }


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def create_progress() -> Progress:
    """Create a Rich progress bar for batch runs.

    Returns:
        A ``Progress`` instance suitable for use as a context manager.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
    )
