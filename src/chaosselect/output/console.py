"""Rich Console factory and theme for chaosselect output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

CHAOS_THEME = Theme(
    {
        "cs.ok": "bold green",
        "cs.error": "bold red",
        "cs.warning": "bold yellow",
        "cs.op": "bold cyan",
        "cs.key": "dim",
        "cs.namespace": "blue",
        "cs.name": "bold",
        "cs.node": "dim",
        "cs.phase.running": "green",
        "cs.phase.pending": "yellow",
        "cs.phase.failed": "red",
        "cs.phase.other": "magenta",
    }
)

_PHASE_STYLES: dict[str, str] = {
    "Running": "cs.phase.running",
    "Pending": "cs.phase.pending",
    "Failed": "cs.phase.failed",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=CHAOS_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_phase(phase: str) -> str:
    """Return the Rich style name for a pod phase."""
    return _PHASE_STYLES.get(phase, "cs.phase.other")
