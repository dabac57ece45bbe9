"""Terminal output helpers for the CLI."""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from typing import TextIO

RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
CYAN = "\033[36m"


def supports_color(stream: TextIO | None = None) -> bool:
    stream = stream or sys.stdout
    if os.environ.get("NO_COLOR"):
        return False
    if not hasattr(stream, "isatty") or not stream.isatty():
        return False
    return os.environ.get("TERM") != "dumb"


def colorize(text: str, color: str, bold: bool = False, stream: TextIO | None = None) -> str:
    if not supports_color(stream):
        return text
    prefix = (BOLD if bold else "") + color
    return f"{prefix}{text}{RESET}"


def swatch(hex_color: str, stream: TextIO | None = None) -> str:
    """Render a ``#rrggbb`` colour as a true-colour block, or the hex code when colour is off."""
    if not supports_color(stream) or len(hex_color) != 7:  # noqa: PLR2004
        return hex_color
    try:
        r, g, b = (int(hex_color[i : i + 2], 16) for i in (1, 3, 5))
    except ValueError:
        return hex_color
    return f"\033[48;2;{r};{g};{b}m  {RESET} {hex_color}"


def print_success(message: str, stream: TextIO | None = None) -> None:
    stream = stream or sys.stdout
    print(colorize("✓", GREEN, bold=True, stream=stream) + " " + message, file=stream)


def print_error(message: str, stream: TextIO | None = None) -> None:
    stream = stream or sys.stderr
    print(colorize("✗", RED, bold=True, stream=stream) + " " + message, file=stream)


def print_warning(message: str, stream: TextIO | None = None) -> None:
    stream = stream or sys.stdout
    print(colorize("⚠", YELLOW, bold=True, stream=stream) + " " + message, file=stream)


def print_summary_box(
    title: str, items: Sequence[tuple[str, str | int]], stream: TextIO | None = None
) -> None:
    """Print aligned key/value pairs under a header rule."""
    stream = stream or sys.stdout
    width = max((len(k) for k, _ in items), default=0)
    print(colorize(title, CYAN, bold=True, stream=stream), file=stream)
    print(colorize("─" * 40, DIM, stream=stream), file=stream)
    for key, value in items:
        shown = str(value)
        if isinstance(value, int) and value > 0:
            shown = colorize(shown, GREEN, bold=True, stream=stream)
        print(f"  {key.ljust(width)}  {shown}", file=stream)
