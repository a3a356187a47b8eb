"""Terminal output helpers for the command-line interface."""

from __future__ import annotations

import click


def step(msg: str) -> None:
    """Print a visually distinct section header."""
    click.echo(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def fatal(msg: str) -> None:
    """Print an error message and exit with code 1.

    Use for unrecoverable errors that should stop the command.
    """
    raise click.ClickException(msg)


def checkbox_glyph(state: bool | None) -> str:
    """Render a tri-state checkbox: [x], [ ] or [-]."""
    if state is None:
        return "[-]"
    return "[x]" if state else "[ ]"
