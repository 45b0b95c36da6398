"""Standardized terminal output utilities.

All user-facing CLI messages should use these functions for consistent
formatting across the application.

Basic Usage:
    from dansbag_cli.output import success, info, warn, error, detail

    success("Bag is compliant")
    info("Validating bag.zip (STAND-ALONE)")
    warn("Zip contains more than one directory")
    error("Bag is not compliant: 2 rules violated")
    detail("[1.1.1] File [data/x] is not listed in any manifest")
"""

from __future__ import annotations

import sys
from typing import TextIO

import click

_STYLES = {
    "success": {"fg": "green"},
    "info": {"fg": "blue"},
    "warn": {"fg": "yellow"},
    "error": {"fg": "red"},
    "detail": {"fg": "bright_black"},  # Dimmed/gray
}

_PREFIXES = {
    "success": "✓",  # checkmark
    "info": "→",  # arrow
    "warn": "⚠",  # warning
    "error": "✗",  # X
    "detail": " ",
}


def _output(message: str, style: str, *, file: TextIO | None = None, nl: bool = True) -> None:
    prefix = _PREFIXES[style]
    fg_color = _STYLES[style]["fg"]
    styled_prefix = click.style(prefix, fg=fg_color)
    styled_message = click.style(message, fg=fg_color)
    click.echo(f"{styled_prefix} {styled_message}", file=file, nl=nl)


def success(message: str, *, file: TextIO | None = None, nl: bool = True) -> None:
    """Print a success message with green checkmark.

    Example:
        >>> success("Bag is compliant")
        ✓ Bag is compliant
    """
    _output(message, "success", file=file, nl=nl)


def info(message: str, *, file: TextIO | None = None, nl: bool = True) -> None:
    """Print an info message with blue arrow."""
    _output(message, "info", file=file, nl=nl)


def warn(message: str, *, file: TextIO | None = None, nl: bool = True) -> None:
    """Print a warning message with yellow warning symbol (default: stderr)."""
    _output(message, "warn", file=file or sys.stderr, nl=nl)


def error(message: str, *, file: TextIO | None = None, nl: bool = True) -> None:
    """Print an error message with red X (default: stderr).

    Example:
        >>> error("Bag on path 'x' could not be found or read")
        ✗ Bag on path 'x' could not be found or read
    """
    _output(message, "error", file=file or sys.stderr, nl=nl)


def detail(message: str, *, file: TextIO | None = None, nl: bool = True) -> None:
    """Print a detail line in dimmed text."""
    _output(message, "detail", file=file, nl=nl)
