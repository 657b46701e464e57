"""Output styling for the orgauthz CLI.

Colors carry meaning consistently across commands: green for ALLOW and
success, red for DENY and errors, yellow for warnings, cyan for structure.
CliRunner and pipes strip the ANSI codes, so tests match plain text.
"""

from __future__ import annotations

__all__ = [
    "style_decision",
    "style_dim",
    "style_error",
    "style_header",
    "style_label",
    "style_success",
    "style_warning",
]

import click

_DECISION_COLORS = {"allow": "green", "deny": "red"}


def style_header(title: str) -> str:
    """Section title, underlined, e.g. ``Deciding policies``."""
    return click.style(title, fg="cyan", bold=True, underline=True)


def style_label(label: str) -> str:
    """Field name followed by a colon, e.g. ``Reason:``."""
    return click.style(label + ":", bold=True)


def style_success(text: str) -> str:
    return click.style("✓ " + text, fg="green")


def style_error(text: str) -> str:
    return click.style("✗ " + text, fg="red", bold=True)


def style_warning(text: str) -> str:
    return click.style("Warning: " + text, fg="yellow")


def style_dim(text: str) -> str:
    return click.style(text, dim=True)


def style_decision(value: str) -> str:
    """An effect or decision in upper case.

    Example:
        >>> click.echo(style_decision("deny"))
        DENY
    """
    return click.style(value.upper(), fg=_DECISION_COLORS.get(value), bold=True)
