"""Rich Console factory and theme for solctl output.

Creates Console instances that render to a StringIO buffer, preserving
the ``render_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

SOL_THEME = Theme(
    {
        "sol.ok": "bold green",
        "sol.error": "bold red",
        "sol.warning": "bold yellow",
        "sol.op": "bold cyan",
        "sol.key": "dim",
        "sol.address": "bold blue",
        "sol.signature": "magenta",
        "sol.amount": "bold green",
        "sol.title": "bold",
        "sol.banner": "bold magenta",
    }
)

_ADDRESS_KEYS = frozenset(
    {
        "address",
        "owner",
        "sender",
        "recipient",
        "authority",
        "staker",
        "withdrawer",
        "custodian",
        "voter",
        "new_voter",
        "identity",
        "vote_authority",
        "withdraw_authority",
        "stake_account",
        "vote_account",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=SOL_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_key(key: str) -> str:
    """Return the Rich style name for a payload field."""
    if key in _ADDRESS_KEYS:
        return "sol.address"
    if key == "signature":
        return "sol.signature"
    if key in ("sol", "lamports", "balance"):
        return "sol.amount"
    return ""
