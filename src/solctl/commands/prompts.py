"""Prompt layer — numbered menus and typed inputs over ``click.prompt``.

Invalid input re-prompts (click behaviour); converted values come back
already typed (``Pubkey``, lamports, ``Keypair``).
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import click
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from solctl.domain.units import parse_commission, parse_optional_sol, parse_sol, sol_to_lamports
from solctl.infrastructure.keypair import read_keypair


class PubkeyParamType(click.ParamType):
    """A base58 public key."""

    name = "pubkey"

    def convert(
        self, value: Any, param: click.Parameter | None, ctx: click.Context | None
    ) -> Pubkey:
        if isinstance(value, Pubkey):
            return value
        try:
            return Pubkey.from_string(str(value).strip())
        except ValueError:
            self.fail(f"{value!r} is not a valid public key", param, ctx)


class SolAmountParamType(click.ParamType):
    """A positive SOL amount, converted to lamports."""

    name = "sol"

    def convert(
        self, value: Any, param: click.Parameter | None, ctx: click.Context | None
    ) -> int:
        if isinstance(value, int):
            return value
        try:
            lamports = sol_to_lamports(parse_sol(str(value)))
        except ValueError as exc:
            self.fail(str(exc), param, ctx)
        if lamports <= 0:
            self.fail("Amount must be greater than 0", param, ctx)
        return lamports


class OptionalSolAmountParamType(click.ParamType):
    """A SOL amount in lamports, or None for empty input."""

    name = "sol-or-empty"

    def convert(
        self, value: Any, param: click.Parameter | None, ctx: click.Context | None
    ) -> int | None:
        if value is None or isinstance(value, int):
            return value
        try:
            return parse_optional_sol(str(value))
        except ValueError as exc:
            self.fail(str(exc), param, ctx)


class CommissionParamType(click.ParamType):
    """Commission percentage 0-100; empty input means 0."""

    name = "commission"

    def convert(
        self, value: Any, param: click.Parameter | None, ctx: click.Context | None
    ) -> int:
        if isinstance(value, int):
            return value
        try:
            return parse_commission(str(value))
        except ValueError as exc:
            self.fail(str(exc), param, ctx)


PUBKEY = PubkeyParamType()
SOL_AMOUNT = SolAmountParamType()
OPTIONAL_SOL_AMOUNT = OptionalSolAmountParamType()
COMMISSION = CommissionParamType()
EXISTING_FILE = click.Path(exists=True, dir_okay=False, path_type=Path)


class OptionalFileParamType(click.ParamType):
    """Path to an existing file, or None for empty input."""

    name = "path-or-empty"

    def convert(
        self, value: Any, param: click.Parameter | None, ctx: click.Context | None
    ) -> Path | None:
        if value is None or isinstance(value, Path):
            return value
        if not str(value).strip():
            return None
        return EXISTING_FILE.convert(str(Path(str(value).strip()).expanduser()), param, ctx)


OPTIONAL_FILE = OptionalFileParamType()


class Prompter:
    """Interactive input for the router and leaf handlers."""

    def select[T](self, title: str, options: Sequence[T]) -> T:
        """Numbered menu; returns the chosen option."""
        click.echo()
        click.echo(click.style(title, bold=True))
        for index, option in enumerate(options, start=1):
            click.echo(f"  {index}. {option}")
        choice = click.prompt("Select", type=click.IntRange(1, len(options)))
        return options[choice - 1]

    def text(self, prompt: str, *, default: str | None = None) -> str:
        return click.prompt(prompt, default=default, type=str).strip()

    def pubkey(self, prompt: str) -> Pubkey:
        return click.prompt(prompt, type=PUBKEY)

    def amount(self, prompt: str) -> int:
        """A positive SOL amount, returned in lamports."""
        return click.prompt(f"{prompt} (SOL)", type=SOL_AMOUNT)

    def optional_amount(self, prompt: str) -> int | None:
        """A SOL amount in lamports, or None when left empty."""
        return click.prompt(
            f"{prompt} (SOL, empty for all)",
            type=OPTIONAL_SOL_AMOUNT,
            default="",
            show_default=False,
        )

    def commission(self, prompt: str) -> int:
        return click.prompt(
            f"{prompt} (0-100, empty for 0)", type=COMMISSION, default="", show_default=False
        )

    def path(self, prompt: str) -> Path:
        """Path to an existing file."""
        return click.prompt(prompt, type=EXISTING_FILE)

    def optional_path(self, prompt: str) -> Path | None:
        """Path to an existing file, or None when left empty."""
        return click.prompt(
            f"{prompt} (empty for default)", type=OPTIONAL_FILE, default="", show_default=False
        )

    def keypair(self, prompt: str) -> Keypair:
        """Path to a keypair file, read into a Keypair (KeypairError if unreadable)."""
        return read_keypair(self.path(prompt))

    def confirm(self, prompt: str, *, default: bool = True) -> bool:
        return click.confirm(prompt, default=default)
