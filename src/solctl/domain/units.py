"""Lamport/SOL conversions and operator input parsing."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

LAMPORTS_PER_SOL = 1_000_000_000


def lamports_to_sol(lamports: int) -> float:
    """Convert lamports to SOL for display.

    Examples:
        >>> lamports_to_sol(1_000_000_000)
        1.0
        >>> lamports_to_sol(2_500_000)
        0.0025
    """
    return lamports / LAMPORTS_PER_SOL


def sol_to_lamports(sol: Decimal | float | int | str) -> int:
    """Convert a SOL amount to lamports, truncating toward zero.

    Goes through ``Decimal(str(...))`` so that values such as ``0.3`` do not
    lose a lamport to binary floating point.

    Examples:
        >>> sol_to_lamports(1.0)
        1000000000
        >>> sol_to_lamports("0.3")
        300000000
    """
    return int(Decimal(str(sol)) * LAMPORTS_PER_SOL)


def parse_sol(raw: str) -> Decimal:
    """Parse a SOL amount string. Raises ``ValueError`` on garbage or negatives."""
    try:
        value = Decimal(raw.strip())
    except InvalidOperation as exc:
        raise ValueError(f"{raw!r} is not a valid SOL amount") from exc
    if not value.is_finite() or value < 0:
        raise ValueError(f"{raw!r} is not a valid SOL amount")
    return value


def parse_optional_sol(raw: str) -> int | None:
    """Parse an amount where an empty string means "everything".

    Returns lamports, or None for the empty input.
    """
    if not raw.strip():
        return None
    return sol_to_lamports(parse_sol(raw))


def parse_commission(raw: str) -> int:
    """Parse a 0-100 commission percentage; empty input means 0."""
    text = raw.strip()
    if not text:
        return 0
    try:
        value = int(text)
    except ValueError as exc:
        raise ValueError(f"Commission must be a whole number 0-100, got {raw!r}") from exc
    if not 0 <= value <= 100:
        raise ValueError(f"Commission must be between 0 and 100, got {value}")
    return value
