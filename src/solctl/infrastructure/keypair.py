"""Keypair file loading (Solana CLI JSON format: a list of 64 byte values)."""

from __future__ import annotations

import json
from pathlib import Path

from solders.keypair import Keypair

from solctl.domain.errors import KeypairError


def read_keypair(path: Path) -> Keypair:
    """Read a keypair from *path*, raising KeypairError on any problem."""
    path = path.expanduser()
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise KeypairError(
            f"Failed to read keypair from {path}: {exc.strerror or exc}",
            detail={"path": str(path)},
        ) from exc

    try:
        values = json.loads(raw)
        if not isinstance(values, list) or len(values) != 64:
            raise ValueError("expected a JSON array of 64 bytes")
        return Keypair.from_bytes(bytes(values))
    except (TypeError, ValueError) as exc:
        raise KeypairError(
            f"Failed to read keypair from {path}: {exc}",
            detail={"path": str(path)},
        ) from exc

