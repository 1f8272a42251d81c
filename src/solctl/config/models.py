"""Pydantic configuration models with code-baked defaults.

The persisted file is flat and kebab-cased because it is hand-edited::

    rpc-url = "https://api.devnet.solana.com"
    commitment-level = "confirmed"
    keypair-path = "~/.config/solana/id.json"

A leading ``~/`` in ``keypair-path`` is expanded at load time.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator

from solctl.domain.types import CommitmentLevel

DEVNET_RPC = "https://api.devnet.solana.com"
DEFAULT_KEYPAIR_PATH = Path("~/.config/solana/id.json")


def _kebab(name: str) -> str:
    return name.replace("_", "-")


class LedgerConfig(BaseModel):
    """Endpoint, commitment, and signing key for a session."""

    model_config = ConfigDict(frozen=True, alias_generator=_kebab, populate_by_name=True)

    rpc_url: str = DEVNET_RPC
    commitment_level: CommitmentLevel = CommitmentLevel.CONFIRMED
    keypair_path: Path = DEFAULT_KEYPAIR_PATH.expanduser()

    @field_validator("rpc_url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"RPC URL must start with http:// or https://, got {value!r}")
        return value

    @field_validator("keypair_path", mode="before")
    @classmethod
    def _expand_tilde(cls, value: str | Path) -> Path:
        return Path(value).expanduser()

    def to_toml_fields(self) -> dict[str, str]:
        """Field values keyed by their file names, for the config template."""
        return {
            "rpc-url": self.rpc_url,
            "commitment-level": str(self.commitment_level),
            "keypair-path": str(self.keypair_path),
        }


class ConfigField(StrEnum):
    """Editable keys of the config file."""

    RPC_URL = "rpc-url"
    COMMITMENT_LEVEL = "commitment-level"
    KEYPAIR_PATH = "keypair-path"
