"""Unified settings — CLI flags, env vars, and the TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``SOLCTL_*`` prefix (``SOLCTL_LEDGER__RPC_URL`` etc.)
  3. TOML file    — ``config.toml`` located by :func:`config_file_path`
  4. Code defaults — baked into :class:`LedgerConfig`

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
places the flat config file under the ``ledger`` section.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from solctl.config.discovery import config_file_path, describe_validation_error
from solctl.config.models import LedgerConfig
from solctl.domain.errors import ConfigError


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read the ledger section from the solctl config file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            try:
                raw = toml_path.read_text(encoding="utf-8")
            except OSError as exc:
                msg = f"Failed to read config from {toml_path}: {exc.strerror or exc}"
                raise ConfigError(msg, detail={"path": str(toml_path)}) from exc
            try:
                data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise ConfigError(msg, detail={"path": str(toml_path)}) from exc
            # File keys are kebab-case; normalize so env vars override the same keys.
            self._data = {"ledger": {key.replace("-", "_"): val for key, val in data.items()}}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for the TOML path during construction.
_tls = threading.local()


class SolSettings(BaseSettings):
    """Settings for one solctl process.

    Attributes:
        config_path: The config file in use (may not exist yet on first run).
        ledger: Endpoint, commitment, and keypair path for the session.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "SOLCTL_",
        "env_nested_delimiter": "__",
    }

    config_path: Path = Field(default_factory=config_file_path)

    # --- CLI flags ---
    json_output: bool = False
    verbose: bool = False
    log_json: bool = False

    ledger: LedgerConfig = Field(default_factory=LedgerConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(cls, *, config_path: str | None = None, **cli_flags: Any) -> SolSettings:
        """Construct settings from a CLI invocation.

        Raises ConfigError when the file is malformed or a value is invalid.
        """
        toml_path = config_file_path(config_path)
        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **cli_flags)
        except ValidationError as exc:
            raise ConfigError(
                f"Invalid config in {toml_path}: {describe_validation_error(exc)}",
                detail={"path": str(toml_path)},
            ) from exc
        finally:
            _tls.toml_path = None

    def with_ledger(self, ledger: LedgerConfig) -> SolSettings:
        """A copy of these settings bound to a new ledger config."""
        return self.model_copy(update={"ledger": ledger})
