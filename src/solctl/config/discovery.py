"""Config file discovery, loading, and saving.

Resolution order: explicit ``--config`` path, then the ``SOLCTL_CONFIG``
env var, then ``~/.config/solctl/config.toml``.
"""

from __future__ import annotations

import os
import tomllib
from datetime import UTC, datetime
from pathlib import Path

from pydantic import ValidationError

from solctl.config.models import LedgerConfig
from solctl.domain.errors import ConfigError
from solctl.infrastructure.templates import build_template_environment

CONFIG_ENV_VAR = "SOLCTL_CONFIG"
CONFIG_RELATIVE_PATH = Path(".config") / "solctl" / "config.toml"


def config_file_path(explicit: Path | str | None = None) -> Path:
    """Where the config file lives (or would be written)."""
    if explicit:
        return Path(explicit).expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / CONFIG_RELATIVE_PATH


def find_config(explicit: Path | str | None = None) -> Path | None:
    """Return the config file path if it exists, else None."""
    path = config_file_path(explicit)
    return path if path.is_file() else None


def load_config(path: Path) -> LedgerConfig:
    """Load and validate the config file at *path*."""
    if not path.is_file():
        raise ConfigError(f"Config file does not exist: {path}", detail={"path": str(path)})
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(
            f"Failed to read config from {path}: {exc.strerror or exc}",
            detail={"path": str(path)},
        ) from exc
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}", detail={"path": str(path)}) from exc
    try:
        return LedgerConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(
            f"Invalid config in {path}: {describe_validation_error(exc)}",
            detail={"path": str(path)},
        ) from exc


def render_config(config: LedgerConfig) -> str:
    template = build_template_environment("config").get_template("config.toml.j2")
    return template.render(
        fields=config.to_toml_fields(),
        generated=datetime.now(UTC).strftime("%Y-%m-%d %H:%M UTC"),
    )


def save_config(config: LedgerConfig, path: Path) -> Path:
    """Write *config* to *path*, creating parent directories.

    Raises ConfigError when the directory or file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_config(config), encoding="utf-8")
    except OSError as exc:
        raise ConfigError(
            f"Failed to write config to {path}: {exc.strerror or exc}",
            detail={"path": str(path)},
        ) from exc
    return path


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic ValidationError into ``field: message`` pairs."""
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
