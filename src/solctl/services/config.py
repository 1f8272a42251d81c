"""ConfigService — view and edit the persisted configuration.

An edit is validated, a session is built from the new values, the file
is rewritten, and only then does the new session become current.  A
value the model rejects, a keypair path that cannot be read, or a file
that cannot be written leaves the current session untouched.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError

from solctl.config.discovery import describe_validation_error, load_config, save_config
from solctl.config.models import ConfigField, LedgerConfig
from solctl.domain.errors import ConfigError
from solctl.infrastructure.session import ContextHolder
from solctl.services.contracts import ConfigData, dump_validated
from solctl.services.result import ServiceResult
from solctl.services.telemetry import traced


class ConfigService:
    """Operations of the Config menu group."""

    def __init__(self, holder: ContextHolder, path: Path) -> None:
        self._holder = holder
        self._path = path

    def _persisted(self) -> LedgerConfig:
        """File values when the file exists, else the session's config."""
        if self._path.is_file():
            return load_config(self._path)
        return self._holder.current.config

    def _payload(self, op: str, config: LedgerConfig, changed: str | None = None) -> ServiceResult:
        return ServiceResult(
            ok=True,
            op=op,
            data=dump_validated(
                ConfigData,
                {
                    "path": str(self._path),
                    "rpc_url": config.rpc_url,
                    "commitment_level": str(config.commitment_level),
                    "keypair_path": str(config.keypair_path),
                    "changed": changed,
                },
            ),
        )

    @traced
    async def show(self) -> ServiceResult:
        return self._payload("config_show", self._persisted())

    @traced
    async def edit(self, field: ConfigField, value: str) -> ServiceResult:
        """Set *field* to *value*, save the file, and switch the session."""
        current = self._persisted()
        try:
            updated = LedgerConfig.model_validate(
                {**current.model_dump(by_alias=True), str(field): value}
            )
        except ValidationError as exc:
            raise ConfigError(
                f"Invalid value for {field}: {describe_validation_error(exc)}",
                detail={"field": str(field), "value": value},
            ) from exc

        await self._holder.reload(updated, commit=lambda: save_config(updated, self._path))
        return self._payload("config_edit", updated, changed=str(field))
