"""AppContext — shared state for one interactive session.

Created once by the root CLI command.  Provides lazy Session Context
initialization, the prompter, the spinner, and centralized result
emission (stdout/stderr routing).  Unlike a one-shot command, a failed
result never exits the process: the router keeps looping.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import TYPE_CHECKING

import click
from rich.console import Console

from solctl.commands.prompts import Prompter
from solctl.output.console import SOL_THEME
from solctl.output.formatters import format_result

if TYPE_CHECKING:
    from solctl.config.settings import SolSettings
    from solctl.infrastructure.session import ContextHolder, SessionContext
    from solctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing from the root command into the router.

    The session (keypair plus gateway) is created lazily on first use so
    ``--help`` and ``--version`` never read key material.
    """

    def __init__(
        self,
        settings: SolSettings,
        *,
        holder: ContextHolder | None = None,
        prompter: Prompter | None = None,
    ) -> None:
        self.settings = settings
        self.prompter = prompter or Prompter()
        self._holder = holder
        self._status_console = Console(stderr=True, theme=SOL_THEME)

        # Configure structured logging
        from solctl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        # Enable telemetry context var when verbose
        if settings.verbose:
            from solctl.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def holder(self) -> ContextHolder:
        """The session holder (created on first access; may raise KeypairError)."""
        if self._holder is None:
            from solctl.infrastructure.session import ContextHolder, SessionContext

            self._holder = ContextHolder(SessionContext.from_config(self.settings.ledger))
        return self._holder

    @property
    def session(self) -> SessionContext:
        """Snapshot of the current session; orchestrators are built from it."""
        return self.holder.current

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult.

        * Success: writes to stdout.
        * Failure: writes the single error line to stderr.
        """
        output = format_result(
            result,
            json_output=self.settings.json_output,
            verbose=self.settings.verbose,
        )
        if result.ok:
            click.echo(output)
        else:
            click.echo(output, err=True)

    async def run(self, message: str, operation: Awaitable[ServiceResult]) -> ServiceResult:
        """Await *operation* behind a spinner, then emit its result.

        The spinner only observes the awaited call; errors propagate to the
        router unchanged.
        """
        if self._status_console.is_terminal and not self.settings.json_output:
            with self._status_console.status(message, spinner="dots"):
                result = await operation
        else:
            result = await operation
        self.emit(result)
        return result

    async def aclose(self) -> None:
        if self._holder is not None:
            await self._holder.aclose()
