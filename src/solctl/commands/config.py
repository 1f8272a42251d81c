"""Config group leaf handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING, assert_never

import click

from solctl.config.models import ConfigField
from solctl.domain.lifecycle import Completed, NavigateBack, Outcome
from solctl.domain.types import CommitmentLevel, ConfigCommand
from solctl.services.config import ConfigService

if TYPE_CHECKING:
    from solctl.commands._context import AppContext

_CANCEL = "None"


def _prompt_value(app: AppContext, field: ConfigField) -> str:
    current = app.session.config
    match field:
        case ConfigField.RPC_URL:
            return app.prompter.text("Enter RPC URL", default=current.rpc_url)
        case ConfigField.COMMITMENT_LEVEL:
            return str(app.prompter.select("Commitment level", list(CommitmentLevel)))
        case ConfigField.KEYPAIR_PATH:
            return str(app.prompter.path("Enter keypair path"))
        case _:
            assert_never(field)


async def handle_config(command: ConfigCommand, app: AppContext) -> Outcome:
    service = ConfigService(app.holder, app.settings.config_path)
    message = command.spinner_msg

    match command:
        case ConfigCommand.SHOW:
            result = await app.run(message, service.show())
        case ConfigCommand.EDIT:
            choice = app.prompter.select("Field to edit", [*ConfigField, _CANCEL])
            if choice == _CANCEL:
                click.echo("No changes made.")
                return Completed()
            field = ConfigField(choice)
            value = _prompt_value(app, field)
            result = await app.run(message, service.edit(field, value))
        case ConfigCommand.GO_BACK:
            return NavigateBack()
        case _:
            assert_never(command)
    return Completed(result)
