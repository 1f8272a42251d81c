"""Stake group leaf handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING, assert_never

from solctl.domain.lifecycle import Completed, NavigateBack, Outcome
from solctl.domain.types import StakeCommand
from solctl.services.stake import StakeService

if TYPE_CHECKING:
    from solctl.commands._context import AppContext


async def handle_stake(command: StakeCommand, app: AppContext) -> Outcome:
    prompt = app.prompter
    service = StakeService(app.session)
    message = command.spinner_msg

    match command:
        case StakeCommand.CREATE:
            stake_keypair = prompt.keypair("Enter stake account keypair path")
            lamports = prompt.amount("Enter amount to stake")
            result = await app.run(message, service.create(stake_keypair, lamports))
        case StakeCommand.DELEGATE:
            stake = prompt.pubkey("Enter stake account address")
            vote = prompt.pubkey("Enter vote account address")
            result = await app.run(message, service.delegate(stake, vote))
        case StakeCommand.DEACTIVATE:
            stake = prompt.pubkey("Enter stake account address")
            result = await app.run(message, service.deactivate(stake))
        case StakeCommand.WITHDRAW:
            stake = prompt.pubkey("Enter stake account address")
            recipient = prompt.pubkey("Enter recipient address")
            lamports = prompt.amount("Enter amount to withdraw")
            result = await app.run(message, service.withdraw(stake, lamports, recipient))
        case StakeCommand.SHOW:
            stake = prompt.pubkey("Enter stake account address")
            result = await app.run(message, service.show(stake))
        case StakeCommand.GO_BACK:
            return NavigateBack()
        case _:
            assert_never(command)
    return Completed(result)
