"""Vote group leaf handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING, assert_never

from solctl.domain.lifecycle import Completed, NavigateBack, Outcome
from solctl.domain.types import VoteCommand
from solctl.services.vote import VoteService

if TYPE_CHECKING:
    from solctl.commands._context import AppContext


async def handle_vote(command: VoteCommand, app: AppContext) -> Outcome:
    prompt = app.prompter
    service = VoteService(app.session)
    message = command.spinner_msg

    match command:
        case VoteCommand.CREATE_VOTE_ACCOUNT:
            vote_keypair = prompt.keypair("Enter vote account keypair path")
            identity = prompt.keypair("Enter identity keypair path")
            withdrawer = prompt.keypair("Enter authorized withdrawer keypair path")
            commission = prompt.commission("Enter commission")
            result = await app.run(
                message,
                service.create(vote_keypair, identity, withdrawer.pubkey(), commission),
            )
        case VoteCommand.AUTHORIZE_VOTER:
            vote = prompt.pubkey("Enter vote account address")
            authority = prompt.keypair("Enter authorized voter or withdrawer keypair path")
            new_voter = prompt.pubkey("Enter new authorized voter address")
            result = await app.run(message, service.authorize_voter(vote, authority, new_voter))
        case VoteCommand.WITHDRAW:
            vote = prompt.pubkey("Enter vote account address")
            authority = prompt.keypair("Enter authorized withdrawer keypair path")
            recipient = prompt.pubkey("Enter recipient address")
            lamports = prompt.optional_amount("Enter amount to withdraw")
            result = await app.run(
                message, service.withdraw(vote, authority, lamports, recipient)
            )
        case VoteCommand.SHOW_VOTE_ACCOUNT:
            vote = prompt.pubkey("Enter vote account address")
            result = await app.run(message, service.show(vote))
        case VoteCommand.GO_BACK:
            return NavigateBack()
        case _:
            assert_never(command)
    return Completed(result)
