"""Account group leaf handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING, assert_never

from solctl.domain.lifecycle import Completed, NavigateBack, Outcome
from solctl.domain.types import AccountCommand, LargestAccountsFilter
from solctl.services.account import AccountService

if TYPE_CHECKING:
    from solctl.commands._context import AppContext


async def handle_account(command: AccountCommand, app: AppContext) -> Outcome:
    """Prompt for *command*'s inputs, run it, and report the outcome."""
    prompt = app.prompter
    service = AccountService(app.session)
    message = command.spinner_msg

    match command:
        case AccountCommand.FETCH_ACCOUNT:
            address = prompt.pubkey("Enter account address")
            result = await app.run(message, service.fetch_account(address))
        case AccountCommand.BALANCE:
            address = prompt.pubkey("Enter address")
            result = await app.run(message, service.balance(address))
        case AccountCommand.TRANSFER:
            recipient = prompt.pubkey("Enter recipient address")
            lamports = prompt.amount("Enter amount to send")
            result = await app.run(message, service.transfer(recipient, lamports))
        case AccountCommand.AIRDROP:
            result = await app.run(message, service.airdrop())
        case AccountCommand.LARGEST_ACCOUNTS:
            account_filter = prompt.select("Filter accounts by", list(LargestAccountsFilter))
            result = await app.run(message, service.largest_accounts(account_filter))
        case AccountCommand.NONCE_ACCOUNT:
            address = prompt.pubkey("Enter nonce account address")
            result = await app.run(message, service.nonce_account(address))
        case AccountCommand.GO_BACK:
            return NavigateBack()
        case _:
            assert_never(command)
    return Completed(result)
