"""VoteService — validator vote account lifecycle."""

from __future__ import annotations

import logging

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from solctl.domain.accounts import VoteStateView, decode_vote_state
from solctl.domain.programs import (
    VOTE_STATE_SIZE,
    create_vote_account,
    vote_authorize,
    vote_withdraw,
)
from solctl.domain.units import lamports_to_sol
from solctl.infrastructure.gateway import AccountInfo
from solctl.services.base import BaseService
from solctl.services.contracts import (
    VoteAuthorizeData,
    VoteCreateData,
    VoteShowData,
    VoteWithdrawData,
    dump_validated,
)
from solctl.services.result import ServiceResult
from solctl.services.telemetry import traced
from solctl.services.validation import (
    check_vote_authorize,
    check_vote_create_accounts,
    check_vote_owner,
    check_vote_target_absent,
    check_vote_withdraw,
    vote_create_funding,
)

logger = logging.getLogger(__name__)


class VoteService(BaseService):
    """Operations of the Vote menu group."""

    async def _vote_account(self, address: Pubkey) -> tuple[AccountInfo, VoteStateView]:
        account = await self._existing_account(address)
        self._require(check_vote_owner(address, account))
        return account, decode_vote_state(account.data)

    @traced
    async def create(
        self,
        vote_keypair: Keypair,
        identity_keypair: Keypair,
        withdrawer: Pubkey,
        commission: int = 0,
    ) -> ServiceResult:
        """Create a vote account for *identity*; the authorized voter is the identity.

        Signed by the fee payer, the new vote account, and the identity.
        """
        payer = self._payer.pubkey()
        vote = vote_keypair.pubkey()
        identity = identity_keypair.pubkey()
        self._require(check_vote_create_accounts(payer, vote, identity))
        self._require(check_vote_target_absent(vote, await self._account(vote)))
        lamports = vote_create_funding(await self._rent_minimum(VOTE_STATE_SIZE))

        instructions = create_vote_account(payer, vote, identity, withdrawer, commission, lamports)
        signature = await self._submit(instructions, [vote_keypair, identity_keypair])
        logger.info("vote account created signature=%s vote=%s", signature, vote)
        return ServiceResult(
            ok=True,
            op="vote_create",
            data=dump_validated(
                VoteCreateData,
                {
                    "signature": signature,
                    "vote_account": str(vote),
                    "identity": str(identity),
                    "withdrawer": str(withdrawer),
                    "commission": commission,
                    "lamports": lamports,
                    "sol": lamports_to_sol(lamports),
                },
            ),
        )

    @traced
    async def authorize_voter(
        self, vote: Pubkey, authority: Keypair, new_voter: Pubkey
    ) -> ServiceResult:
        """Hand voting authority to *new_voter*.

        *authority* must be the voter authorized for the current epoch or
        the authorized withdrawer.
        """
        _account, view = await self._vote_account(vote)
        epoch = (await self._epoch_info()).epoch
        self._require(check_vote_authorize(authority.pubkey(), view, epoch))

        signature = await self._submit(
            [vote_authorize(vote, authority.pubkey(), new_voter)], [authority]
        )
        logger.info("voter authorized signature=%s vote=%s voter=%s", signature, vote, new_voter)
        return ServiceResult(
            ok=True,
            op="vote_authorize_voter",
            data=dump_validated(
                VoteAuthorizeData,
                {
                    "signature": signature,
                    "vote_account": str(vote),
                    "authority": str(authority.pubkey()),
                    "new_voter": str(new_voter),
                    "epoch": epoch,
                },
            ),
        )

    @traced
    async def withdraw(
        self,
        vote: Pubkey,
        authority: Keypair,
        lamports: int | None = None,
        recipient: Pubkey | None = None,
    ) -> ServiceResult:
        """Withdraw from a vote account; ``lamports=None`` withdraws the entire balance."""
        recipient = recipient or self._payer.pubkey()
        account, view = await self._vote_account(vote)
        amount = account.lamports if lamports is None else lamports
        self._require(check_vote_withdraw(authority.pubkey(), view, amount, account.lamports))

        signature = await self._submit(
            [vote_withdraw(vote, authority.pubkey(), amount, recipient)], [authority]
        )
        logger.info("vote withdrawn signature=%s vote=%s lamports=%d", signature, vote, amount)
        return ServiceResult(
            ok=True,
            op="vote_withdraw",
            data=dump_validated(
                VoteWithdrawData,
                {
                    "signature": signature,
                    "vote_account": str(vote),
                    "recipient": str(recipient),
                    "lamports": amount,
                    "sol": lamports_to_sol(amount),
                },
            ),
        )

    @traced
    async def show(self, vote: Pubkey) -> ServiceResult:
        account, view = await self._vote_account(vote)
        vote_authority = view.latest_authorized_voter or view.node_pubkey
        return ServiceResult(
            ok=True,
            op="vote_show",
            data=dump_validated(
                VoteShowData,
                {
                    "address": str(vote),
                    "lamports": account.lamports,
                    "sol": lamports_to_sol(account.lamports),
                    "version": view.version,
                    "identity": str(view.node_pubkey),
                    "vote_authority": str(vote_authority),
                    "withdraw_authority": str(view.authorized_withdrawer),
                    "credits": view.credits,
                    "commission": view.commission,
                    "root_slot": view.root_slot,
                    "last_timestamp": view.last_timestamp_iso,
                    "last_timestamp_slot": view.last_timestamp_slot,
                },
            ),
        )
