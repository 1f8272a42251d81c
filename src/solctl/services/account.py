"""AccountService — balances, transfers, airdrops, and account inspection."""

from __future__ import annotations

import logging

from solders.pubkey import Pubkey

from solctl.domain.accounts import decode_nonce_state
from solctl.domain.programs import system_transfer
from solctl.domain.types import LargestAccountsFilter
from solctl.domain.units import LAMPORTS_PER_SOL, lamports_to_sol
from solctl.services.base import BaseService
from solctl.services.contracts import (
    AirdropData,
    BalanceData,
    FetchAccountData,
    LargestAccountsData,
    NonceAccountData,
    TransferData,
    dump_validated,
)
from solctl.services.result import ServiceResult
from solctl.services.telemetry import trace_span, traced
from solctl.services.validation import check_nonce_initialized, check_transfer

logger = logging.getLogger(__name__)

AIRDROP_LAMPORTS = LAMPORTS_PER_SOL


class AccountService(BaseService):
    """Operations of the Account menu group."""

    @traced
    async def fetch_account(self, address: Pubkey) -> ServiceResult:
        account = await self._existing_account(address)
        return ServiceResult(
            ok=True,
            op="fetch_account",
            data=dump_validated(
                FetchAccountData,
                {
                    "address": str(address),
                    "lamports": account.lamports,
                    "sol": lamports_to_sol(account.lamports),
                    "owner": str(account.owner),
                    "data_len": len(account.data),
                    "executable": account.executable,
                    "rent_epoch": account.rent_epoch,
                },
            ),
        )

    @traced
    async def balance(self, address: Pubkey) -> ServiceResult:
        lamports = await self._balance(address)
        return ServiceResult(
            ok=True,
            op="balance",
            data=dump_validated(
                BalanceData,
                {"address": str(address), "lamports": lamports, "sol": lamports_to_sol(lamports)},
            ),
        )

    @traced
    async def transfer(self, recipient: Pubkey, lamports: int) -> ServiceResult:
        """Send *lamports* from the session keypair to *recipient*.

        The sender's balance is read in this call and must cover the amount.
        """
        sender = self._payer.pubkey()
        self._require(check_transfer(await self._balance(sender), lamports))

        signature = await self._submit([system_transfer(sender, recipient, lamports)])
        logger.info("transfer sent signature=%s lamports=%d", signature, lamports)
        return ServiceResult(
            ok=True,
            op="transfer",
            data=dump_validated(
                TransferData,
                {
                    "signature": signature,
                    "sender": str(sender),
                    "recipient": str(recipient),
                    "lamports": lamports,
                    "sol": lamports_to_sol(lamports),
                },
            ),
        )

    @traced
    async def airdrop(self) -> ServiceResult:
        """Request a fixed 1 SOL airdrop to the session address."""
        address = self._payer.pubkey()
        with trace_span("request_airdrop"):
            signature = await self._gateway.request_airdrop(address, AIRDROP_LAMPORTS)
        return ServiceResult(
            ok=True,
            op="airdrop",
            data=dump_validated(
                AirdropData,
                {
                    "signature": signature,
                    "address": str(address),
                    "lamports": AIRDROP_LAMPORTS,
                    "sol": lamports_to_sol(AIRDROP_LAMPORTS),
                },
            ),
        )

    @traced
    async def largest_accounts(self, account_filter: LargestAccountsFilter) -> ServiceResult:
        with trace_span("get_largest_accounts"):
            rows = await self._gateway.get_largest_accounts(account_filter)
        items = [
            {
                "rank": rank,
                "address": row.address,
                "lamports": row.lamports,
                "sol": lamports_to_sol(row.lamports),
            }
            for rank, row in enumerate(rows, start=1)
        ]
        return ServiceResult(
            ok=True,
            op="largest_accounts",
            data=dump_validated(
                LargestAccountsData,
                {"filter": str(account_filter), "count": len(items), "items": items},
            ),
        )

    @traced
    async def nonce_account(self, address: Pubkey) -> ServiceResult:
        account = await self._existing_account(address)
        state = decode_nonce_state(account.data)
        self._require(check_nonce_initialized(address, state))
        assert state.data is not None
        return ServiceResult(
            ok=True,
            op="nonce_account",
            data=dump_validated(
                NonceAccountData,
                {
                    "address": str(address),
                    "lamports": account.lamports,
                    "sol": lamports_to_sol(account.lamports),
                    "owner": str(account.owner),
                    "version": state.version,
                    "blockhash": str(state.data.blockhash),
                    "authority": str(state.data.authority),
                    "lamports_per_signature": state.data.lamports_per_signature,
                },
            ),
        )
