"""StakeService — stake account lifecycle.

Lifecycle: uninitialized → initialized (create) → delegated (delegate) →
deactivating (deactivate) → withdrawable once the deactivation epoch has
passed (withdraw).  Every operation fetches the stake account in the same
call and checks program ownership before decoding its bytes.
"""

from __future__ import annotations

import logging
from typing import Any, assert_never

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from solctl.domain.accounts import (
    StakeDelegated,
    StakeInitialized,
    StakeRewardsPool,
    StakeState,
    StakeUninitialized,
    decode_stake_state,
    stake_state_name,
)
from solctl.domain.programs import (
    STAKE_STATE_SIZE,
    create_stake_account,
    stake_deactivate,
    stake_delegate,
    stake_withdraw,
)
from solctl.domain.units import lamports_to_sol
from solctl.infrastructure.gateway import AccountInfo
from solctl.services.base import BaseService
from solctl.services.contracts import (
    StakeCreateData,
    StakeDeactivateData,
    StakeDelegateData,
    StakeShowData,
    StakeWithdrawData,
    dump_validated,
)
from solctl.services.result import ServiceResult
from solctl.services.telemetry import traced
from solctl.services.validation import (
    check_absent,
    check_positive_amount,
    check_rent_exempt,
    check_stake_create_accounts,
    check_stake_deactivate,
    check_stake_delegate,
    check_stake_owner,
    check_stake_withdraw,
    check_sufficient_balance,
)

logger = logging.getLogger(__name__)


class StakeService(BaseService):
    """Operations of the Stake menu group."""

    async def _stake_account(self, address: Pubkey) -> tuple[AccountInfo, StakeState]:
        account = await self._existing_account(address)
        self._require(check_stake_owner(address, account))
        return account, decode_stake_state(account.data)

    @traced
    async def create(self, stake_keypair: Keypair, lamports: int) -> ServiceResult:
        """Fund and initialize a new stake account owned by the session keypair."""
        payer = self._payer.pubkey()
        stake = stake_keypair.pubkey()
        self._require(check_stake_create_accounts(payer, stake, lamports))
        self._require(check_rent_exempt(lamports, await self._rent_minimum(STAKE_STATE_SIZE)))
        self._require(check_absent(stake, await self._account(stake)))
        self._require(check_sufficient_balance(await self._balance(payer), lamports))

        signature = await self._submit(
            create_stake_account(payer, stake, payer, lamports), [stake_keypair]
        )
        logger.info("stake account created signature=%s stake=%s", signature, stake)
        return ServiceResult(
            ok=True,
            op="stake_create",
            data=dump_validated(
                StakeCreateData,
                {
                    "signature": signature,
                    "stake_account": str(stake),
                    "authority": str(payer),
                    "lamports": lamports,
                    "sol": lamports_to_sol(lamports),
                },
            ),
        )

    @traced
    async def delegate(self, stake: Pubkey, vote: Pubkey) -> ServiceResult:
        caller = self._payer.pubkey()
        account, state = await self._stake_account(stake)
        vote_account = await self._account(vote)
        self._require(check_stake_delegate(caller, stake, account, state, vote, vote_account))

        signature = await self._submit([stake_delegate(stake, caller, vote)])
        logger.info("stake delegated signature=%s stake=%s vote=%s", signature, stake, vote)
        return ServiceResult(
            ok=True,
            op="stake_delegate",
            data=dump_validated(
                StakeDelegateData,
                {"signature": signature, "stake_account": str(stake), "vote_account": str(vote)},
            ),
        )

    @traced
    async def deactivate(self, stake: Pubkey) -> ServiceResult:
        caller = self._payer.pubkey()
        account, state = await self._stake_account(stake)
        self._require(check_stake_deactivate(caller, stake, account, state))
        epoch = (await self._epoch_info()).epoch

        signature = await self._submit([stake_deactivate(stake, caller)])
        logger.info("stake deactivated signature=%s stake=%s epoch=%d", signature, stake, epoch)
        return ServiceResult(
            ok=True,
            op="stake_deactivate",
            data=dump_validated(
                StakeDeactivateData,
                {"signature": signature, "stake_account": str(stake), "epoch": epoch},
            ),
        )

    @traced
    async def withdraw(
        self, stake: Pubkey, lamports: int, recipient: Pubkey | None = None
    ) -> ServiceResult:
        """Withdraw *lamports* to *recipient* (the session address by default)."""
        caller = self._payer.pubkey()
        recipient = recipient or caller
        self._require(check_positive_amount(lamports))
        account, state = await self._stake_account(stake)
        current_epoch = (await self._epoch_info()).epoch
        self._require(check_stake_withdraw(caller, stake, account, state, lamports, current_epoch))

        signature = await self._submit([stake_withdraw(stake, caller, recipient, lamports)])
        logger.info("stake withdrawn signature=%s stake=%s lamports=%d", signature, stake, lamports)
        return ServiceResult(
            ok=True,
            op="stake_withdraw",
            data=dump_validated(
                StakeWithdrawData,
                {
                    "signature": signature,
                    "stake_account": str(stake),
                    "recipient": str(recipient),
                    "lamports": lamports,
                    "sol": lamports_to_sol(lamports),
                },
            ),
        )

    @traced
    async def show(self, stake: Pubkey) -> ServiceResult:
        account, state = await self._stake_account(stake)
        data: dict[str, Any] = {
            "address": str(stake),
            "lamports": account.lamports,
            "sol": lamports_to_sol(account.lamports),
            "state": stake_state_name(state),
        }
        match state:
            case StakeInitialized(meta=meta) | StakeDelegated(meta=meta):
                data |= {
                    "rent_exempt_reserve": meta.rent_exempt_reserve,
                    "staker": str(meta.staker),
                    "withdrawer": str(meta.withdrawer),
                    "lockup_epoch": meta.lockup.epoch,
                    "lockup_unix_timestamp": meta.lockup.unix_timestamp,
                    "custodian": str(meta.lockup.custodian),
                }
                if isinstance(state, StakeDelegated):
                    delegation = state.delegation
                    data |= {
                        "voter": str(delegation.voter),
                        "delegated_stake": delegation.stake,
                        "activation_epoch": delegation.activation_epoch,
                        "deactivation_epoch": (
                            delegation.deactivation_epoch
                            if delegation.is_deactivating
                            else "active"
                        ),
                    }
            case StakeUninitialized() | StakeRewardsPool():
                pass
            case _:
                assert_never(state)
        return ServiceResult(ok=True, op="stake_show", data=dump_validated(StakeShowData, data))
