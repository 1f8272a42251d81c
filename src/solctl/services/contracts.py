"""Typed payload contracts for orchestrator results.

These models validate operation payload shapes before they leave the
service layer so renderer regressions (for example ``lamports`` vs
``balance``) fail fast in tests.  All addresses are base58 strings.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict


def dump_validated[T: BaseModel](model_cls: type[T], data: dict[str, object]) -> dict[str, object]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="python")


class _Amount(BaseModel):
    lamports: int
    sol: float


# --- Account group ---


class FetchAccountData(_Amount):
    """Payload contract for ``AccountService.fetch_account``."""

    address: str
    owner: str
    data_len: int
    executable: bool
    rent_epoch: int


class BalanceData(_Amount):
    address: str


class TransferData(_Amount):
    signature: str
    sender: str
    recipient: str


class AirdropData(_Amount):
    signature: str
    address: str


class LargestAccountRow(_Amount):
    """One row of ``AccountService.largest_accounts``."""

    rank: int
    address: str


class LargestAccountsData(BaseModel):
    filter: str
    count: int
    items: list[LargestAccountRow]


class NonceAccountData(_Amount):
    address: str
    owner: str
    version: Literal["legacy", "current"]
    blockhash: str
    authority: str
    lamports_per_signature: int


# --- Stake group ---


class StakeCreateData(_Amount):
    signature: str
    stake_account: str
    authority: str


class StakeDelegateData(BaseModel):
    signature: str
    stake_account: str
    vote_account: str


class StakeDeactivateData(BaseModel):
    signature: str
    stake_account: str
    epoch: int


class StakeWithdrawData(_Amount):
    signature: str
    stake_account: str
    recipient: str


class StakeShowData(_Amount):
    """Payload contract for ``StakeService.show``.

    Authority and lockup fields are present for initialized and delegated
    accounts; delegation fields only for delegated ones.
    """

    model_config = ConfigDict(extra="forbid")

    address: str
    state: Literal["uninitialized", "initialized", "delegated", "rewards_pool"]
    rent_exempt_reserve: int | None = None
    staker: str | None = None
    withdrawer: str | None = None
    lockup_epoch: int | None = None
    lockup_unix_timestamp: int | None = None
    custodian: str | None = None
    voter: str | None = None
    delegated_stake: int | None = None
    activation_epoch: int | None = None
    deactivation_epoch: int | str | None = None


# --- Vote group ---


class VoteCreateData(_Amount):
    signature: str
    vote_account: str
    identity: str
    withdrawer: str
    commission: int


class VoteAuthorizeData(BaseModel):
    signature: str
    vote_account: str
    authority: str
    new_voter: str
    epoch: int


class VoteWithdrawData(_Amount):
    signature: str
    vote_account: str
    recipient: str


class VoteShowData(_Amount):
    address: str
    version: str
    identity: str
    vote_authority: str
    withdraw_authority: str
    credits: int
    commission: int
    root_slot: int | None
    last_timestamp: str
    last_timestamp_slot: int


# --- Config group ---


class ConfigData(BaseModel):
    """Payload contract for ``ConfigService.show`` and ``ConfigService.edit``."""

    path: str
    rpc_url: str
    commitment_level: str
    keypair_path: str
    changed: str | None = None
