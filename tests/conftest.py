"""Shared pytest fixtures and test helpers for solctl tests."""

from __future__ import annotations

import json
import struct
from collections.abc import Iterable
from pathlib import Path

import pytest
from click.testing import CliRunner
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from solctl.config.models import LedgerConfig
from solctl.domain.accounts import ACTIVE_STAKE_EPOCH_BOUND
from solctl.domain.errors import SolctlError
from solctl.domain.programs import (
    STAKE_PROGRAM_ID,
    STAKE_STATE_SIZE,
    SYSTEM_PROGRAM_ID,
    VOTE_PROGRAM_ID,
    VOTE_STATE_SIZE,
)
from solctl.domain.types import CommitmentLevel, LargestAccountsFilter
from solctl.infrastructure.gateway import AccountInfo, EpochInfo, LargestAccount, LatestBlockhash
from solctl.infrastructure.session import SessionContext

STAKE_RENT = 2_282_880
VOTE_RENT = 27_074_400
LAST_VALID_BLOCK_HEIGHT = 1_150


# ---------------------------------------------------------------------------
# Fake ledger gateway
# ---------------------------------------------------------------------------


class FakeGateway:
    """In-memory LedgerGateway that records every call.

    ``accounts`` maps addresses to AccountInfo; balances fall back to the
    account's lamports (0 when absent).  Submitted transactions land in
    ``sent``; set ``send_error`` to make submission fail.
    """

    def __init__(self, *, commitment: CommitmentLevel = CommitmentLevel.CONFIRMED) -> None:
        self._commitment = commitment
        self.accounts: dict[Pubkey, AccountInfo] = {}
        self.balances: dict[Pubkey, int] = {}
        self.epoch = 100
        self.rent = {STAKE_STATE_SIZE: STAKE_RENT, VOTE_STATE_SIZE: VOTE_RENT}
        self.largest: list[LargestAccount] = []
        self.blockhash = Hash.new_unique()
        self.send_error: SolctlError | None = None
        self.airdrop_error: SolctlError | None = None
        self.calls: list[str] = []
        self.sent: list[Transaction] = []
        self.airdrops: list[tuple[Pubkey, int]] = []
        self.closed = False

    @property
    def commitment(self) -> CommitmentLevel:
        return self._commitment

    async def get_account(self, address: Pubkey) -> AccountInfo | None:
        self.calls.append("get_account")
        return self.accounts.get(address)

    async def get_balance(self, address: Pubkey) -> int:
        self.calls.append("get_balance")
        if address in self.balances:
            return self.balances[address]
        account = self.accounts.get(address)
        return account.lamports if account else 0

    async def get_epoch_info(self) -> EpochInfo:
        self.calls.append("get_epoch_info")
        return EpochInfo(
            epoch=self.epoch,
            slot_index=0,
            slots_in_epoch=432_000,
            absolute_slot=self.epoch * 432_000,
            block_height=1_000,
        )

    async def get_latest_blockhash(self) -> LatestBlockhash:
        self.calls.append("get_latest_blockhash")
        return LatestBlockhash(
            blockhash=self.blockhash, last_valid_block_height=LAST_VALID_BLOCK_HEIGHT
        )

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        self.calls.append("get_minimum_balance_for_rent_exemption")
        return self.rent.get(size, 890_880)

    async def get_largest_accounts(
        self, account_filter: LargestAccountsFilter
    ) -> list[LargestAccount]:
        self.calls.append("get_largest_accounts")
        return list(self.largest)

    async def request_airdrop(self, address: Pubkey, lamports: int) -> str:
        self.calls.append("request_airdrop")
        if self.airdrop_error is not None:
            raise self.airdrop_error
        self.airdrops.append((address, lamports))
        return "airdrop-signature"

    async def send_and_confirm(
        self, transaction: Transaction, *, last_valid_block_height: int
    ) -> str:
        self.calls.append("send_and_confirm")
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(transaction)
        return str(transaction.signatures[0])

    async def aclose(self) -> None:
        self.closed = True


# ---------------------------------------------------------------------------
# Account byte builders
# ---------------------------------------------------------------------------


def make_keypair(seed: int) -> Keypair:
    """Deterministic keypair for tests."""
    return Keypair.from_seed(bytes([seed]) * 32)


def write_keypair(keypair: Keypair, path: Path) -> None:
    """Write *keypair* in the Solana CLI JSON format (a list of 64 byte values)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(list(bytes(keypair))), encoding="utf-8")


def _pad(data: bytes, size: int) -> bytes:
    return data + bytes(size - len(data))


def encode_stake_meta(
    staker: Pubkey,
    withdrawer: Pubkey,
    *,
    reserve: int = STAKE_RENT,
    lockup_epoch: int = 0,
    lockup_timestamp: int = 0,
    custodian: Pubkey | None = None,
) -> bytes:
    return (
        struct.pack("<Q", reserve)
        + bytes(staker)
        + bytes(withdrawer)
        + struct.pack("<qQ", lockup_timestamp, lockup_epoch)
        + bytes(custodian or Pubkey.default())
    )


def encode_stake_uninitialized() -> bytes:
    return _pad(struct.pack("<I", 0), STAKE_STATE_SIZE)


def encode_stake_initialized(staker: Pubkey, withdrawer: Pubkey, **meta: int) -> bytes:
    body = struct.pack("<I", 1) + encode_stake_meta(staker, withdrawer, **meta)
    return _pad(body, STAKE_STATE_SIZE)


def encode_stake_delegated(
    staker: Pubkey,
    withdrawer: Pubkey,
    voter: Pubkey,
    *,
    stake: int = 5_000_000_000,
    activation_epoch: int = 90,
    deactivation_epoch: int = ACTIVE_STAKE_EPOCH_BOUND,
    credits_observed: int = 1_234,
) -> bytes:
    body = (
        struct.pack("<I", 2)
        + encode_stake_meta(staker, withdrawer)
        + bytes(voter)
        + struct.pack("<QQQd", stake, activation_epoch, deactivation_epoch, 0.25)
        + struct.pack("<QB", credits_observed, 0)
    )
    return _pad(body, STAKE_STATE_SIZE)


def encode_stake_rewards_pool() -> bytes:
    return _pad(struct.pack("<I", 3), STAKE_STATE_SIZE)


def _encode_authorized_voters(voters: Iterable[tuple[int, Pubkey]]) -> bytes:
    entries = list(voters)
    out = struct.pack("<Q", len(entries))
    for epoch, voter in entries:
        out += struct.pack("<Q", epoch) + bytes(voter)
    return out


def _encode_epoch_credits(credits: Iterable[tuple[int, int, int]]) -> bytes:
    entries = list(credits)
    out = struct.pack("<Q", len(entries))
    for epoch, total, prev in entries:
        out += struct.pack("<QQQ", epoch, total, prev)
    return out


def _encode_root(root_slot: int | None) -> bytes:
    if root_slot is None:
        return b"\x00"
    return b"\x01" + struct.pack("<Q", root_slot)


def encode_vote_v3(
    node: Pubkey,
    withdrawer: Pubkey,
    voters: Iterable[tuple[int, Pubkey]],
    *,
    commission: int = 10,
    votes: int = 2,
    root_slot: int | None = 1_000,
    credits: Iterable[tuple[int, int, int]] = ((99, 500, 400), (100, 650, 500)),
    timestamp_slot: int = 1_031,
    timestamp: int = 1_700_000_000,
) -> bytes:
    """A ``VoteStateVersions::V3`` payload padded to the vote account size."""
    landed_votes = b"".join(struct.pack("<BQI", 0, 1_000 + i, 31 - i) for i in range(votes))
    prior_voters = bytes(32 * 48) + struct.pack("<Q", 31) + b"\x01"
    body = (
        struct.pack("<I", 2)
        + bytes(node)
        + bytes(withdrawer)
        + struct.pack("<B", commission)
        + struct.pack("<Q", votes)
        + landed_votes
        + _encode_root(root_slot)
        + _encode_authorized_voters(voters)
        + prior_voters
        + _encode_epoch_credits(credits)
        + struct.pack("<Qq", timestamp_slot, timestamp)
    )
    return _pad(body, VOTE_STATE_SIZE)


def encode_vote_v1_14_11(
    node: Pubkey, withdrawer: Pubkey, voters: Iterable[tuple[int, Pubkey]], *, commission: int = 5
) -> bytes:
    lockouts = struct.pack("<QI", 2_000, 1)
    prior_voters = bytes(32 * 48) + struct.pack("<Q", 31) + b"\x01"
    body = (
        struct.pack("<I", 1)
        + bytes(node)
        + bytes(withdrawer)
        + struct.pack("<B", commission)
        + struct.pack("<Q", 1)
        + lockouts
        + _encode_root(None)
        + _encode_authorized_voters(voters)
        + prior_voters
        + _encode_epoch_credits([(100, 42, 0)])
        + struct.pack("<Qq", 2_000, 1_700_000_100)
    )
    return _pad(body, VOTE_STATE_SIZE)


def encode_vote_v4(
    node: Pubkey,
    withdrawer: Pubkey,
    voters: Iterable[tuple[int, Pubkey]],
    *,
    commission_bps: int = 750,
    bls_pubkey: bool = True,
) -> bytes:
    body = (
        struct.pack("<I", 3)
        + bytes(node)
        + bytes(withdrawer)
        + bytes(withdrawer)
        + bytes(node)
        + struct.pack("<HHQ", commission_bps, 0, 0)
        + (b"\x01" + bytes(48) if bls_pubkey else b"\x00")
        + struct.pack("<Q", 1)
        + struct.pack("<BQI", 1, 3_000, 1)
        + _encode_root(2_999)
        + _encode_authorized_voters(voters)
        + _encode_epoch_credits([(100, 7_000, 6_000)])
        + struct.pack("<Qq", 3_000, 1_700_000_200)
    )
    return _pad(body, VOTE_STATE_SIZE)


def encode_nonce(
    authority: Pubkey | None, blockhash: Hash | None = None, *, fee: int = 5_000
) -> bytes:
    """A current-version nonce account; ``authority=None`` encodes Uninitialized."""
    if authority is None:
        return _pad(struct.pack("<II", 1, 0), 80)
    return (
        struct.pack("<II", 1, 1)
        + bytes(authority)
        + bytes(blockhash or Hash.default())
        + struct.pack("<Q", fee)
    )


def account(data: bytes, owner: Pubkey, lamports: int = 10_000_000_000) -> AccountInfo:
    return AccountInfo(lamports=lamports, owner=owner, data=data, executable=False, rent_epoch=0)


def stake_account(data: bytes, lamports: int = 10_000_000_000) -> AccountInfo:
    return account(data, STAKE_PROGRAM_ID, lamports)


def vote_account(data: bytes, lamports: int = 30_000_000_000) -> AccountInfo:
    return account(data, VOTE_PROGRAM_ID, lamports)


def system_account(lamports: int = 1_000_000_000) -> AccountInfo:
    return account(b"", SYSTEM_PROGRAM_ID, lamports)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def payer() -> Keypair:
    """The session keypair (fee payer and default authority)."""
    return make_keypair(1)


@pytest.fixture
def keypair_file(tmp_path: Path, payer: Keypair) -> Path:
    path = tmp_path / "id.json"
    write_keypair(payer, path)
    return path


@pytest.fixture
def ledger_config(keypair_file: Path) -> LedgerConfig:
    return LedgerConfig(keypair_path=keypair_file)


@pytest.fixture
def session(payer: Keypair, gateway: FakeGateway, ledger_config: LedgerConfig) -> SessionContext:
    """Session Context bound to the fake gateway."""
    return SessionContext(keypair=payer, gateway=gateway, config=ledger_config)
