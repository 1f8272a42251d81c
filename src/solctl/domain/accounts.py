"""Account state decoder — raw account bytes to typed, read-only views.

Views are rebuilt from the latest fetched bytes on every operation and are
never cached.  Decoding fails with :class:`DecodeError` only when the bytes
are structurally wrong; a well-formed account in the wrong *logical*
variant (uninitialized stake, uninitialized nonce) decodes successfully and
is left for the validation engine to reject.

Stake variants form a closed union (:data:`StakeState`) that callers match
on exhaustively.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from solders.hash import Hash
from solders.pubkey import Pubkey

from solctl.domain.errors import DecodeError

ACTIVE_STAKE_EPOCH_BOUND = 2**64 - 1


class _Reader:
    """Sequential little-endian reader over a bincode payload."""

    def __init__(self, data: bytes, schema: str) -> None:
        self._data = data
        self._pos = 0
        self._schema = schema

    def _take(self, size: int) -> bytes:
        end = self._pos + size
        if end > len(self._data):
            raise DecodeError(
                self._schema,
                f"unexpected end of data at offset {self._pos} (need {size} bytes, "
                f"have {len(self._data) - self._pos})",
            )
        chunk = self._data[self._pos : end]
        self._pos = end
        return chunk

    def _unpack(self, fmt: str) -> Any:
        size = struct.calcsize(fmt)
        return struct.unpack(fmt, self._take(size))[0]

    def u8(self) -> int:
        return self._unpack("<B")

    def u16(self) -> int:
        return self._unpack("<H")

    def u32(self) -> int:
        return self._unpack("<I")

    def u64(self) -> int:
        return self._unpack("<Q")

    def i64(self) -> int:
        return self._unpack("<q")

    def f64(self) -> float:
        return self._unpack("<d")

    def boolean(self) -> bool:
        value = self.u8()
        if value > 1:
            raise DecodeError(self._schema, f"invalid bool byte {value}")
        return value == 1

    def pubkey(self) -> Pubkey:
        return Pubkey(self._take(32))

    def hash(self) -> Hash:
        return Hash(self._take(32))

    def skip(self, size: int) -> None:
        self._take(size)

    def option_u64(self) -> int | None:
        return self.u64() if self.boolean() else None


# ---------------------------------------------------------------------------
# Stake
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Lockup:
    unix_timestamp: int
    epoch: int
    custodian: Pubkey


@dataclass(frozen=True)
class StakeMeta:
    rent_exempt_reserve: int
    staker: Pubkey
    withdrawer: Pubkey
    lockup: Lockup


@dataclass(frozen=True)
class Delegation:
    voter: Pubkey
    stake: int
    activation_epoch: int
    deactivation_epoch: int

    @property
    def is_deactivating(self) -> bool:
        """True once a deactivation epoch has been recorded."""
        return self.deactivation_epoch != ACTIVE_STAKE_EPOCH_BOUND


@dataclass(frozen=True)
class StakeUninitialized:
    pass


@dataclass(frozen=True)
class StakeInitialized:
    meta: StakeMeta


@dataclass(frozen=True)
class StakeDelegated:
    meta: StakeMeta
    delegation: Delegation
    credits_observed: int
    flags: int


@dataclass(frozen=True)
class StakeRewardsPool:
    pass


type StakeState = StakeUninitialized | StakeInitialized | StakeDelegated | StakeRewardsPool


def _read_meta(r: _Reader) -> StakeMeta:
    reserve = r.u64()
    staker = r.pubkey()
    withdrawer = r.pubkey()
    lockup = Lockup(unix_timestamp=r.i64(), epoch=r.u64(), custodian=r.pubkey())
    return StakeMeta(
        rent_exempt_reserve=reserve, staker=staker, withdrawer=withdrawer, lockup=lockup
    )


def decode_stake_state(data: bytes) -> StakeState:
    """Decode a bincode ``StakeStateV2`` payload."""
    r = _Reader(data, "stake state")
    tag = r.u32()
    if tag == 0:
        return StakeUninitialized()
    if tag == 1:
        return StakeInitialized(meta=_read_meta(r))
    if tag == 2:
        meta = _read_meta(r)
        voter = r.pubkey()
        stake = r.u64()
        activation = r.u64()
        deactivation = r.u64()
        r.f64()  # warmup_cooldown_rate, deprecated
        credits = r.u64()
        flags = r.u8()
        return StakeDelegated(
            meta=meta,
            delegation=Delegation(
                voter=voter,
                stake=stake,
                activation_epoch=activation,
                deactivation_epoch=deactivation,
            ),
            credits_observed=credits,
            flags=flags,
        )
    if tag == 3:
        return StakeRewardsPool()
    raise DecodeError("stake state", f"unknown variant tag {tag}")


def stake_state_name(state: StakeState) -> str:
    match state:
        case StakeUninitialized():
            return "uninitialized"
        case StakeInitialized():
            return "initialized"
        case StakeDelegated():
            return "delegated"
        case StakeRewardsPool():
            return "rewards_pool"


# ---------------------------------------------------------------------------
# Vote
# ---------------------------------------------------------------------------

_PRIOR_VOTERS_CAPACITY = 32
_PRIOR_VOTER_ENTRY = 32 + 8 + 8


@dataclass(frozen=True)
class EpochCredits:
    epoch: int
    credits: int
    prev_credits: int


@dataclass(frozen=True)
class VoteStateView:
    """Lifecycle fields of a vote account, normalized across state versions."""

    version: str
    node_pubkey: Pubkey
    authorized_withdrawer: Pubkey
    commission: int
    root_slot: int | None
    authorized_voters: tuple[tuple[int, Pubkey], ...]
    epoch_credits: tuple[EpochCredits, ...] = field(default_factory=tuple)
    last_timestamp_slot: int = 0
    last_timestamp: int = 0

    def authorized_voter_for(self, epoch: int) -> Pubkey | None:
        """The voter authorized at *epoch*: the latest entry at or before it."""
        current: Pubkey | None = None
        for start_epoch, voter in self.authorized_voters:
            if start_epoch <= epoch:
                current = voter
            else:
                break
        return current

    @property
    def latest_authorized_voter(self) -> Pubkey | None:
        if not self.authorized_voters:
            return None
        return self.authorized_voters[-1][1]

    @property
    def credits(self) -> int:
        if not self.epoch_credits:
            return 0
        return self.epoch_credits[-1].credits

    @property
    def last_timestamp_iso(self) -> str:
        return datetime.fromtimestamp(self.last_timestamp, UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def _skip_votes(r: _Reader, *, landed: bool) -> None:
    count = r.u64()
    entry = 12 + (1 if landed else 0)
    r.skip(count * entry)


def _read_authorized_voters(r: _Reader) -> tuple[tuple[int, Pubkey], ...]:
    count = r.u64()
    voters = [(r.u64(), r.pubkey()) for _ in range(count)]
    return tuple(sorted(voters, key=lambda item: item[0]))


def _read_epoch_credits(r: _Reader) -> tuple[EpochCredits, ...]:
    count = r.u64()
    return tuple(
        EpochCredits(epoch=r.u64(), credits=r.u64(), prev_credits=r.u64()) for _ in range(count)
    )


def _decode_vote_v1_v3(r: _Reader, *, landed: bool, version: str) -> VoteStateView:
    node = r.pubkey()
    withdrawer = r.pubkey()
    commission = r.u8()
    _skip_votes(r, landed=landed)
    root_slot = r.option_u64()
    voters = _read_authorized_voters(r)
    r.skip(_PRIOR_VOTERS_CAPACITY * _PRIOR_VOTER_ENTRY + 8 + 1)
    credits = _read_epoch_credits(r)
    ts_slot = r.u64()
    ts = r.i64()
    return VoteStateView(
        version=version,
        node_pubkey=node,
        authorized_withdrawer=withdrawer,
        commission=commission,
        root_slot=root_slot,
        authorized_voters=voters,
        epoch_credits=credits,
        last_timestamp_slot=ts_slot,
        last_timestamp=ts,
    )


def _decode_vote_v4(r: _Reader) -> VoteStateView:
    node = r.pubkey()
    withdrawer = r.pubkey()
    r.pubkey()  # inflation rewards collector
    r.pubkey()  # block revenue collector
    commission_bps = r.u16()
    r.u16()  # block revenue commission bps
    r.u64()  # pending delegator rewards
    if r.boolean():
        r.skip(48)  # compressed BLS pubkey
    _skip_votes(r, landed=True)
    root_slot = r.option_u64()
    voters = _read_authorized_voters(r)
    credits = _read_epoch_credits(r)
    ts_slot = r.u64()
    ts = r.i64()
    return VoteStateView(
        version="v4",
        node_pubkey=node,
        authorized_withdrawer=withdrawer,
        commission=commission_bps // 100,
        root_slot=root_slot,
        authorized_voters=voters,
        epoch_credits=credits,
        last_timestamp_slot=ts_slot,
        last_timestamp=ts,
    )


def decode_vote_state(data: bytes) -> VoteStateView:
    """Decode a bincode ``VoteStateVersions`` payload (V1_14_11, V3, or V4)."""
    r = _Reader(data, "vote state")
    tag = r.u32()
    if tag == 1:
        return _decode_vote_v1_v3(r, landed=False, version="v1_14_11")
    if tag == 2:
        return _decode_vote_v1_v3(r, landed=True, version="v3")
    if tag == 3:
        return _decode_vote_v4(r)
    if tag == 0:
        raise DecodeError("vote state", "pre-1.14 vote state layout is not supported")
    raise DecodeError("vote state", f"unknown version tag {tag}")


# ---------------------------------------------------------------------------
# Durable nonce
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NonceData:
    authority: Pubkey
    blockhash: Hash
    lamports_per_signature: int


@dataclass(frozen=True)
class NonceState:
    """Decoded ``nonce::Versions``; ``data`` is None when uninitialized."""

    version: str
    data: NonceData | None

    @property
    def is_initialized(self) -> bool:
        return self.data is not None


def decode_nonce_state(data: bytes) -> NonceState:
    r = _Reader(data, "nonce account")
    version_tag = r.u32()
    if version_tag not in (0, 1):
        raise DecodeError("nonce account", f"unknown version tag {version_tag}")
    version = "legacy" if version_tag == 0 else "current"
    state_tag = r.u32()
    if state_tag == 0:
        return NonceState(version=version, data=None)
    if state_tag == 1:
        authority = r.pubkey()
        blockhash = r.hash()
        fee = r.u64()
        return NonceState(
            version=version,
            data=NonceData(authority=authority, blockhash=blockhash, lamports_per_signature=fee),
        )
    raise DecodeError("nonce account", f"unknown state tag {state_tag}")
