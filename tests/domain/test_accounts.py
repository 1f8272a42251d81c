"""Tests for the account state decoder."""

from __future__ import annotations

import struct

import pytest
from solders.hash import Hash

from solctl.domain.accounts import (
    ACTIVE_STAKE_EPOCH_BOUND,
    StakeDelegated,
    StakeInitialized,
    StakeRewardsPool,
    StakeUninitialized,
    decode_nonce_state,
    decode_stake_state,
    decode_vote_state,
    stake_state_name,
)
from solctl.domain.errors import DecodeError
from tests.conftest import (
    encode_nonce,
    encode_stake_delegated,
    encode_stake_initialized,
    encode_stake_rewards_pool,
    encode_stake_uninitialized,
    encode_vote_v1_14_11,
    encode_vote_v3,
    encode_vote_v4,
    make_keypair,
)

STAKER = make_keypair(10).pubkey()
WITHDRAWER = make_keypair(11).pubkey()
VOTER = make_keypair(12).pubkey()
NODE = make_keypair(13).pubkey()


class TestStakeState:
    def test_uninitialized(self) -> None:
        state = decode_stake_state(encode_stake_uninitialized())
        assert isinstance(state, StakeUninitialized)
        assert stake_state_name(state) == "uninitialized"

    def test_initialized(self) -> None:
        state = decode_stake_state(encode_stake_initialized(STAKER, WITHDRAWER, lockup_epoch=7))
        assert isinstance(state, StakeInitialized)
        assert state.meta.staker == STAKER
        assert state.meta.withdrawer == WITHDRAWER
        assert state.meta.lockup.epoch == 7

    def test_delegated_active(self) -> None:
        state = decode_stake_state(encode_stake_delegated(STAKER, WITHDRAWER, VOTER))
        assert isinstance(state, StakeDelegated)
        assert state.delegation.voter == VOTER
        assert state.delegation.stake == 5_000_000_000
        assert state.delegation.activation_epoch == 90
        assert state.delegation.deactivation_epoch == ACTIVE_STAKE_EPOCH_BOUND
        assert not state.delegation.is_deactivating
        assert state.credits_observed == 1_234

    def test_delegated_deactivating(self) -> None:
        data = encode_stake_delegated(STAKER, WITHDRAWER, VOTER, deactivation_epoch=100)
        state = decode_stake_state(data)
        assert isinstance(state, StakeDelegated)
        assert state.delegation.is_deactivating
        assert state.delegation.deactivation_epoch == 100

    def test_rewards_pool(self) -> None:
        state = decode_stake_state(encode_stake_rewards_pool())
        assert isinstance(state, StakeRewardsPool)
        assert stake_state_name(state) == "rewards_pool"

    def test_unknown_tag(self) -> None:
        with pytest.raises(DecodeError, match="unknown variant tag 9") as excinfo:
            decode_stake_state(struct.pack("<I", 9) + bytes(196))
        assert excinfo.value.schema == "stake state"

    def test_truncated(self) -> None:
        with pytest.raises(DecodeError, match="unexpected end of data"):
            decode_stake_state(struct.pack("<I", 1) + bytes(10))

    def test_decoding_twice_is_equal(self) -> None:
        data = encode_stake_delegated(STAKER, WITHDRAWER, VOTER)
        assert decode_stake_state(data) == decode_stake_state(data)


class TestVoteState:
    def test_v3(self) -> None:
        view = decode_vote_state(encode_vote_v3(NODE, WITHDRAWER, [(90, VOTER)]))
        assert view.version == "v3"
        assert view.node_pubkey == NODE
        assert view.authorized_withdrawer == WITHDRAWER
        assert view.commission == 10
        assert view.root_slot == 1_000
        assert view.credits == 650
        assert view.last_timestamp_slot == 1_031
        assert view.last_timestamp_iso == "2023-11-14T22:13:20Z"

    def test_v3_without_root(self) -> None:
        view = decode_vote_state(encode_vote_v3(NODE, WITHDRAWER, [(90, VOTER)], root_slot=None))
        assert view.root_slot is None

    def test_v1_14_11(self) -> None:
        view = decode_vote_state(encode_vote_v1_14_11(NODE, WITHDRAWER, [(80, VOTER)]))
        assert view.version == "v1_14_11"
        assert view.commission == 5
        assert view.credits == 42
        assert view.authorized_voter_for(100) == VOTER

    @pytest.mark.parametrize("bls_pubkey", [True, False])
    def test_v4(self, bls_pubkey: bool) -> None:
        data = encode_vote_v4(NODE, WITHDRAWER, [(95, VOTER)], bls_pubkey=bls_pubkey)
        view = decode_vote_state(data)
        assert view.version == "v4"
        assert view.commission == 7
        assert view.root_slot == 2_999
        assert view.credits == 7_000
        assert view.latest_authorized_voter == VOTER

    def test_authorized_voter_for_epoch(self) -> None:
        other = make_keypair(14).pubkey()
        view = decode_vote_state(encode_vote_v3(NODE, WITHDRAWER, [(105, other), (90, VOTER)]))
        assert view.authorized_voter_for(89) is None
        assert view.authorized_voter_for(100) == VOTER
        assert view.authorized_voter_for(105) == other
        assert view.latest_authorized_voter == other

    def test_legacy_layout_rejected(self) -> None:
        with pytest.raises(DecodeError, match="pre-1.14"):
            decode_vote_state(struct.pack("<I", 0) + bytes(200))

    def test_truncated(self) -> None:
        data = encode_vote_v3(NODE, WITHDRAWER, [(90, VOTER)])[:100]
        with pytest.raises(DecodeError):
            decode_vote_state(data)

    def test_decoding_twice_is_equal(self) -> None:
        data = encode_vote_v3(NODE, WITHDRAWER, [(90, VOTER)])
        assert decode_vote_state(data) == decode_vote_state(data)


class TestNonceState:
    def test_initialized(self) -> None:
        blockhash = Hash.new_unique()
        state = decode_nonce_state(encode_nonce(STAKER, blockhash, fee=5_000))
        assert state.is_initialized
        assert state.version == "current"
        assert state.data is not None
        assert state.data.authority == STAKER
        assert state.data.blockhash == blockhash
        assert state.data.lamports_per_signature == 5_000

    def test_uninitialized_is_not_a_decode_error(self) -> None:
        state = decode_nonce_state(encode_nonce(None))
        assert not state.is_initialized

    def test_bad_version(self) -> None:
        with pytest.raises(DecodeError, match="unknown version tag 7"):
            decode_nonce_state(struct.pack("<II", 7, 1))
