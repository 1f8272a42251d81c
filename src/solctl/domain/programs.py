"""Native program ids and instruction encoders.

Stake and vote instructions are bincode enums: a little-endian ``u32``
variant tag followed by fixed-width little-endian fields.  System program
instructions come straight from :mod:`solders.system_program`.
"""

from __future__ import annotations

import struct

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import (
    CreateAccountParams,
    TransferParams,
    create_account,
    transfer,
)

SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")
STAKE_PROGRAM_ID = Pubkey.from_string("Stake11111111111111111111111111111111111111")
VOTE_PROGRAM_ID = Pubkey.from_string("Vote111111111111111111111111111111111111111")
STAKE_CONFIG_ID = Pubkey.from_string("StakeConfig11111111111111111111111111111111")

SYSVAR_CLOCK = Pubkey.from_string("SysvarC1ock11111111111111111111111111111111")
SYSVAR_RENT = Pubkey.from_string("SysvarRent111111111111111111111111111111111")
SYSVAR_STAKE_HISTORY = Pubkey.from_string("SysvarStakeHistory1111111111111111111111111")

STAKE_STATE_SIZE = 200
VOTE_STATE_SIZE = 3762

# StakeInstruction variant tags
_STAKE_INITIALIZE = 0
_STAKE_DELEGATE = 2
_STAKE_WITHDRAW = 4
_STAKE_DEACTIVATE = 5

# VoteInstruction variant tags
_VOTE_INITIALIZE_ACCOUNT = 0
_VOTE_AUTHORIZE = 1
_VOTE_WITHDRAW = 3

# VoteAuthorize variant tags
VOTE_AUTHORIZE_VOTER = 0


def _tag(variant: int) -> bytes:
    return struct.pack("<I", variant)


# --- System ---


def system_transfer(sender: Pubkey, recipient: Pubkey, lamports: int) -> Instruction:
    return transfer(TransferParams(from_pubkey=sender, to_pubkey=recipient, lamports=lamports))


def system_create_account(
    payer: Pubkey, new_account: Pubkey, lamports: int, space: int, owner: Pubkey
) -> Instruction:
    return create_account(
        CreateAccountParams(
            from_pubkey=payer,
            to_pubkey=new_account,
            lamports=lamports,
            space=space,
            owner=owner,
        )
    )


# --- Stake ---


def stake_initialize(stake: Pubkey, staker: Pubkey, withdrawer: Pubkey) -> Instruction:
    """Initialize a stake account with no lockup."""
    lockup = struct.pack("<qQ", 0, 0) + bytes(Pubkey.default())
    data = _tag(_STAKE_INITIALIZE) + bytes(staker) + bytes(withdrawer) + lockup
    return Instruction(
        STAKE_PROGRAM_ID,
        data,
        [
            AccountMeta(stake, is_signer=False, is_writable=True),
            AccountMeta(SYSVAR_RENT, is_signer=False, is_writable=False),
        ],
    )


def create_stake_account(
    payer: Pubkey, stake: Pubkey, authority: Pubkey, lamports: int
) -> list[Instruction]:
    """Allocate and initialize a stake account; *authority* is staker and withdrawer."""
    return [
        system_create_account(payer, stake, lamports, STAKE_STATE_SIZE, STAKE_PROGRAM_ID),
        stake_initialize(stake, authority, authority),
    ]


def stake_delegate(stake: Pubkey, staker: Pubkey, vote: Pubkey) -> Instruction:
    return Instruction(
        STAKE_PROGRAM_ID,
        _tag(_STAKE_DELEGATE),
        [
            AccountMeta(stake, is_signer=False, is_writable=True),
            AccountMeta(vote, is_signer=False, is_writable=False),
            AccountMeta(SYSVAR_CLOCK, is_signer=False, is_writable=False),
            AccountMeta(SYSVAR_STAKE_HISTORY, is_signer=False, is_writable=False),
            AccountMeta(STAKE_CONFIG_ID, is_signer=False, is_writable=False),
            AccountMeta(staker, is_signer=True, is_writable=False),
        ],
    )


def stake_deactivate(stake: Pubkey, staker: Pubkey) -> Instruction:
    return Instruction(
        STAKE_PROGRAM_ID,
        _tag(_STAKE_DEACTIVATE),
        [
            AccountMeta(stake, is_signer=False, is_writable=True),
            AccountMeta(SYSVAR_CLOCK, is_signer=False, is_writable=False),
            AccountMeta(staker, is_signer=True, is_writable=False),
        ],
    )


def stake_withdraw(
    stake: Pubkey, withdrawer: Pubkey, recipient: Pubkey, lamports: int
) -> Instruction:
    return Instruction(
        STAKE_PROGRAM_ID,
        _tag(_STAKE_WITHDRAW) + struct.pack("<Q", lamports),
        [
            AccountMeta(stake, is_signer=False, is_writable=True),
            AccountMeta(recipient, is_signer=False, is_writable=True),
            AccountMeta(SYSVAR_CLOCK, is_signer=False, is_writable=False),
            AccountMeta(SYSVAR_STAKE_HISTORY, is_signer=False, is_writable=False),
            AccountMeta(withdrawer, is_signer=True, is_writable=False),
        ],
    )


# --- Vote ---


def vote_initialize_account(
    vote: Pubkey,
    node: Pubkey,
    authorized_voter: Pubkey,
    authorized_withdrawer: Pubkey,
    commission: int,
) -> Instruction:
    data = (
        _tag(_VOTE_INITIALIZE_ACCOUNT)
        + bytes(node)
        + bytes(authorized_voter)
        + bytes(authorized_withdrawer)
        + struct.pack("<B", commission)
    )
    return Instruction(
        VOTE_PROGRAM_ID,
        data,
        [
            AccountMeta(vote, is_signer=False, is_writable=True),
            AccountMeta(SYSVAR_RENT, is_signer=False, is_writable=False),
            AccountMeta(SYSVAR_CLOCK, is_signer=False, is_writable=False),
            AccountMeta(node, is_signer=True, is_writable=False),
        ],
    )


def create_vote_account(
    payer: Pubkey,
    vote: Pubkey,
    node: Pubkey,
    authorized_withdrawer: Pubkey,
    commission: int,
    lamports: int,
) -> list[Instruction]:
    """Allocate and initialize a vote account; the voter defaults to the identity."""
    return [
        system_create_account(payer, vote, lamports, VOTE_STATE_SIZE, VOTE_PROGRAM_ID),
        vote_initialize_account(vote, node, node, authorized_withdrawer, commission),
    ]


def vote_authorize(vote: Pubkey, authority: Pubkey, new_voter: Pubkey) -> Instruction:
    return Instruction(
        VOTE_PROGRAM_ID,
        _tag(_VOTE_AUTHORIZE) + bytes(new_voter) + struct.pack("<I", VOTE_AUTHORIZE_VOTER),
        [
            AccountMeta(vote, is_signer=False, is_writable=True),
            AccountMeta(SYSVAR_CLOCK, is_signer=False, is_writable=False),
            AccountMeta(authority, is_signer=True, is_writable=False),
        ],
    )


def vote_withdraw(
    vote: Pubkey, withdrawer: Pubkey, lamports: int, recipient: Pubkey
) -> Instruction:
    return Instruction(
        VOTE_PROGRAM_ID,
        _tag(_VOTE_WITHDRAW) + struct.pack("<Q", lamports),
        [
            AccountMeta(vote, is_signer=False, is_writable=True),
            AccountMeta(recipient, is_signer=False, is_writable=True),
            AccountMeta(withdrawer, is_signer=True, is_writable=False),
        ],
    )
