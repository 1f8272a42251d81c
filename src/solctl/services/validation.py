"""Validation engine — per-operation precondition rules.

Every rule is a pure function over state the orchestrator fetched in the
same invocation and returns a :data:`Verdict`: :class:`Proceed` or
:class:`Reject` naming the failed rule and the conflicting values.
Orchestrators call :func:`require`, which raises
:class:`~solctl.domain.errors.ValidationRejection` on a rejection, so no
transaction is ever built after a failed check.

Stake rules match exhaustively on the decoded variant; adding a variant to
:data:`~solctl.domain.accounts.StakeState` breaks every ``assert_never``
below until the rule sets are reviewed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, assert_never

from solders.pubkey import Pubkey

from solctl.domain.accounts import (
    NonceState,
    StakeDelegated,
    StakeInitialized,
    StakeMeta,
    StakeRewardsPool,
    StakeState,
    StakeUninitialized,
    VoteStateView,
)
from solctl.domain.errors import RejectReason, ValidationRejection
from solctl.domain.programs import STAKE_PROGRAM_ID, VOTE_PROGRAM_ID
from solctl.domain.units import lamports_to_sol
from solctl.infrastructure.gateway import AccountInfo


@dataclass(frozen=True)
class Proceed:
    pass


@dataclass(frozen=True)
class Reject:
    reason: RejectReason
    message: str
    detail: dict[str, Any] = field(default_factory=dict)

    def to_error(self) -> ValidationRejection:
        return ValidationRejection(self.reason, self.message, **self.detail)


type Verdict = Proceed | Reject

PROCEED = Proceed()


def require(verdict: Verdict) -> None:
    """Raise ValidationRejection unless *verdict* is Proceed."""
    match verdict:
        case Proceed():
            return
        case Reject():
            raise verdict.to_error()
        case _:
            assert_never(verdict)


def first_rejection(*verdicts: Verdict) -> Verdict:
    """The first Reject among *verdicts*, else Proceed."""
    for verdict in verdicts:
        if isinstance(verdict, Reject):
            return verdict
    return PROCEED


# ---------------------------------------------------------------------------
# Shared rules
# ---------------------------------------------------------------------------


def check_positive_amount(lamports: int) -> Verdict:
    if lamports <= 0:
        return Reject(
            RejectReason.INVALID_AMOUNT,
            "Amount must be greater than 0",
            requested=lamports_to_sol(lamports),
        )
    return PROCEED


def check_sufficient_balance(available: int, lamports: int, *, action: str = "send") -> Verdict:
    if lamports > available:
        have, requested = lamports_to_sol(available), lamports_to_sol(lamports)
        return Reject(
            RejectReason.INSUFFICIENT_BALANCE,
            f"Insufficient balance. You have {have} SOL but tried to {action} {requested} SOL",
            have=have,
            requested=requested,
        )
    return PROCEED


def check_exists(address: Pubkey, account: AccountInfo | None) -> Verdict:
    if account is None:
        return Reject(
            RejectReason.ACCOUNT_NOT_FOUND,
            f"Account {address} not found",
            address=str(address),
        )
    return PROCEED


def check_absent(address: Pubkey, account: AccountInfo | None) -> Verdict:
    if account is not None:
        return Reject(
            RejectReason.ACCOUNT_EXISTS,
            f"Account {address} already exists",
            address=str(address),
            owner=str(account.owner),
        )
    return PROCEED


def _check_owner(
    address: Pubkey, account: AccountInfo, program: Pubkey, reason: RejectReason, kind: str
) -> Verdict:
    if account.owner != program:
        return Reject(
            reason,
            f"Account {address} is not a {kind} account (owner: {account.owner})",
            address=str(address),
            owner=str(account.owner),
            expected_owner=str(program),
        )
    return PROCEED


def check_stake_owner(address: Pubkey, account: AccountInfo) -> Verdict:
    return _check_owner(address, account, STAKE_PROGRAM_ID, RejectReason.NOT_STAKE_ACCOUNT, "stake")


def check_vote_owner(address: Pubkey, account: AccountInfo) -> Verdict:
    return _check_owner(address, account, VOTE_PROGRAM_ID, RejectReason.NOT_VOTE_ACCOUNT, "vote")


def _check_authority(
    supplied: Pubkey, expected: Pubkey, reason: RejectReason, role: str
) -> Verdict:
    if supplied != expected:
        return Reject(
            reason,
            f"You are not the authorized {role}. Expected {expected}, got {supplied}",
            expected=str(expected),
            supplied=str(supplied),
        )
    return PROCEED


# ---------------------------------------------------------------------------
# Account group
# ---------------------------------------------------------------------------


def check_transfer(balance: int, lamports: int) -> Verdict:
    """The sender's latest balance must cover *lamports*."""
    return first_rejection(
        check_positive_amount(lamports),
        check_sufficient_balance(balance, lamports),
    )


def check_nonce_initialized(address: Pubkey, state: NonceState) -> Verdict:
    if not state.is_initialized:
        return Reject(
            RejectReason.NONCE_NOT_INITIALIZED,
            f"Nonce account {address} is not initialized",
            address=str(address),
        )
    return PROCEED


# ---------------------------------------------------------------------------
# Stake group
# ---------------------------------------------------------------------------


def _uninitialized() -> Reject:
    return Reject(RejectReason.STAKE_UNINITIALIZED, "Stake account is not initialized")


def _rewards_pool() -> Reject:
    return Reject(
        RejectReason.STAKE_REWARDS_POOL, "Stake account is a rewards pool and cannot be used"
    )


def check_stake_create_accounts(payer: Pubkey, stake: Pubkey, lamports: int) -> Verdict:
    """Checks that need no ledger state."""
    if stake == payer:
        return Reject(
            RejectReason.DUPLICATE_ACCOUNTS,
            f"Stake account {stake} must differ from the fee payer",
            stake_account=str(stake),
            fee_payer=str(payer),
        )
    return check_positive_amount(lamports)


def check_rent_exempt(lamports: int, minimum: int) -> Verdict:
    if lamports < minimum:
        return Reject(
            RejectReason.BELOW_RENT_EXEMPT,
            f"Amount {lamports_to_sol(lamports)} SOL is below the rent-exempt minimum "
            f"of {lamports_to_sol(minimum)} SOL",
            requested=lamports_to_sol(lamports),
            minimum=lamports_to_sol(minimum),
        )
    return PROCEED


def check_stake_delegate(
    caller: Pubkey,
    stake_address: Pubkey,
    stake_account: AccountInfo,
    state: StakeState,
    vote_address: Pubkey,
    vote_account: AccountInfo | None,
) -> Verdict:
    """Initialized stake, or stake already deactivated, may be (re)delegated by its staker."""
    owner = check_stake_owner(stake_address, stake_account)
    if isinstance(owner, Reject):
        return owner

    meta: StakeMeta
    match state:
        case StakeInitialized(meta=meta):
            pass
        case StakeDelegated(meta=meta, delegation=delegation):
            if not delegation.is_deactivating:
                return Reject(
                    RejectReason.STAKE_ALREADY_DELEGATED,
                    f"Stake is already delegated to {delegation.voter}",
                    voter=str(delegation.voter),
                )
        case StakeUninitialized():
            return _uninitialized()
        case StakeRewardsPool():
            return _rewards_pool()
        case _:
            assert_never(state)

    return first_rejection(
        _check_authority(caller, meta.staker, RejectReason.UNAUTHORIZED_STAKER, "staker"),
        check_exists(vote_address, vote_account),
        PROCEED if vote_account is None else check_vote_owner(vote_address, vote_account),
    )


def check_stake_deactivate(
    caller: Pubkey, address: Pubkey, account: AccountInfo, state: StakeState
) -> Verdict:
    """Only delegated, still-active stake may be deactivated, and only by its staker."""
    owner = check_stake_owner(address, account)
    if isinstance(owner, Reject):
        return owner

    match state:
        case StakeDelegated(meta=meta, delegation=delegation):
            if delegation.is_deactivating:
                epoch = delegation.deactivation_epoch
                return Reject(
                    RejectReason.ALREADY_DEACTIVATING,
                    f"Stake is already deactivating at epoch {epoch}",
                    deactivation_epoch=epoch,
                )
            return _check_authority(caller, meta.staker, RejectReason.UNAUTHORIZED_STAKER, "staker")
        case StakeInitialized():
            return Reject(
                RejectReason.STAKE_NOT_DELEGATED,
                "Stake account is initialized but not delegated",
            )
        case StakeUninitialized():
            return _uninitialized()
        case StakeRewardsPool():
            return _rewards_pool()
        case _:
            assert_never(state)


def check_stake_withdraw(
    caller: Pubkey,
    address: Pubkey,
    account: AccountInfo,
    state: StakeState,
    lamports: int,
    current_epoch: int,
) -> Verdict:
    """Withdrawal needs the withdrawer and, for delegated stake, an elapsed cooldown."""
    positive = check_positive_amount(lamports)
    if isinstance(positive, Reject):
        return positive
    owner = check_stake_owner(address, account)
    if isinstance(owner, Reject):
        return owner

    match state:
        case StakeDelegated(meta=meta, delegation=delegation):
            authority = _check_authority(
                caller, meta.withdrawer, RejectReason.UNAUTHORIZED_WITHDRAWER, "withdrawer"
            )
            if isinstance(authority, Reject):
                return authority
            if not delegation.is_deactivating:
                return Reject(
                    RejectReason.STAKE_STILL_ACTIVE,
                    "Stake is still active. Deactivate it and wait for the cooldown first",
                    current_epoch=current_epoch,
                )
            deactivation = delegation.deactivation_epoch
            if current_epoch <= deactivation:
                remaining = deactivation - current_epoch
                return Reject(
                    RejectReason.COOLDOWN_NOT_ELAPSED,
                    f"Stake is still cooling down (deactivation epoch {deactivation}, "
                    f"current epoch {current_epoch}, epochs remaining {remaining})",
                    deactivation_epoch=deactivation,
                    current_epoch=current_epoch,
                    epochs_remaining=remaining,
                )
        case StakeInitialized(meta=meta):
            authority = _check_authority(
                caller, meta.withdrawer, RejectReason.UNAUTHORIZED_WITHDRAWER, "withdrawer"
            )
            if isinstance(authority, Reject):
                return authority
        case StakeUninitialized():
            return _uninitialized()
        case StakeRewardsPool():
            return _rewards_pool()
        case _:
            assert_never(state)

    return check_sufficient_balance(account.lamports, lamports, action="withdraw")


# ---------------------------------------------------------------------------
# Vote group
# ---------------------------------------------------------------------------


def check_vote_create_accounts(payer: Pubkey, vote: Pubkey, identity: Pubkey) -> Verdict:
    """Checks that need no ledger state; run before any lookup."""
    if payer == vote:
        return Reject(
            RejectReason.DUPLICATE_ACCOUNTS,
            f"Fee payer {payer} cannot be the vote account",
            fee_payer=str(payer),
            vote_account=str(vote),
        )
    if vote == identity:
        return Reject(
            RejectReason.DUPLICATE_ACCOUNTS,
            f"Vote account {vote} cannot be the identity account",
            vote_account=str(vote),
            identity=str(identity),
        )
    return PROCEED


def check_vote_target_absent(address: Pubkey, account: AccountInfo | None) -> Verdict:
    if account is None:
        return PROCEED
    if account.owner == VOTE_PROGRAM_ID:
        return Reject(
            RejectReason.VOTE_ACCOUNT_EXISTS,
            f"Vote account {address} already exists",
            address=str(address),
        )
    return Reject(
        RejectReason.ACCOUNT_EXISTS,
        f"Account {address} already exists and is not a vote account",
        address=str(address),
        owner=str(account.owner),
    )


def vote_create_funding(rent_minimum: int) -> int:
    """Lamports to fund a new vote account: the rent-exempt minimum, at least 1."""
    return max(rent_minimum, 1)


def check_vote_authorize(authority: Pubkey, view: VoteStateView, epoch: int) -> Verdict:
    """The current epoch's authorized voter or the withdrawer may change the voter."""
    voter = view.authorized_voter_for(epoch)
    if voter is None:
        return Reject(
            RejectReason.NO_AUTHORIZED_VOTER,
            f"Vote account has no authorized voter for epoch {epoch}",
            epoch=epoch,
        )
    if authority not in (voter, view.authorized_withdrawer):
        return Reject(
            RejectReason.UNAUTHORIZED_VOTER,
            f"Authority {authority} is neither the authorized voter {voter} "
            f"nor the authorized withdrawer {view.authorized_withdrawer}",
            supplied=str(authority),
            authorized_voter=str(voter),
            authorized_withdrawer=str(view.authorized_withdrawer),
            epoch=epoch,
        )
    return PROCEED


def check_vote_withdraw(
    authority: Pubkey, view: VoteStateView, lamports: int, available: int
) -> Verdict:
    return first_rejection(
        _check_authority(
            authority,
            view.authorized_withdrawer,
            RejectReason.UNAUTHORIZED_WITHDRAWER,
            "withdrawer",
        ),
        check_positive_amount(lamports),
        check_sufficient_balance(available, lamports, action="withdraw"),
    )
