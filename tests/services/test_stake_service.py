"""Tests for StakeService."""

from __future__ import annotations

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from solctl.domain.errors import RejectReason, SubmissionError, ValidationRejection
from solctl.domain.programs import STAKE_PROGRAM_ID
from solctl.infrastructure.session import SessionContext
from solctl.services.stake import StakeService
from tests.conftest import (
    STAKE_RENT,
    FakeGateway,
    encode_stake_delegated,
    encode_stake_initialized,
    encode_stake_uninitialized,
    encode_vote_v3,
    make_keypair,
    stake_account,
    system_account,
    vote_account,
)

STAKE_KEYPAIR = make_keypair(5)
STAKE = STAKE_KEYPAIR.pubkey()
VOTE = make_keypair(6).pubkey()
NODE = make_keypair(8).pubkey()


def _reason(exc_info: pytest.ExceptionInfo[ValidationRejection]) -> RejectReason:
    return exc_info.value.reason


@pytest.fixture
def funded(gateway: FakeGateway, payer: Keypair) -> FakeGateway:
    gateway.accounts[payer.pubkey()] = system_account(20_000_000_000)
    return gateway


@pytest.fixture
def with_vote(funded: FakeGateway) -> FakeGateway:
    funded.accounts[VOTE] = vote_account(encode_vote_v3(NODE, NODE, [(0, NODE)]))
    return funded


class TestCreate:
    @pytest.mark.asyncio
    async def test_creates_and_signs_with_stake_keypair(
        self, session: SessionContext, funded: FakeGateway, payer: Keypair
    ) -> None:
        result = await StakeService(session).create(STAKE_KEYPAIR, 2_000_000_000)

        assert result.ok
        assert result.op == "stake_create"
        assert result.data["stake_account"] == str(STAKE)
        assert result.data["authority"] == str(payer.pubkey())
        assert result.data["sol"] == 2.0
        (tx,) = funded.sent
        assert len(tx.signatures) == 2
        assert STAKE_PROGRAM_ID in tx.message.account_keys

    @pytest.mark.asyncio
    async def test_below_rent_exempt(self, session: SessionContext, funded: FakeGateway) -> None:
        with pytest.raises(ValidationRejection) as exc_info:
            await StakeService(session).create(STAKE_KEYPAIR, STAKE_RENT - 1)
        assert _reason(exc_info) is RejectReason.BELOW_RENT_EXEMPT
        assert funded.sent == []

    @pytest.mark.asyncio
    async def test_existing_stake_address(
        self, session: SessionContext, funded: FakeGateway
    ) -> None:
        funded.accounts[STAKE] = system_account()
        with pytest.raises(ValidationRejection) as exc_info:
            await StakeService(session).create(STAKE_KEYPAIR, 2_000_000_000)
        assert _reason(exc_info) is RejectReason.ACCOUNT_EXISTS

    @pytest.mark.asyncio
    async def test_payer_cannot_be_stake_account(
        self, session: SessionContext, gateway: FakeGateway, payer: Keypair
    ) -> None:
        with pytest.raises(ValidationRejection) as exc_info:
            await StakeService(session).create(payer, 2_000_000_000)
        assert _reason(exc_info) is RejectReason.DUPLICATE_ACCOUNTS
        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_insufficient_payer_balance(
        self, session: SessionContext, gateway: FakeGateway, payer: Keypair
    ) -> None:
        gateway.accounts[payer.pubkey()] = system_account(1_000_000_000)
        with pytest.raises(ValidationRejection) as exc_info:
            await StakeService(session).create(STAKE_KEYPAIR, 2_000_000_000)
        assert _reason(exc_info) is RejectReason.INSUFFICIENT_BALANCE


class TestDelegate:
    @pytest.mark.asyncio
    async def test_delegates_initialized_stake(
        self, session: SessionContext, with_vote: FakeGateway, payer: Keypair
    ) -> None:
        me = payer.pubkey()
        with_vote.accounts[STAKE] = stake_account(encode_stake_initialized(me, me))

        result = await StakeService(session).delegate(STAKE, VOTE)

        assert result.op == "stake_delegate"
        assert result.data["vote_account"] == str(VOTE)
        assert len(with_vote.sent) == 1

    @pytest.mark.asyncio
    async def test_not_a_stake_account(
        self, session: SessionContext, with_vote: FakeGateway
    ) -> None:
        with_vote.accounts[STAKE] = system_account()
        with pytest.raises(ValidationRejection) as exc_info:
            await StakeService(session).delegate(STAKE, VOTE)
        assert _reason(exc_info) is RejectReason.NOT_STAKE_ACCOUNT

    @pytest.mark.asyncio
    async def test_missing_vote_account(
        self, session: SessionContext, funded: FakeGateway, payer: Keypair
    ) -> None:
        me = payer.pubkey()
        funded.accounts[STAKE] = stake_account(encode_stake_initialized(me, me))
        with pytest.raises(ValidationRejection) as exc_info:
            await StakeService(session).delegate(STAKE, VOTE)
        assert _reason(exc_info) is RejectReason.ACCOUNT_NOT_FOUND
        assert funded.sent == []

    @pytest.mark.asyncio
    async def test_wrong_staker(self, session: SessionContext, with_vote: FakeGateway) -> None:
        other = make_keypair(9).pubkey()
        with_vote.accounts[STAKE] = stake_account(encode_stake_initialized(other, other))
        with pytest.raises(ValidationRejection) as exc_info:
            await StakeService(session).delegate(STAKE, VOTE)
        assert _reason(exc_info) is RejectReason.UNAUTHORIZED_STAKER


class TestDeactivate:
    @pytest.mark.asyncio
    async def test_deactivates_active_delegation(
        self, session: SessionContext, funded: FakeGateway, payer: Keypair
    ) -> None:
        me = payer.pubkey()
        funded.accounts[STAKE] = stake_account(encode_stake_delegated(me, me, VOTE))

        result = await StakeService(session).deactivate(STAKE)

        assert result.op == "stake_deactivate"
        assert result.data["epoch"] == funded.epoch
        assert len(funded.sent) == 1

    @pytest.mark.asyncio
    async def test_already_deactivating(
        self, session: SessionContext, funded: FakeGateway, payer: Keypair
    ) -> None:
        me = payer.pubkey()
        funded.accounts[STAKE] = stake_account(
            encode_stake_delegated(me, me, VOTE, deactivation_epoch=95)
        )
        with pytest.raises(ValidationRejection) as exc_info:
            await StakeService(session).deactivate(STAKE)
        assert _reason(exc_info) is RejectReason.ALREADY_DEACTIVATING
        assert exc_info.value.detail["deactivation_epoch"] == 95

    @pytest.mark.asyncio
    async def test_never_delegated(
        self, session: SessionContext, funded: FakeGateway, payer: Keypair
    ) -> None:
        me = payer.pubkey()
        funded.accounts[STAKE] = stake_account(encode_stake_initialized(me, me))
        with pytest.raises(ValidationRejection) as exc_info:
            await StakeService(session).deactivate(STAKE)
        assert _reason(exc_info) is RejectReason.STAKE_NOT_DELEGATED


class TestWithdraw:
    @pytest.mark.asyncio
    async def test_withdraws_after_cooldown(
        self, session: SessionContext, funded: FakeGateway, payer: Keypair
    ) -> None:
        me = payer.pubkey()
        funded.accounts[STAKE] = stake_account(
            encode_stake_delegated(me, me, VOTE, deactivation_epoch=95)
        )

        result = await StakeService(session).withdraw(STAKE, 1_000_000_000)

        assert result.op == "stake_withdraw"
        assert result.data["recipient"] == str(me)
        assert result.data["lamports"] == 1_000_000_000

    @pytest.mark.asyncio
    async def test_explicit_recipient(
        self, session: SessionContext, funded: FakeGateway, payer: Keypair
    ) -> None:
        me = payer.pubkey()
        recipient = Pubkey.new_unique()
        funded.accounts[STAKE] = stake_account(encode_stake_initialized(me, me))

        result = await StakeService(session).withdraw(STAKE, 1_000_000_000, recipient)

        assert result.data["recipient"] == str(recipient)
        assert recipient in funded.sent[0].message.account_keys

    @pytest.mark.asyncio
    async def test_cooldown_not_elapsed(
        self, session: SessionContext, funded: FakeGateway, payer: Keypair
    ) -> None:
        me = payer.pubkey()
        funded.accounts[STAKE] = stake_account(
            encode_stake_delegated(me, me, VOTE, deactivation_epoch=funded.epoch)
        )
        with pytest.raises(ValidationRejection) as exc_info:
            await StakeService(session).withdraw(STAKE, 1_000_000_000)
        assert _reason(exc_info) is RejectReason.COOLDOWN_NOT_ELAPSED
        assert funded.sent == []

    @pytest.mark.asyncio
    async def test_still_active(
        self, session: SessionContext, funded: FakeGateway, payer: Keypair
    ) -> None:
        me = payer.pubkey()
        funded.accounts[STAKE] = stake_account(encode_stake_delegated(me, me, VOTE))
        with pytest.raises(ValidationRejection) as exc_info:
            await StakeService(session).withdraw(STAKE, 1_000_000_000)
        assert _reason(exc_info) is RejectReason.STAKE_STILL_ACTIVE

    @pytest.mark.asyncio
    async def test_zero_amount_checked_before_fetch(
        self, session: SessionContext, gateway: FakeGateway
    ) -> None:
        with pytest.raises(ValidationRejection) as exc_info:
            await StakeService(session).withdraw(STAKE, 0)
        assert _reason(exc_info) is RejectReason.INVALID_AMOUNT
        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_submission_failure_propagates(
        self, session: SessionContext, funded: FakeGateway, payer: Keypair
    ) -> None:
        me = payer.pubkey()
        funded.accounts[STAKE] = stake_account(encode_stake_initialized(me, me))
        funded.send_error = SubmissionError("custom program error: 0x3")
        with pytest.raises(SubmissionError):
            await StakeService(session).withdraw(STAKE, 1_000_000_000)


class TestShow:
    @pytest.mark.asyncio
    async def test_delegated_fields(
        self, session: SessionContext, gateway: FakeGateway, payer: Keypair
    ) -> None:
        me = payer.pubkey()
        gateway.accounts[STAKE] = stake_account(encode_stake_delegated(me, me, VOTE))

        result = await StakeService(session).show(STAKE)

        assert result.op == "stake_show"
        assert result.data["state"] == "delegated"
        assert result.data["staker"] == str(me)
        assert result.data["voter"] == str(VOTE)
        assert result.data["delegated_stake"] == 5_000_000_000
        assert result.data["activation_epoch"] == 90
        assert result.data["deactivation_epoch"] == "active"
        assert result.data["rent_exempt_reserve"] == STAKE_RENT

    @pytest.mark.asyncio
    async def test_uninitialized_has_no_authorities(
        self, session: SessionContext, gateway: FakeGateway
    ) -> None:
        gateway.accounts[STAKE] = stake_account(encode_stake_uninitialized())

        result = await StakeService(session).show(STAKE)

        assert result.data["state"] == "uninitialized"
        assert result.data["staker"] is None
        assert result.data["voter"] is None

    @pytest.mark.asyncio
    async def test_does_not_submit(self, session: SessionContext, gateway: FakeGateway) -> None:
        gateway.accounts[STAKE] = stake_account(encode_stake_uninitialized())
        await StakeService(session).show(STAKE)
        assert gateway.sent == []
