"""BaseService — foundation for the operation orchestrators.

Each orchestrator is constructed with the :class:`SessionContext` that is
current when the operation starts, so one invocation observes one keypair
and one gateway even if the configuration is reloaded afterwards.  Every
gateway read goes through a helper here so it appears as a child span
under ``--verbose``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from solctl.infrastructure.gateway import AccountInfo, EpochInfo, LedgerGateway
from solctl.infrastructure.session import SessionContext
from solctl.services.telemetry import trace_span
from solctl.services.transaction import TransactionBuilder
from solctl.services.validation import Reject, Verdict, check_exists, require

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for the per-group orchestrators.

    Usage::

        class AccountService(BaseService):
            @traced
            async def balance(self, address: Pubkey) -> ServiceResult:
                lamports = await self._balance(address)
                ...
    """

    def __init__(self, session: SessionContext) -> None:
        self._session = session

    @property
    def _gateway(self) -> LedgerGateway:
        return self._session.gateway

    @property
    def _payer(self) -> Keypair:
        return self._session.keypair

    # --- Ledger reads ---

    async def _account(self, address: Pubkey) -> AccountInfo | None:
        with trace_span("get_account"):
            return await self._gateway.get_account(address)

    async def _existing_account(self, address: Pubkey) -> AccountInfo:
        """Fetch *address*, rejecting with ACCOUNT_NOT_FOUND when missing."""
        account = await self._account(address)
        self._require(check_exists(address, account))
        assert account is not None
        return account

    async def _balance(self, address: Pubkey) -> int:
        with trace_span("get_balance"):
            return await self._gateway.get_balance(address)

    async def _epoch_info(self) -> EpochInfo:
        with trace_span("get_epoch_info"):
            return await self._gateway.get_epoch_info()

    async def _rent_minimum(self, size: int) -> int:
        with trace_span("get_minimum_balance_for_rent_exemption"):
            return await self._gateway.get_minimum_balance_for_rent_exemption(size)

    # --- Gating and submission ---

    def _require(self, verdict: Verdict) -> None:
        """Raise ValidationRejection on a Reject, logging the failed rule."""
        if isinstance(verdict, Reject):
            logger.info("validation rejected reason=%s detail=%s", verdict.reason, verdict.detail)
        require(verdict)

    async def _submit(
        self, instructions: Sequence[Instruction], extra_signers: Sequence[Keypair] = ()
    ) -> str:
        """Submit *instructions* paid for and signed by the session keypair."""
        builder = TransactionBuilder(self._gateway)
        return await builder.submit(
            instructions, [self._payer, *extra_signers], fee_payer=self._payer.pubkey()
        )
