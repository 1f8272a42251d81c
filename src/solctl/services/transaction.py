"""Transaction builder — one message, one blockhash, one submission.

Given an ordered instruction list and the required signers, the builder
fetches the latest blockhash, compiles a single message paid for by the
first signer (or an explicit fee payer), signs with exactly the
deduplicated signer set, and hands the transaction to the gateway to
broadcast and confirm.  Nothing is retried: the first failure surfaces
as :class:`~solctl.domain.errors.SubmissionError` or
:class:`~solctl.domain.errors.GatewayError`.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog
from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from solctl.infrastructure.gateway import LedgerGateway
from solctl.services.telemetry import trace_span

log = structlog.get_logger(__name__)


def dedupe_signers(signers: Sequence[Keypair]) -> list[Keypair]:
    """Drop repeated keypairs (by public key), keeping first-seen order."""
    seen: set[Pubkey] = set()
    unique: list[Keypair] = []
    for signer in signers:
        pubkey = signer.pubkey()
        if pubkey not in seen:
            seen.add(pubkey)
            unique.append(signer)
    return unique


class TransactionBuilder:
    """Assemble, sign, and submit transactions through a gateway."""

    def __init__(self, gateway: LedgerGateway) -> None:
        self._gateway = gateway

    def build(
        self,
        instructions: Sequence[Instruction],
        signers: Sequence[Keypair],
        blockhash: Hash,
        *,
        fee_payer: Pubkey | None = None,
    ) -> Transaction:
        """Compile and sign without touching the network."""
        if not instructions:
            raise ValueError("a transaction needs at least one instruction")
        unique = dedupe_signers(signers)
        if not unique:
            raise ValueError("a transaction needs at least one signer")
        payer = fee_payer or unique[0].pubkey()
        message = Message.new_with_blockhash(list(instructions), payer, blockhash)
        return Transaction(unique, message, blockhash)

    async def submit(
        self,
        instructions: Sequence[Instruction],
        signers: Sequence[Keypair],
        *,
        fee_payer: Pubkey | None = None,
    ) -> str:
        """Sign *instructions* with *signers*, submit, and return the signature."""
        with trace_span("get_latest_blockhash"):
            latest = await self._gateway.get_latest_blockhash()
        transaction = self.build(instructions, signers, latest.blockhash, fee_payer=fee_payer)

        with trace_span("send_and_confirm") as span:
            signature = await self._gateway.send_and_confirm(
                transaction, last_valid_block_height=latest.last_valid_block_height
            )
            if span is not None:
                span.annotate("signature", signature)
        log.info(
            "transaction.confirmed",
            signature=signature,
            instructions=len(instructions),
            commitment=str(self._gateway.commitment),
        )
        return signature
