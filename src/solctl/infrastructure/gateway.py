"""Ledger Gateway — async JSON-RPC client bound to one endpoint and commitment.

:class:`LedgerGateway` is the protocol every orchestrator depends on;
:class:`RpcGateway` implements it over ``httpx.AsyncClient``.  Every call is
a suspension point and nothing here retries: transport failures, HTTP
errors, and JSON-RPC error objects surface once as :class:`GatewayError`,
and broadcast/confirmation failures as :class:`SubmissionError`.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
from solders.hash import Hash
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from solctl.domain.errors import GatewayError, SubmissionError
from solctl.domain.types import CommitmentLevel, LargestAccountsFilter

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_POLL_INTERVAL = 0.5

_FILTER_PARAMS: dict[LargestAccountsFilter, str | None] = {
    LargestAccountsFilter.ALL: None,
    LargestAccountsFilter.CIRCULATING: "circulating",
    LargestAccountsFilter.NON_CIRCULATING: "nonCirculating",
}


@dataclass(frozen=True)
class AccountInfo:
    """An addressable slot of ledger state."""

    lamports: int
    owner: Pubkey
    data: bytes
    executable: bool
    rent_epoch: int


@dataclass(frozen=True)
class EpochInfo:
    epoch: int
    slot_index: int
    slots_in_epoch: int
    absolute_slot: int
    block_height: int


@dataclass(frozen=True)
class LatestBlockhash:
    blockhash: Hash
    last_valid_block_height: int


@dataclass(frozen=True)
class LargestAccount:
    address: str
    lamports: int


class LedgerGateway(Protocol):
    """Query and submit operations consumed by the orchestration layer."""

    @property
    def commitment(self) -> CommitmentLevel: ...


    async def get_account(self, address: Pubkey) -> AccountInfo | None: ...

    async def get_balance(self, address: Pubkey) -> int: ...

    async def get_epoch_info(self) -> EpochInfo: ...

    async def get_latest_blockhash(self) -> LatestBlockhash: ...

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int: ...

    async def get_largest_accounts(
        self, account_filter: LargestAccountsFilter
    ) -> list[LargestAccount]: ...

    async def request_airdrop(self, address: Pubkey, lamports: int) -> str: ...

    async def send_and_confirm(
        self, transaction: Transaction, *, last_valid_block_height: int
    ) -> str: ...

    async def aclose(self) -> None: ...


@contextmanager
def _response_shape(method: str) -> Iterator[None]:
    """Turn a malformed ``result`` payload into a GatewayError for *method*."""
    try:
        yield
    except (AttributeError, KeyError, IndexError, TypeError, ValueError) as exc:
        raise GatewayError(method, f"unexpected response shape: {exc!r}") from exc


class RpcGateway:
    """JSON-RPC 2.0 gateway over HTTP.

    Usage::

        async with RpcGateway("https://api.devnet.solana.com") as gateway:
            lamports = await gateway.get_balance(pubkey)
    """

    def __init__(
        self,
        rpc_url: str,
        commitment: CommitmentLevel = CommitmentLevel.CONFIRMED,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.rpc_url = rpc_url
        self._commitment = commitment
        self._poll_interval = poll_interval
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._request_id = 0

    @property
    def commitment(self) -> CommitmentLevel:
        return self._commitment

    async def __aenter__(self) -> RpcGateway:
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _next_id(self) -> int:
        self._request_id += 1
        return self._request_id

    def _config(self, **extra: Any) -> dict[str, Any]:
        return {"commitment": str(self._commitment), **extra}

    async def _request(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": self._next_id(), "method": method, "params": params}
        logger.debug("rpc request method=%s endpoint=%s", method, self.rpc_url)
        try:
            response = await self._client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as exc:
            raise GatewayError(method, f"HTTP {exc.response.status_code} from RPC node") from exc
        except httpx.RequestError as exc:
            raise GatewayError(method, f"request failed: {exc}") from exc
        except ValueError as exc:
            raise GatewayError(method, f"invalid JSON response: {exc}") from exc

        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            raise GatewayError(
                method, str(error.get("message", error)), rpc_code=error.get("code")
            )
        if error:
            raise GatewayError(method, str(error))
        if not isinstance(body, dict) or "result" not in body:
            raise GatewayError(method, "response has no result")
        return body["result"]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_account(self, address: Pubkey) -> AccountInfo | None:
        method = "getAccountInfo"
        result = await self._request(method, [str(address), self._config(encoding="base64")])
        with _response_shape(method):
            value = result["value"]
            if value is None:
                return None
            raw, _encoding = value["data"]
            return AccountInfo(
                lamports=value["lamports"],
                owner=Pubkey.from_string(value["owner"]),
                data=base64.b64decode(raw),
                executable=value["executable"],
                rent_epoch=value["rentEpoch"],
            )

    async def get_balance(self, address: Pubkey) -> int:
        result = await self._request("getBalance", [str(address), self._config()])
        with _response_shape("getBalance"):
            return int(result["value"])

    async def get_epoch_info(self) -> EpochInfo:
        result = await self._request("getEpochInfo", [self._config()])
        with _response_shape("getEpochInfo"):
            return EpochInfo(
                epoch=result["epoch"],
                slot_index=result["slotIndex"],
                slots_in_epoch=result["slotsInEpoch"],
                absolute_slot=result["absoluteSlot"],
                block_height=result.get("blockHeight", 0),
            )

    async def get_latest_blockhash(self) -> LatestBlockhash:
        result = await self._request("getLatestBlockhash", [self._config()])
        with _response_shape("getLatestBlockhash"):
            value = result["value"]
            return LatestBlockhash(
                blockhash=Hash.from_string(value["blockhash"]),
                last_valid_block_height=value["lastValidBlockHeight"],
            )

    async def get_block_height(self) -> int:
        result = await self._request("getBlockHeight", [self._config()])
        with _response_shape("getBlockHeight"):
            return int(result)

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        method = "getMinimumBalanceForRentExemption"
        result = await self._request(method, [size, self._config()])
        with _response_shape(method):
            return int(result)

    async def get_largest_accounts(
        self, account_filter: LargestAccountsFilter
    ) -> list[LargestAccount]:
        config = self._config()
        filter_param = _FILTER_PARAMS[account_filter]
        if filter_param is not None:
            config["filter"] = filter_param
        result = await self._request("getLargestAccounts", [config])
        with _response_shape("getLargestAccounts"):
            rows = [
                LargestAccount(address=row["address"], lamports=row["lamports"])
                for row in result["value"]
            ]
        return sorted(rows, key=lambda row: row.lamports, reverse=True)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def request_airdrop(self, address: Pubkey, lamports: int) -> str:
        return str(await self._request("requestAirdrop", [str(address), lamports, self._config()]))

    async def send_and_confirm(
        self, transaction: Transaction, *, last_valid_block_height: int
    ) -> str:
        """Broadcast *transaction* and wait until it reaches the configured commitment."""
        wire = base64.b64encode(bytes(transaction)).decode("ascii")
        try:
            signature = str(
                await self._request(
                    "sendTransaction",
                    [wire, {"encoding": "base64", "preflightCommitment": str(self._commitment)}],
                )
            )
        except GatewayError as exc:
            raise SubmissionError(exc.message, detail=exc.detail) from exc

        logger.debug("transaction sent signature=%s", signature)
        await self._confirm(signature, last_valid_block_height)
        return signature

    async def _confirm(self, signature: str, last_valid_block_height: int) -> None:
        try:
            await self._poll_status(signature, last_valid_block_height)
        except GatewayError as exc:
            # Already broadcast: the transaction may still land.
            raise SubmissionError(
                f"Transaction {signature} was sent but its status is unknown: {exc.message}",
                detail={"signature": signature, **exc.detail},
            ) from exc

    async def _poll_status(self, signature: str, last_valid_block_height: int) -> None:
        method = "getSignatureStatuses"
        target = self._commitment.rank
        while True:
            result = await self._request(
                method, [[signature], {"searchTransactionHistory": False}]
            )
            with _response_shape(method):
                status = (result["value"] or [None])[0]
                if status is not None:
                    err = status.get("err")
                    reached = status.get("confirmationStatus")
                    confirmed = bool(reached) and CommitmentLevel(reached).rank >= target
            if status is None:
                if await self.get_block_height() > last_valid_block_height:
                    raise SubmissionError(
                        f"Transaction {signature} expired: blockhash is no longer valid",
                        detail={
                            "signature": signature,
                            "last_valid_block_height": last_valid_block_height,
                        },
                    )
            elif err is not None:
                raise SubmissionError(
                    f"Transaction {signature} failed: {err}",
                    detail={"signature": signature, "err": err},
                )
            elif confirmed:
                return
            await asyncio.sleep(self._poll_interval)
