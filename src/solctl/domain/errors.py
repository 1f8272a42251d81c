"""Error taxonomy shared by every layer below the command router.

Each error carries a stable ``code``, a human ``message``, and a ``detail``
dict holding the conflicting values (expected vs. supplied authority,
required vs. current epoch, requested vs. available balance).  The router
converts any :class:`SolctlError` into a failed ``ServiceResult`` and prints
a single line; nothing below the router catches these.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from solctl.services.result import ServiceResult


class RejectReason(StrEnum):
    """Closed set of precondition failures produced by the validation engine."""

    ACCOUNT_NOT_FOUND = "account_not_found"
    ACCOUNT_EXISTS = "account_exists"
    VOTE_ACCOUNT_EXISTS = "vote_account_exists"
    DUPLICATE_ACCOUNTS = "duplicate_accounts"
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    BELOW_RENT_EXEMPT = "below_rent_exempt"
    NOT_STAKE_ACCOUNT = "not_stake_account"
    NOT_VOTE_ACCOUNT = "not_vote_account"
    STAKE_UNINITIALIZED = "stake_uninitialized"
    STAKE_NOT_DELEGATED = "stake_not_delegated"
    STAKE_REWARDS_POOL = "stake_rewards_pool"
    STAKE_ALREADY_DELEGATED = "stake_already_delegated"
    ALREADY_DEACTIVATING = "already_deactivating"
    STAKE_STILL_ACTIVE = "stake_still_active"
    COOLDOWN_NOT_ELAPSED = "cooldown_not_elapsed"
    UNAUTHORIZED_STAKER = "unauthorized_staker"
    UNAUTHORIZED_WITHDRAWER = "unauthorized_withdrawer"
    UNAUTHORIZED_VOTER = "unauthorized_voter"
    NO_AUTHORIZED_VOTER = "no_authorized_voter"
    NONCE_NOT_INITIALIZED = "nonce_not_initialized"


class SolctlError(Exception):
    """Base class for all solctl operation failures."""

    code = "SOLCTL_ERROR"

    def __init__(self, message: str, *, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = dict(detail or {})

    def to_result(self, op: str) -> ServiceResult:
        """Convert into a failed ServiceResult for the given operation."""
        from solctl.services.result import ServiceError, ServiceResult

        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(code=self.code, message=self.message, detail=self.detail),
        )


class DecodeError(SolctlError):
    """Account bytes do not match the expected schema."""

    code = "DECODE_FAILED"

    def __init__(self, schema: str, cause: str) -> None:
        super().__init__(
            f"Failed to decode {schema}: {cause}",
            detail={"schema": schema, "cause": cause},
        )
        self.schema = schema
        self.cause = cause


class ValidationRejection(SolctlError):
    """A named precondition failed against freshly fetched ledger state."""

    code = "VALIDATION_REJECTED"

    def __init__(self, reason: RejectReason, message: str, **detail: Any) -> None:
        super().__init__(message, detail={"reason": str(reason), **detail})
        self.reason = reason


class GatewayError(SolctlError):
    """Transport, HTTP, or JSON-RPC failure talking to the ledger."""

    code = "GATEWAY_ERROR"

    def __init__(self, method: str, message: str, *, rpc_code: int | None = None) -> None:
        detail: dict[str, Any] = {"method": method}
        if rpc_code is not None:
            detail["rpc_code"] = rpc_code
        super().__init__(f"{method}: {message}", detail=detail)
        self.method = method
        self.rpc_code = rpc_code


class SubmissionError(SolctlError):
    """Transaction rejected at or after broadcast."""

    code = "SUBMISSION_FAILED"


class ConfigError(SolctlError):
    """Configuration file missing, malformed, or invalid."""

    code = "CONFIG_ERROR"


class KeypairError(SolctlError):
    """Keypair file missing or unreadable."""

    code = "KEYPAIR_ERROR"
