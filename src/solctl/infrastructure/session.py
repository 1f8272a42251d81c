"""Session Context and its swappable holder.

A :class:`SessionContext` binds one keypair to one gateway (endpoint plus
commitment).  It is never mutated: a configuration reload builds a new
context and :class:`ContextHolder` swaps it in wholesale, so an operation
always observes a consistent snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from solctl.config.models import LedgerConfig
from solctl.infrastructure.gateway import LedgerGateway, RpcGateway
from solctl.infrastructure.keypair import read_keypair

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionContext:
    """Signing keypair plus a gateway bound to one endpoint and commitment."""

    keypair: Keypair
    gateway: LedgerGateway
    config: LedgerConfig

    @property
    def pubkey(self) -> Pubkey:
        return self.keypair.pubkey()

    @classmethod
    def from_config(cls, config: LedgerConfig) -> SessionContext:
        """Read the keypair and open a gateway for *config*.

        Raises KeypairError when the key file cannot be read.
        """
        keypair = read_keypair(config.keypair_path)
        gateway = RpcGateway(config.rpc_url, config.commitment_level)
        return cls(keypair=keypair, gateway=gateway, config=config)


type ContextFactory = Callable[[LedgerConfig], SessionContext]


class ContextHolder:
    """Owns the current :class:`SessionContext` and replaces it on reload."""

    def __init__(
        self,
        context: SessionContext,
        *,
        factory: ContextFactory = SessionContext.from_config,
    ) -> None:
        self._current = context
        self._factory = factory

    @property
    def current(self) -> SessionContext:
        return self._current

    async def reload(
        self, config: LedgerConfig, *, commit: Callable[[], object] | None = None
    ) -> SessionContext:
        """Build a context for *config* and swap it in.

        The new context is fully constructed before the swap, so a failure
        leaves the current one in place.  *commit* runs between the build and
        the swap; if it raises, the new gateway is closed and the current
        context stays.
        """
        fresh = self._factory(config)
        if commit is not None:
            try:
                commit()
            except Exception:
                await fresh.gateway.aclose()
                raise
        previous, self._current = self._current, fresh
        logger.info("session reloaded rpc_url=%s pubkey=%s", config.rpc_url, fresh.pubkey)
        await previous.gateway.aclose()
        return fresh

    async def aclose(self) -> None:
        await self._current.gateway.aclose()
