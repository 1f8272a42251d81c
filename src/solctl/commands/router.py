"""Command router — the interactive state machine.

States are :class:`MainMenu`, :class:`GroupMenu` and :class:`Terminated`.
A leaf handler yields exactly one :data:`Outcome`, which alone decides the
next state.  Any :class:`SolctlError` a leaf raises is converted here into
a failed ``ServiceResult``, printed as one line, and treated as a
completed leaf, so the loop resumes in the same group.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, assert_never

from solctl.commands.account import handle_account
from solctl.commands.config import handle_config
from solctl.commands.stake import handle_stake
from solctl.commands.vote import handle_vote
from solctl.domain.errors import SolctlError
from solctl.domain.lifecycle import (
    Completed,
    GroupMenu,
    MainMenu,
    MenuState,
    Outcome,
    Terminated,
    after_outcome,
    select_group,
)
from solctl.domain.types import (
    GROUP_COMMANDS,
    AccountCommand,
    Command,
    CommandGroup,
    ConfigCommand,
    StakeCommand,
    VoteCommand,
    operation_name,
)

if TYPE_CHECKING:
    from solctl.commands._context import AppContext

logger = logging.getLogger(__name__)


class CommandRouter:
    """Drive menu navigation until the user selects Exit.

    Not reentrant: one leaf runs at a time, and a configuration reload
    happens only inside the Config leaf that requested it.
    """

    def __init__(self, app: AppContext) -> None:
        self._app = app

    async def run(self, state: MenuState | None = None) -> None:
        state = state or MainMenu()
        while not isinstance(state, Terminated):
            state = await self.step(state)
        logger.debug("router terminated")

    async def step(self, state: MenuState) -> MenuState:
        """Advance the state machine by one prompt."""
        match state:
            case MainMenu():
                group = self._app.prompter.select("Main menu", list(CommandGroup))
                return select_group(group)
            case GroupMenu(group=group):
                command = self._app.prompter.select(f"{group} menu", GROUP_COMMANDS[group])
                return after_outcome(state, await self.invoke(command))
            case Terminated():
                return state
            case _:
                assert_never(state)

    async def invoke(self, command: Command) -> Outcome:
        """Run one leaf; failures become a printed error and a Completed outcome."""
        try:
            return await self._dispatch(command)
        except SolctlError as exc:
            result = exc.to_result(operation_name(command))
            logger.debug("operation failed op=%s code=%s", result.op, exc.code)
            self._app.emit(result)
            return Completed(result)

    async def _dispatch(self, command: Command) -> Outcome:
        match command:
            case AccountCommand():
                return await handle_account(command, self._app)
            case StakeCommand():
                return await handle_stake(command, self._app)
            case VoteCommand():
                return await handle_vote(command, self._app)
            case ConfigCommand():
                return await handle_config(command, self._app)
            case _:
                assert_never(command)
