"""Menu state machine and operation outcomes.

Router states: ``MainMenu`` → ``GroupMenu(group)`` → back to ``MainMenu``,
and ``MainMenu`` → ``Terminated`` when Exit is chosen.  Every leaf operation
yields exactly one :data:`Outcome`; it is the only channel through which
control flow travels back to the router.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, assert_never

from solctl.domain.types import CommandGroup

if TYPE_CHECKING:
    from solctl.services.result import ServiceResult

# --- Outcomes ---


@dataclass(frozen=True)
class Completed:
    """The leaf ran to a result (successful or failed); stay in the group."""

    value: ServiceResult | None = None


@dataclass(frozen=True)
class NavigateBack:
    """Return to the main menu."""


@dataclass(frozen=True)
class Terminate:
    """End the interactive session."""


type Outcome = Completed | NavigateBack | Terminate


# --- Router states ---


@dataclass(frozen=True)
class MainMenu:
    pass


@dataclass(frozen=True)
class GroupMenu:
    group: CommandGroup


@dataclass(frozen=True)
class Terminated:
    pass


type MenuState = MainMenu | GroupMenu | Terminated


def select_group(group: CommandGroup) -> MenuState:
    """Transition out of the main menu for the chosen group."""
    if group is CommandGroup.EXIT:
        return Terminated()
    return GroupMenu(group)


def after_outcome(state: GroupMenu, outcome: Outcome) -> MenuState:
    """Transition out of a group menu once a leaf has produced *outcome*."""
    match outcome:
        case Completed():
            return state
        case NavigateBack():
            return MainMenu()
        case Terminate():
            return Terminated()
        case _:
            assert_never(outcome)
