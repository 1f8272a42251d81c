"""Tests for the command hierarchy and ledger enums."""

from __future__ import annotations

import pytest

from solctl.domain.types import (
    GROUP_COMMANDS,
    AccountCommand,
    CommandGroup,
    CommitmentLevel,
    ConfigCommand,
    StakeCommand,
    VoteCommand,
    operation_name,
    spinner_message,
)


class TestCommitmentLevel:
    def test_ordering(self) -> None:
        ranks = [level.rank for level in CommitmentLevel]
        assert ranks == sorted(ranks)
        assert CommitmentLevel.FINALIZED.rank > CommitmentLevel.PROCESSED.rank

    def test_values_match_rpc_names(self) -> None:
        assert [str(level) for level in CommitmentLevel] == ["processed", "confirmed", "finalized"]


class TestCommandHierarchy:
    def test_every_group_but_exit_has_go_back_last(self) -> None:
        for group, commands in GROUP_COMMANDS.items():
            if group is CommandGroup.EXIT:
                assert commands == []
            else:
                assert commands[-1].name == "GO_BACK"

    def test_account_leaves(self) -> None:
        assert GROUP_COMMANDS[CommandGroup.ACCOUNT] == list(AccountCommand)
        assert len(AccountCommand) == 7

    def test_stake_leaves(self) -> None:
        names = [c.name for c in StakeCommand]
        assert names == ["CREATE", "DELEGATE", "DEACTIVATE", "WITHDRAW", "SHOW", "GO_BACK"]


class TestSpinnerMessages:
    @pytest.mark.parametrize(
        "command",
        [*AccountCommand, *StakeCommand, *VoteCommand, *ConfigCommand],
    )
    def test_every_command_has_a_message(self, command: object) -> None:
        assert spinner_message(command).endswith("…")  # type: ignore[arg-type]

    def test_same_label_different_groups(self) -> None:
        # "Withdraw" labels overlap across groups; messages must not.
        assert StakeCommand.WITHDRAW.spinner_msg != VoteCommand.WITHDRAW.spinner_msg


class TestOperationNames:
    def test_leaf_names(self) -> None:
        assert operation_name(AccountCommand.TRANSFER) == "transfer"
        assert operation_name(StakeCommand.WITHDRAW) == "stake_withdraw"
        assert operation_name(VoteCommand.WITHDRAW) == "vote_withdraw"
        assert operation_name(ConfigCommand.EDIT) == "config_edit"

    def test_go_back(self) -> None:
        assert operation_name(VoteCommand.GO_BACK) == "go_back"
