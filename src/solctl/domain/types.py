"""Command hierarchy and ledger enums.

The interactive menu is a fixed two-level hierarchy: a group is chosen from
the main menu, then a leaf operation from the group menu.  Every group has a
``GO_BACK`` leaf.  Enum values double as the menu labels.
"""

from __future__ import annotations

from enum import StrEnum


class CommitmentLevel(StrEnum):
    """Durability requested when reading or confirming state (least to most)."""

    PROCESSED = "processed"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"

    @property
    def rank(self) -> int:
        return _COMMITMENT_ORDER.index(self)


_COMMITMENT_ORDER = [
    CommitmentLevel.PROCESSED,
    CommitmentLevel.CONFIRMED,
    CommitmentLevel.FINALIZED,
]


class LargestAccountsFilter(StrEnum):
    """Filter for the cluster's largest-accounts query."""

    ALL = "All"
    CIRCULATING = "Circulating"
    NON_CIRCULATING = "Non-Circulating"


class CommandGroup(StrEnum):
    """Main menu entries."""

    ACCOUNT = "Account"
    STAKE = "Stake"
    VOTE = "Vote"
    CONFIG = "Config"
    EXIT = "Exit"


class AccountCommand(StrEnum):
    """Wallet and account inspection operations."""

    FETCH_ACCOUNT = "Fetch account"
    BALANCE = "Check balance"
    TRANSFER = "Transfer SOL"
    AIRDROP = "Request airdrop"
    LARGEST_ACCOUNTS = "View largest accounts"
    NONCE_ACCOUNT = "View nonce account"
    GO_BACK = "Go back"

    @property
    def spinner_msg(self) -> str:
        return spinner_message(self)


class StakeCommand(StrEnum):
    """Stake account lifecycle operations."""

    CREATE = "Create"
    DELEGATE = "Delegate"
    DEACTIVATE = "Deactivate"
    WITHDRAW = "Withdraw"
    SHOW = "Show"
    GO_BACK = "Go back"

    @property
    def spinner_msg(self) -> str:
        return spinner_message(self)


class VoteCommand(StrEnum):
    """Validator vote account operations."""

    CREATE_VOTE_ACCOUNT = "Create vote account"
    AUTHORIZE_VOTER = "Authorize voter"
    WITHDRAW = "Withdraw from vote account"
    SHOW_VOTE_ACCOUNT = "Show vote account"
    GO_BACK = "Go back"

    @property
    def spinner_msg(self) -> str:
        return spinner_message(self)


class ConfigCommand(StrEnum):
    """Configuration file operations."""

    SHOW = "View config"
    EDIT = "Edit config"
    GO_BACK = "Go back"

    @property
    def spinner_msg(self) -> str:
        return spinner_message(self)


type Command = AccountCommand | StakeCommand | VoteCommand | ConfigCommand

GROUP_COMMANDS: dict[CommandGroup, list[Command]] = {
    CommandGroup.ACCOUNT: list(AccountCommand),
    CommandGroup.STAKE: list(StakeCommand),
    CommandGroup.VOTE: list(VoteCommand),
    CommandGroup.CONFIG: list(ConfigCommand),
    CommandGroup.EXIT: [],
}

# Keyed by member name: the enums share values such as "Go back", and
# StrEnum members of different classes hash and compare equal.
_SPINNER_MESSAGES: dict[str, dict[str, str]] = {
    "AccountCommand": {
        "FETCH_ACCOUNT": "Fetching account…",
        "BALANCE": "Checking SOL balance…",
        "TRANSFER": "Sending SOL…",
        "AIRDROP": "Requesting SOL on devnet/testnet…",
        "LARGEST_ACCOUNTS": "Fetching largest accounts on the cluster…",
        "NONCE_ACCOUNT": "Inspecting durable nonce account…",
        "GO_BACK": "Going back…",
    },
    "StakeCommand": {
        "CREATE": "Creating new stake account…",
        "DELEGATE": "Delegating stake to validator…",
        "DEACTIVATE": "Deactivating stake (cooldown starting)…",
        "WITHDRAW": "Withdrawing SOL from deactivated stake…",
        "SHOW": "Fetching stake account details…",
        "GO_BACK": "Going back…",
    },
    "VoteCommand": {
        "CREATE_VOTE_ACCOUNT": "Creating vote account…",
        "AUTHORIZE_VOTER": "Authorizing voter…",
        "WITHDRAW": "Withdrawing SOL from vote account…",
        "SHOW_VOTE_ACCOUNT": "Fetching vote account details…",
        "GO_BACK": "Going back…",
    },
    "ConfigCommand": {
        "SHOW": "Loading configuration…",
        "EDIT": "Saving configuration…",
        "GO_BACK": "Going back…",
    },
}


def spinner_message(command: Command) -> str:
    """Progress message shown while *command* runs."""
    return _SPINNER_MESSAGES[type(command).__name__][command.name]


_OPERATION_NAMES: dict[str, dict[str, str]] = {
    "AccountCommand": {
        "FETCH_ACCOUNT": "fetch_account",
        "BALANCE": "balance",
        "TRANSFER": "transfer",
        "AIRDROP": "airdrop",
        "LARGEST_ACCOUNTS": "largest_accounts",
        "NONCE_ACCOUNT": "nonce_account",
    },
    "StakeCommand": {
        "CREATE": "stake_create",
        "DELEGATE": "stake_delegate",
        "DEACTIVATE": "stake_deactivate",
        "WITHDRAW": "stake_withdraw",
        "SHOW": "stake_show",
    },
    "VoteCommand": {
        "CREATE_VOTE_ACCOUNT": "vote_create",
        "AUTHORIZE_VOTER": "vote_authorize_voter",
        "WITHDRAW": "vote_withdraw",
        "SHOW_VOTE_ACCOUNT": "vote_show",
    },
    "ConfigCommand": {
        "SHOW": "config_show",
        "EDIT": "config_edit",
    },
}


def operation_name(command: Command) -> str:
    """The ``ServiceResult.op`` reported for *command* (``go_back`` for Go back)."""
    return _OPERATION_NAMES[type(command).__name__].get(command.name, "go_back")
