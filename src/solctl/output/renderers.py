"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from solctl.domain.units import lamports_to_sol
from solctl.output.console import create_console, get_output, style_for_key

if TYPE_CHECKING:
    from rich.console import Console

    from solctl.services.result import ServiceResult

type _Renderer = Callable[..., None]

# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_banner(version: str, address: str, rpc_url: str) -> str:
    """Startup banner naming the session address and endpoint."""
    console = create_console()
    console.print(Text(f"solctl {version}", style="sol.banner"))
    key_style = "sol.key"
    console.print(Text("  address: ", style=key_style), Text(address, style="sol.address"), sep="")
    console.print(Text("  rpc:     ", style=key_style), Text(rpc_url), sep="")
    return get_output(console).rstrip("\n")


# ── Helpers ───────────────────────────────────────────────────────────


def _amount(data: dict[str, Any], key: str = "lamports") -> str:
    lamports = data[key]
    return f"{lamports_to_sol(lamports)} SOL ({lamports} lamports)"


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="sol.ok")
    op = Text(f"  {result.op}", style="sol.op")
    console.print(label, op, sep="", end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="sol.key")
    v = Text(str(value), style=style_for_key(key))
    console.print(k, v, sep="", end="")
    console.print()


def _details_table(title: str, rows: list[tuple[str, Any, str]]) -> Table:
    """Two-column Field/Value table; rows are ``(label, value, style)``."""
    table = Table(title=title, show_header=True, pad_edge=False, expand=False)
    table.add_column("Field", style="sol.key", no_wrap=True)
    table.add_column("Value")
    for label, value, style in rows:
        table.add_row(label, Text(str(value), style=style))
    return table


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations")
    if annotations:
        line += "  (" + ", ".join(f"{ak}={av}" for ak, av in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="sol.error")
    op = Text(f"  {result.op}", style="sol.op")
    dash = Text(" — ")
    console.print(label, op, dash, Text(msg), sep="")

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Submission renderers ──────────────────────────────────────────────

_SUBMISSION_KEYS = (
    "signature",
    "sender",
    "recipient",
    "address",
    "stake_account",
    "vote_account",
    "identity",
    "withdrawer",
    "authority",
    "new_voter",
    "commission",
    "epoch",
)


def _render_submission(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render any operation that confirmed a transaction."""
    _status_line(console, result)
    d = result.data
    for key in _SUBMISSION_KEYS:
        if key in d:
            _field(console, key, d[key])
    if "lamports" in d:
        _field(console, "amount", _amount(d))
    if verbose:
        _render_meta(console, result)


# ── Query renderers ───────────────────────────────────────────────────


def _render_fetch_account(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    d = result.data
    console.print(
        _details_table(
            "Account",
            [
                ("Address", d["address"], "sol.address"),
                ("Balance", _amount(d), "sol.amount"),
                ("Data length", f"{d['data_len']} bytes", ""),
                ("Owner", d["owner"], "sol.address"),
                ("Executable", "yes" if d["executable"] else "no", ""),
                ("Rent epoch", d["rent_epoch"], ""),
            ],
        )
    )
    if verbose:
        _render_meta(console, result)


def _render_balance(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    console.print(
        _details_table(
            "Balance",
            [
                ("Address", d["address"], "sol.address"),
                ("Balance", _amount(d), "sol.amount"),
            ],
        )
    )
    if verbose:
        _render_meta(console, result)


def _render_largest_accounts(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    d = result.data
    table = Table(
        title=f"Largest accounts ({d['filter']})",
        show_header=True,
        pad_edge=False,
        expand=False,
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Address", style="sol.address", no_wrap=True)
    table.add_column("Balance (SOL)", style="sol.amount", justify="right")
    for item in d["items"]:
        table.add_row(str(item["rank"]), item["address"], f"{item['sol']:,.9f}")
    console.print(table)
    if not d["items"]:
        console.print(Text("  No accounts returned.", style="dim"))
    if verbose:
        _render_meta(console, result)


def _render_nonce_account(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    d = result.data
    console.print(
        _details_table(
            "Nonce account",
            [
                ("Address", d["address"], "sol.address"),
                ("Balance", _amount(d), "sol.amount"),
                ("Owner", d["owner"], "sol.address"),
                ("Version", d["version"], ""),
                ("Nonce", d["blockhash"], ""),
                ("Authority", d["authority"], "sol.address"),
                ("Fee (lamports/signature)", d["lamports_per_signature"], ""),
            ],
        )
    )
    if verbose:
        _render_meta(console, result)


def _render_stake_show(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    rows: list[tuple[str, Any, str]] = [
        ("Address", d["address"], "sol.address"),
        ("Balance", _amount(d), "sol.amount"),
        ("State", d["state"], "sol.title"),
    ]
    if d.get("staker") is not None:
        rows += [
            ("Rent-exempt reserve", _amount(d, "rent_exempt_reserve"), ""),
            ("Staker", d["staker"], "sol.address"),
            ("Withdrawer", d["withdrawer"], "sol.address"),
            ("Lockup epoch", d["lockup_epoch"], ""),
            ("Lockup timestamp", d["lockup_unix_timestamp"], ""),
            ("Custodian", d["custodian"], "sol.address"),
        ]
    if d.get("voter") is not None:
        rows += [
            ("Delegated to", d["voter"], "sol.address"),
            ("Delegated stake", _amount(d, "delegated_stake"), "sol.amount"),
            ("Activation epoch", d["activation_epoch"], ""),
            ("Deactivation epoch", d["deactivation_epoch"], ""),
        ]
    console.print(_details_table("Stake account", rows))
    if verbose:
        _render_meta(console, result)


def _render_vote_show(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    root_slot = "~" if d["root_slot"] is None else d["root_slot"]
    console.print(
        _details_table(
            "Vote account",
            [
                ("Address", d["address"], "sol.address"),
                ("Balance", _amount(d), "sol.amount"),
                ("Validator identity", d["identity"], "sol.address"),
                ("Vote authority", d["vote_authority"], "sol.address"),
                ("Withdraw authority", d["withdraw_authority"], "sol.address"),
                ("Credits", d["credits"], ""),
                ("Commission", f"{d['commission']}%", ""),
                ("Root slot", root_slot, ""),
                (
                    "Recent timestamp",
                    f"{d['last_timestamp']} from slot {d['last_timestamp_slot']}",
                    "",
                ),
            ],
        )
    )
    if verbose:
        _render_meta(console, result)


# ── Config renderers ──────────────────────────────────────────────────


def _render_config(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    if d.get("changed"):
        _status_line(console, result)
        _field(console, "changed", d["changed"])
    console.print(
        _details_table(
            f"Config ({d['path']})",
            [
                ("rpc-url", d["rpc_url"], ""),
                ("commitment-level", d["commitment_level"], ""),
                ("keypair-path", d["keypair_path"], ""),
            ],
        )
    )
    if verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback: status line + key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, _Renderer] = {
    "fetch_account": _render_fetch_account,
    "balance": _render_balance,
    "transfer": _render_submission,
    "airdrop": _render_submission,
    "largest_accounts": _render_largest_accounts,
    "nonce_account": _render_nonce_account,
    "stake_create": _render_submission,
    "stake_delegate": _render_submission,
    "stake_deactivate": _render_submission,
    "stake_withdraw": _render_submission,
    "stake_show": _render_stake_show,
    "vote_create": _render_submission,
    "vote_authorize_voter": _render_submission,
    "vote_withdraw": _render_submission,
    "vote_show": _render_vote_show,
    "config_show": _render_config,
    "config_edit": _render_config,
}
