"""Root CLI command for solctl: global flags, first-run setup, and the loop."""

from __future__ import annotations

import asyncio
from pathlib import Path

import click
from pydantic import ValidationError

from solctl import __version__
from solctl.commands._context import AppContext
from solctl.commands.prompts import Prompter
from solctl.commands.router import CommandRouter
from solctl.config.discovery import (
    config_file_path,
    describe_validation_error,
    find_config,
    save_config,
)
from solctl.config.models import DEVNET_RPC, LedgerConfig
from solctl.config.settings import SolSettings
from solctl.domain.errors import SolctlError
from solctl.domain.types import CommitmentLevel
from solctl.output.renderers import render_banner


def _first_run(path: Path, prompter: Prompter) -> LedgerConfig:
    """Collect a configuration for a missing config file and write it."""
    click.echo(f"No config file found at {path}.")
    if prompter.confirm("Write the default configuration?", default=True):
        config = LedgerConfig()
    else:
        values: dict[str, object] = {
            "rpc-url": prompter.text("Enter RPC URL", default=DEVNET_RPC),
            "commitment-level": prompter.select("Commitment level", list(CommitmentLevel)),
        }
        keypair_path = prompter.optional_path("Enter keypair path")
        if keypair_path is not None:
            values["keypair-path"] = keypair_path
        try:
            config = LedgerConfig.model_validate(values)
        except ValidationError as exc:
            raise click.ClickException(describe_validation_error(exc)) from exc
    save_config(config, path)
    click.echo(f"Config written to {path}")
    return config


async def _run_session(app: AppContext) -> None:
    try:
        await CommandRouter(app).run()
    finally:
        await app.aclose()


@click.command()
@click.version_option(version=__version__, prog_name="solctl")
@click.option(
    "-c",
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Override config file path.",
)
@click.option("--json", "json_output", is_flag=True, help="Render results as JSON.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging, error detail, and timings.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
def cli(config_path: str | None, json_output: bool, verbose: bool, log_json: bool) -> None:
    """Interactive wallet, stake, and vote account operator for Solana clusters."""
    prompter = Prompter()
    path = config_file_path(config_path)
    try:
        if find_config(path) is None:
            _first_run(path, prompter)
        settings = SolSettings.from_cli(
            config_path=str(path),
            json_output=json_output,
            verbose=verbose,
            log_json=log_json,
        )
        app = AppContext(settings, prompter=prompter)
        session = app.session
    except SolctlError as exc:
        raise click.ClickException(exc.message) from exc

    click.echo(render_banner(__version__, str(session.pubkey), settings.ledger.rpc_url))
    asyncio.run(_run_session(app))
    click.echo("Goodbye!")
