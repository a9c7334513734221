"""
jitorpc CLI

Command-line interface for submitting Solana bundles and transactions to
a Jito block engine and tracking them to finality.

Commands:
  tip-accounts   - List the block engine's tip accounts
  send-bundle    - Submit a tip + payload bundle and track it
  send-txn       - Submit a single tipped transaction and track it
  bundle-status  - Query (or poll) bundle status
  inflight       - Show raw in-flight bundle status
  keygen         - Create a new keypair file
  whoami         - Show the signing wallet address
  info           - Show configuration
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

import click

from .client.bundles import BundleService
from .commands import block_engine_options, engine_config, fail, open_transport
from .config import DEFAULT_SOLANA_RPC_URL, JITORPC_ENV, ClientConfig, load_env
from .errors import JitoError, WalletError
from .utils import prettify_json
from .wallet import generate_keypair, load_keypair, save_keypair, save_private_key


# ============ Constants ============

VERSION = "0.1.0"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="jitorpc")
@click.option("-v", "--verbose", count=True, help="-v for progress logs, -vv for wire-level debug")
@click.pass_context
def cli(ctx: click.Context, verbose: int) -> None:
    """jitorpc - Jito block-engine bundle client."""
    ctx.ensure_object(dict)
    load_env()
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ============ Top-level Commands ============

from .commands.bundle import send_bundle
from .commands.status import bundle_status, inflight
from .commands.txn import send_txn

cli.add_command(send_bundle)
cli.add_command(send_txn)
cli.add_command(bundle_status)
cli.add_command(inflight)


@cli.command("tip-accounts")
@click.option("--random", "pick_random", is_flag=True, help="Print one randomly chosen account")
@block_engine_options
@click.pass_context
def tip_accounts(
    ctx: click.Context,
    pick_random: bool,
    block_engine_url: str,
    uuid: Optional[str],
    timeout: float,
) -> None:
    """List the tip accounts the block engine accepts."""
    with open_transport(ctx, engine_config(block_engine_url, uuid, timeout)) as transport:
        service = BundleService(transport)
        try:
            if pick_random:
                click.echo(service.get_random_tip_account().address)
                return
            accounts = service.get_tip_accounts()
        except JitoError as exc:
            fail(exc, "Failed to get tip accounts: ")

    click.echo("Tip Accounts:")
    click.echo(prettify_json(accounts))


# ============ Identity ============


@cli.command()
@click.option("--keypair", "keypair_path", type=click.Path(dir_okay=False, path_type=Path), default=None)
def whoami(keypair_path: Optional[Path]) -> None:
    """Show the signing wallet address."""
    try:
        keypair = load_keypair(keypair_path)
    except WalletError as exc:
        click.echo(f"No wallet found: {exc}")
        sys.exit(exc.exit_code)
    click.echo(f"Address: {keypair.pubkey()}")


@cli.command()
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--force", is_flag=True, help="Overwrite an existing file")
@click.option("--save-env", is_flag=True, help="Also store the key as PRIVATE_KEY in the env file")
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=JITORPC_ENV,
    show_default=True,
    help="Env file written by --save-env",
)
def keygen(path: Path, force: bool, save_env: bool, env_file: Path) -> None:
    """Create a new keypair file (solana-keygen format)."""
    if path.exists() and not force:
        click.secho(f"ERROR: {path} already exists (use --force to overwrite)", fg="red")
        sys.exit(1)
    keypair = generate_keypair()
    save_keypair(keypair, path)
    click.echo(f"Address: {keypair.pubkey()}")
    click.echo(f"Saved:   {path}")
    if save_env:
        saved = save_private_key(keypair, env_file)
        click.echo(f"Env:     {saved}")
        click.secho(f"IMPORTANT: Back up {saved}; loss is irreversible.", fg="yellow")


# ============ Info ============


@cli.command()
@block_engine_options
def info(block_engine_url: str, uuid: Optional[str], timeout: float) -> None:
    """Show configuration."""
    click.echo(f"jitorpc v{VERSION}")
    click.echo("")
    click.echo(f"  Block engine: {engine_config(block_engine_url, uuid, timeout).redacted()}")
    click.echo(f"  Timeout:      {timeout:g}s")
    rpc = ClientConfig(base_url=os.environ.get("SOLANA_RPC_URL", DEFAULT_SOLANA_RPC_URL))
    click.echo(f"  Solana RPC:   {rpc.base_url}")
    click.echo(f"  Env file:     {JITORPC_ENV}")
    try:
        keypair = load_keypair()
        click.echo(f"  Wallet:       {keypair.pubkey()}")
    except WalletError:
        click.echo("  Wallet:       not configured")


# ============ Entry Points ============


def main() -> None:
    """jitorpc CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
