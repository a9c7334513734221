"""
Commands - CLI command implementations for jitorpc.

Each module holds top-level CLI commands:
- bundle: Build, tip and submit a bundle, then track it to finality
- txn:    Submit a single tipped transaction (optionally bundle-only)
- status: One-shot or polled bundle status, in-flight status

Shared helpers for endpoint options and outcome reporting live here.
"""

from __future__ import annotations

import sys
from typing import Any, Optional

import click

from ..client.poller import BUNDLE_POLICY, PollOutcome, PollPolicy, PollState, transaction_links
from ..client.rpc import Transport
from ..config import DEFAULT_BLOCK_ENGINE_URL, DEFAULT_SOLANA_RPC_URL, DEFAULT_TIMEOUT, ClientConfig
from ..errors import JitoError
from ..utils import summarize_params


def block_engine_options(func):
    """Attach --block-engine-url / --uuid / --timeout options."""
    func = click.option(
        "--timeout",
        envvar="JITO_TIMEOUT",
        default=DEFAULT_TIMEOUT,
        type=click.FloatRange(min=0, min_open=True),
        show_default=True,
        help="HTTP timeout in seconds for each RPC call",
    )(func)
    func = click.option(
        "--uuid",
        envvar="JITO_UUID",
        default=None,
        help="Access token (sent as ?uuid= and x-jito-auth)",
    )(func)
    func = click.option(
        "--block-engine-url",
        envvar="JITO_BLOCK_ENGINE_URL",
        default=DEFAULT_BLOCK_ENGINE_URL,
        show_default=True,
        help="Block engine JSON-RPC base URL",
    )(func)
    return func


def rpc_url_option(func):
    return click.option(
        "--rpc-url",
        envvar="SOLANA_RPC_URL",
        default=DEFAULT_SOLANA_RPC_URL,
        show_default=True,
        help="Solana RPC URL (blockhash and signature status)",
    )(func)


def poll_options(default_attempts: Optional[int], default_interval: Optional[float]):
    """
    Attach --max-attempts / --interval options.

    Pass None for both defaults when the command picks its policy at run
    time; ``policy_from`` then fills unset values from that policy.
    """
    fixed = default_attempts is not None
    suffix = "" if fixed else " (default depends on the tracking path)"

    def decorator(func):
        func = click.option(
            "--interval",
            default=default_interval,
            type=click.FloatRange(min=0),
            show_default=fixed,
            help=f"Seconds between status polls{suffix}",
        )(func)
        func = click.option(
            "--max-attempts",
            default=default_attempts,
            type=click.IntRange(min=1),
            show_default=fixed,
            help=f"Maximum status polls{suffix}",
        )(func)
        return func
    return decorator


def open_transport(ctx: click.Context, config: ClientConfig) -> Transport:
    """Create a Transport, honouring an httpx transport placed on the context."""
    obj = ctx.find_root().obj or {}
    return Transport(config, transport=obj.get("http_transport"))


def engine_config(
    block_engine_url: str,
    uuid: Optional[str],
    timeout: float = DEFAULT_TIMEOUT,
) -> ClientConfig:
    return ClientConfig(base_url=block_engine_url, uuid=uuid or None, timeout=timeout)


def policy_from(
    max_attempts: Optional[int],
    interval: Optional[float],
    default: PollPolicy = BUNDLE_POLICY,
) -> PollPolicy:
    """Build a PollPolicy, taking unset values from ``default``."""
    return PollPolicy(
        max_attempts=default.max_attempts if max_attempts is None else max_attempts,
        interval=default.interval if interval is None else interval,
    )


def fail(exc: Exception, context: str = "", params: Any = None) -> None:
    """Print an error with its RPC context and exit with the error's code."""
    click.secho(f"ERROR: {context}{exc}", fg="red")
    method = getattr(exc, "method", None)
    if method:
        click.echo(f"  Method: {method}")
    code = getattr(exc, "code", None)
    if code is not None:
        click.echo(f"  Code: {code}")
    if params is not None:
        click.echo(f"  Params: {summarize_params(params)}")
    sys.exit(exc.exit_code if isinstance(exc, JitoError) else 1)


def report_outcome(outcome: PollOutcome[Any], kind: str = "Bundle") -> None:
    """Print a poll outcome. Exits 1 only when the ledger reported a failure."""
    click.echo("")
    if outcome.state is PollState.SUCCEEDED:
        click.secho(f"SUCCESS: {outcome.detail}", fg="green")
        links = transaction_links(outcome)
        if links:
            click.echo("  Transaction URLs:")
            for link in links:
                click.echo(f"  - {link}")
        return

    if outcome.state is PollState.FAILED:
        click.secho(f"FAILED: {outcome.detail}", fg="red")
        sys.exit(1)

    if outcome.state is PollState.UNEXPECTED:
        click.secho(f"WARNING: {outcome.detail}", fg="yellow")
        return

    if outcome.state is PollState.CANCELLED:
        click.secho(f"{kind} tracking cancelled after {outcome.attempts} attempts.", fg="yellow")
        return

    click.secho(
        f"{kind} status unknown after {outcome.attempts} attempts. "
        "It may still land; check it manually.",
        fg="yellow",
    )
    if outcome.last_error is not None:
        click.echo(f"  Last error: {outcome.last_error}")
