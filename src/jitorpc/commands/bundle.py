"""
Send Bundle - tip + payload bundle submission.

Builds two signed transactions (the tip transfer first, then a transfer
with a memo), submits them as one atomic bundle and polls the bundle
until it is finalized.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from ..client.assembly import (
    DEFAULT_TIP_LAMPORTS,
    build_tip_bundle,
    memo_instruction,
    parse_pubkey,
    transfer_instruction,
)
from ..client.bundles import BundleService
from ..client.ledger import LedgerClient
from ..client.poller import BUNDLE_POLICY, BundleTracker
from ..config import ClientConfig
from ..errors import JitoError
from ..wallet import load_keypair
from . import (
    block_engine_options,
    engine_config,
    fail,
    open_transport,
    poll_options,
    policy_from,
    report_outcome,
    rpc_url_option,
)


@click.command("send-bundle")
@click.option("--receiver", required=True, help="Receiver address (base-58)")
@click.option("--amount", default=1_000, type=click.IntRange(min=1), show_default=True, help="Transfer amount in lamports")
@click.option("--tip", "tip_lamports", default=DEFAULT_TIP_LAMPORTS, type=click.IntRange(min=1), show_default=True, help="Tip amount in lamports")
@click.option("--memo", default="Hello, Jito!", show_default=True, help="Memo attached to the payload transaction")
@click.option("--keypair", "keypair_path", type=click.Path(dir_okay=False, path_type=Path), default=None, help="solana-keygen JSON file")
@click.option("--no-wait", is_flag=True, help="Submit and exit without polling")
@block_engine_options
@rpc_url_option
@poll_options(BUNDLE_POLICY.max_attempts, BUNDLE_POLICY.interval)
@click.pass_context
def send_bundle(
    ctx: click.Context,
    receiver: str,
    amount: int,
    tip_lamports: int,
    memo: str,
    keypair_path: Optional[Path],
    no_wait: bool,
    block_engine_url: str,
    uuid: Optional[str],
    timeout: float,
    rpc_url: str,
    max_attempts: int,
    interval: float,
) -> None:
    """
    Submit a tipped two-transaction bundle.

    The bundle executes atomically: the tip transfer and the payload
    either both land or neither does.
    """
    click.echo("=== Send Bundle ===")
    click.echo("")

    try:
        keypair = load_keypair(keypair_path)
        receiver_key = parse_pubkey(receiver, "receiver")
    except (JitoError, ValueError) as exc:
        fail(exc)

    with open_transport(ctx, engine_config(block_engine_url, uuid, timeout)) as engine, \
            open_transport(ctx, ClientConfig(base_url=rpc_url, timeout=timeout)) as ledger_transport:
        service = BundleService(engine)
        ledger = LedgerClient(ledger_transport)

        try:
            blockhash = ledger.get_latest_blockhash("finalized")
            tip_account = service.get_random_tip_account()
        except JitoError as exc:
            fail(exc, "Failed to prepare bundle: ")

        click.echo(f"  Payer:       {keypair.pubkey()}")
        click.echo(f"  Receiver:    {receiver_key}")
        click.echo(f"  Tip account: {tip_account.address}")
        click.echo(f"  Tip:         {tip_lamports} lamports")

        try:
            bundle, _ = build_tip_bundle(
                keypair,
                blockhash,
                tip_account.address,
                [
                    transfer_instruction(keypair.pubkey(), receiver_key, amount),
                    memo_instruction(memo),
                ],
                tip_lamports=tip_lamports,
            )
        except ValueError as exc:
            fail(exc, "Failed to build bundle: ")

        try:
            bundle_id = service.send_bundle(bundle)
        except JitoError as exc:
            fail(exc, "Failed to send bundle: ", [list(bundle.transactions)])

        click.secho(f"Bundle sent. Bundle ID: {bundle_id}", fg="green")
        if no_wait:
            return

        click.echo(f"Polling status (up to {max_attempts} attempts, every {interval:g}s)...")
        tracker = BundleTracker(service, policy_from(max_attempts, interval))
        outcome = tracker.wait(bundle_id)

    report_outcome(outcome)
