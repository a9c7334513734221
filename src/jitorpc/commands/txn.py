"""
Send Transaction - single tipped transaction.

One transaction carries the transfer and the tip. Sent normally it is
tracked by confirmation count on the ledger; with --bundle-only it is
submitted as a one-transaction bundle and tracked by bundle status.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from ..client.assembly import (
    DEFAULT_PRIORITY_FEE,
    DEFAULT_TIP_LAMPORTS,
    build_tipped_transaction,
    encode_transaction,
    parse_pubkey,
    transaction_signature,
    transfer_instruction,
)
from ..client.bundles import BundleService
from ..client.ledger import LedgerClient
from ..client.models import Bundle
from ..client.poller import (
    BUNDLE_POLICY,
    DEFAULT_CONFIRMATION_THRESHOLD,
    SIGNATURE_POLICY,
    BundleTracker,
    SignatureTracker,
)
from ..client.transactions import TransactionService
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


@click.command("send-txn")
@click.option("--receiver", required=True, help="Receiver address (base-58)")
@click.option("--amount", default=1_000, type=click.IntRange(min=1), show_default=True, help="Transfer amount in lamports")
@click.option("--tip", "tip_lamports", default=DEFAULT_TIP_LAMPORTS, type=click.IntRange(min=1), show_default=True, help="Tip amount in lamports")
@click.option("--priority-fee", default=DEFAULT_PRIORITY_FEE, type=click.IntRange(min=0), show_default=True, help="Compute unit price in micro-lamports")
@click.option("--bundle-only", is_flag=True, help="Submit as a one-transaction bundle")
@click.option("--threshold", default=DEFAULT_CONFIRMATION_THRESHOLD, type=click.IntRange(min=1), show_default=True, help="Confirmations required")
@click.option("--keypair", "keypair_path", type=click.Path(dir_okay=False, path_type=Path), default=None, help="solana-keygen JSON file")
@block_engine_options
@rpc_url_option
@poll_options(None, None)
@click.pass_context
def send_txn(
    ctx: click.Context,
    receiver: str,
    amount: int,
    tip_lamports: int,
    priority_fee: int,
    bundle_only: bool,
    threshold: int,
    keypair_path: Optional[Path],
    block_engine_url: str,
    uuid: Optional[str],
    timeout: float,
    rpc_url: str,
    max_attempts: Optional[int],
    interval: Optional[float],
) -> None:
    """Submit one tipped transaction and wait for it to land."""
    click.echo("=== Send Transaction ===")
    click.echo("")

    try:
        keypair = load_keypair(keypair_path)
        receiver_key = parse_pubkey(receiver, "receiver")
    except (JitoError, ValueError) as exc:
        fail(exc)

    # Bundle-only submissions are tracked by bundle status, at the bundle cadence
    policy = policy_from(max_attempts, interval, BUNDLE_POLICY if bundle_only else SIGNATURE_POLICY)

    with open_transport(ctx, engine_config(block_engine_url, uuid, timeout)) as engine, \
            open_transport(ctx, ClientConfig(base_url=rpc_url, timeout=timeout)) as ledger_transport:
        bundles = BundleService(engine)
        ledger = LedgerClient(ledger_transport)

        try:
            tip_account = bundles.get_random_tip_account()
            blockhash = ledger.get_latest_blockhash("finalized")
        except JitoError as exc:
            fail(exc, "Failed to prepare transaction: ")

        tx = build_tipped_transaction(
            keypair,
            blockhash,
            tip_account.address,
            [transfer_instruction(keypair.pubkey(), receiver_key, amount)],
            tip_lamports=tip_lamports,
            priority_fee=priority_fee,
            bundle_only=bundle_only,
        )
        encoded = [encode_transaction(tx)]
        click.echo(f"  Signature:   {transaction_signature(tx)}")
        click.echo(f"  Tip account: {tip_account.address}")
        click.echo(f"  Bundle only: {bundle_only}")
        click.echo("")

        if bundle_only:
            try:
                bundle_id = bundles.send_bundle(Bundle(tuple(encoded)))
            except JitoError as exc:
                fail(exc, "Failed to send bundle: ", [encoded])
            click.secho(f"Bundle sent. Bundle ID: {bundle_id}", fg="green")
            outcome = BundleTracker(bundles, policy).wait(bundle_id)
            kind = "Bundle"
        else:
            try:
                signature = TransactionService(engine).send_transaction(encoded)
            except JitoError as exc:
                fail(exc, "Failed to send transaction: ", encoded)
            click.secho(f"Transaction sent. Signature: {signature}", fg="green")
            outcome = SignatureTracker(ledger, policy, threshold=threshold).wait(signature)
            kind = "Transaction"

    report_outcome(outcome, kind)
