"""
Status - query bundle status once, poll it, or dump in-flight status.
"""

from __future__ import annotations

from typing import Optional

import click

from ..client.bundles import BundleService
from ..client.poller import BUNDLE_POLICY, BundleTracker
from ..errors import JitoError
from ..utils import prettify_json
from . import (
    block_engine_options,
    engine_config,
    fail,
    open_transport,
    poll_options,
    policy_from,
    report_outcome,
)


@click.command("bundle-status")
@click.argument("bundle_ids", nargs=-1, required=True)
@click.option("--wait", is_flag=True, help="Poll a single bundle until finalized")
@block_engine_options
@poll_options(BUNDLE_POLICY.max_attempts, BUNDLE_POLICY.interval)
@click.pass_context
def bundle_status(
    ctx: click.Context,
    bundle_ids: tuple[str, ...],
    wait: bool,
    block_engine_url: str,
    uuid: Optional[str],
    timeout: float,
    max_attempts: int,
    interval: float,
) -> None:
    """Show the status of one or more bundles."""
    if wait and len(bundle_ids) != 1:
        raise click.UsageError("--wait tracks exactly one bundle ID")

    with open_transport(ctx, engine_config(block_engine_url, uuid, timeout)) as transport:
        service = BundleService(transport)

        if wait:
            tracker = BundleTracker(service, policy_from(max_attempts, interval))
            outcome = tracker.wait(bundle_ids[0])
            report_outcome(outcome)
            return

        try:
            response = service.get_bundle_statuses(list(bundle_ids))
        except JitoError as exc:
            fail(exc, "Failed to get bundle statuses: ", [list(bundle_ids)])

    click.echo(f"Context slot: {response.context_slot}")
    for bundle_id in bundle_ids:
        status = response.find(bundle_id)
        if status is None:
            click.echo(f"  {bundle_id}: no status available")
            continue
        line = f"  {bundle_id}: {status.raw_status} (slot {status.slot})"
        if status.err is not None:
            line += f" error: {status.err}"
        click.echo(line)


@click.command("inflight")
@click.argument("bundle_ids", nargs=-1, required=True)
@block_engine_options
@click.pass_context
def inflight(
    ctx: click.Context,
    bundle_ids: tuple[str, ...],
    block_engine_url: str,
    uuid: Optional[str],
    timeout: float,
) -> None:
    """Show raw in-flight status for recently submitted bundles."""
    params = [list(bundle_ids)]
    with open_transport(ctx, engine_config(block_engine_url, uuid, timeout)) as transport:
        try:
            result = BundleService(transport).get_inflight_bundle_statuses(params)
        except JitoError as exc:
            fail(exc, "Failed to get in-flight statuses: ", params)
    click.echo(prettify_json(result))
