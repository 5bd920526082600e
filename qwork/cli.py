"""CLI entry point for qwork, the interactive Postfix queue front-end.

Commands:
    qwork           interactive session (same as `qwork run`)
    qwork run       pick a queued message and hold/release/requeue/delete/read it
    qwork list      print the queue snapshot without prompting
    qwork status    message counts per sub-queue
    qwork tools     show which queue tools will be run
"""

import logging
import sys
from collections import Counter

import click

from qwork.config import (
    POSTCAT_COMMAND,
    POSTQUEUE_COMMAND,
    POSTSUPER_COMMAND,
    REASON_INDENT,
    REASON_WRAP_WIDTH,
)
from qwork.errors import ErrorKind, QworkError

logger = logging.getLogger("qwork")


def _client():
    from qwork.integrations.postfix import PostfixClient, resolve_tools

    return PostfixClient(resolve_tools(POSTQUEUE_COMMAND, POSTSUPER_COMMAND, POSTCAT_COMMAND))


def _fail(exc: QworkError) -> None:
    """Report a fatal error and exit. An empty queue is a clean exit."""
    if exc.kind == ErrorKind.EMPTY_INPUT:
        click.echo("No messages in the queue.")
        sys.exit(0)
    logger.error("Fatal %s: %s", exc.kind.value, exc)
    if exc.output:
        click.echo(exc.output, err=True)
    click.echo(f"Error: {exc}", err=True)
    sys.exit(1)


@click.group(invoke_without_command=True)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Inspect and manage the Postfix mail queue."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


# ------------------------------------------------------------------
# qwork run
# ------------------------------------------------------------------


@cli.command()
def run() -> None:
    """Interactively pick queued messages and act on them."""
    from qwork.orchestrator.session import Session

    try:
        session = Session(
            _client(),
            wrap_width=REASON_WRAP_WIDTH,
            reason_indent=REASON_INDENT,
        )
        session.run()
    except QworkError as exc:
        _fail(exc)


# ------------------------------------------------------------------
# qwork list
# ------------------------------------------------------------------


@cli.command(name="list")
@click.option("--json", "as_json", is_flag=True, help="Print one JSON record per message.")
def list_messages(as_json: bool) -> None:
    """Print the current queue snapshot."""
    from qwork.queue.menu import render_message_rows
    from qwork.queue.snapshot import encode_snapshot, fetch_snapshot

    try:
        messages = fetch_snapshot(_client())
    except QworkError as exc:
        _fail(exc)

    if as_json:
        if messages:
            click.echo(encode_snapshot(messages))
        return
    if not messages:
        click.echo("No messages in the queue.")
        return
    for row in render_message_rows(messages):
        click.echo(row)


# ------------------------------------------------------------------
# qwork status
# ------------------------------------------------------------------


@cli.command()
def status() -> None:
    """Quick overview of the queue by sub-queue."""
    from qwork.queue.snapshot import fetch_snapshot
    from qwork.schemas.queue import QueueName

    try:
        messages = fetch_snapshot(_client())
    except QworkError as exc:
        _fail(exc)

    counts = Counter(m.queue_name for m in messages)
    known = sum(counts[q] for q in QueueName)

    click.echo("Queue Status")
    click.echo(f"  Active:     {counts[QueueName.ACTIVE]}")
    click.echo(f"  Deferred:   {counts[QueueName.DEFERRED]}")
    click.echo(f"  Hold:       {counts[QueueName.HOLD]}")
    click.echo(f"  Other:      {len(messages) - known}")
    click.echo(f"  Total:      {len(messages)}")


# ------------------------------------------------------------------
# qwork tools
# ------------------------------------------------------------------


@cli.command()
def tools() -> None:
    """Show the resolved Postfix queue tools."""
    from qwork.integrations.postfix import resolve_tools

    try:
        paths = resolve_tools(POSTQUEUE_COMMAND, POSTSUPER_COMMAND, POSTCAT_COMMAND)
    except QworkError as exc:
        _fail(exc)

    click.echo(f"postqueue: {paths.postqueue}")
    click.echo(f"postsuper: {paths.postsuper}")
    click.echo(f"postcat:   {paths.postcat}")
