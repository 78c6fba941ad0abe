"""
kvscan CLI - Inspect ordered key-value stores

Usage:
    kvscan scan <db-path> [options]   # Stream records
    kvscan count <db-path> [options]  # Count records with live progress
"""

import signal
import sys
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

import click
from rich.console import Console

from kvscan import __version__
from kvscan.cli.formatters import get_formatter
from kvscan.cli.reporter import CountReporter, Reporter, StreamReporter
from kvscan.core.codecs import available_encodings
from kvscan.core.errors import InvalidFilterExpression, InvalidOptions
from kvscan.core.executor import ScanExecutor
from kvscan.core.options import DEFAULT_LIMIT, ScanOptions
from kvscan.core.scan import open_store, prepare

EXIT_FAILURE = 1
EXIT_CANCELLED = 130


def range_options(func):
    """Options shared by scan and count"""
    decorators = [
        click.argument("db_path", type=str),
        click.option("--gt", type=str, default=None, help="Exclusive lower bound for the stream."),
        click.option("--gte", type=str, default=None, help="Inclusive lower bound for the stream."),
        click.option("--lt", type=str, default=None, help="Exclusive upper bound for the stream."),
        click.option("--lte", type=str, default=None, help="Inclusive upper bound for the stream."),
        click.option(
            "--limit",
            "-l",
            type=int,
            default=None,
            help=f"Maximum number of records to read (scan default {DEFAULT_LIMIT}).",
        ),
        click.option(
            "--unlimited",
            "-L",
            is_flag=True,
            help="Read all records (an explicit --limit still wins).",
        ),
        click.option(
            "--reverse",
            "-r",
            is_flag=True,
            help="Stream in descending instead of ascending order.",
        ),
        click.option(
            "--key-filter",
            "-k",
            type=str,
            default=None,
            help="Only keep records whose key matches this regex.",
        ),
        click.option(
            "--value-filter",
            "-v",
            type=str,
            default=None,
            help="Only keep records whose value matches this regex.",
        ),
        click.option(
            "--key-encoding",
            "-e",
            type=click.Choice(available_encodings(), case_sensitive=False),
            default=None,
            help="Encoding for keys (default: utf8).",
        ),
        click.option(
            "--value-encoding",
            "-E",
            type=click.Choice(available_encodings(), case_sensitive=False),
            default=None,
            help="Encoding for values (default: utf8).",
        ),
        click.option(
            "--db",
            "db_name",
            type=str,
            default=None,
            help="Named sub-database to scan.",
        ),
        click.option(
            "--quiet",
            "-q",
            is_flag=True,
            help="Only output records (or suppress progress for count).",
        ),
        click.option("--no-color", is_flag=True, help="Disable colored output"),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


@contextmanager
def cancel_on_signals(executor: ScanExecutor) -> Iterator[None]:
    """Turn SIGINT/SIGTERM into a close request for the running scan"""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def handler(signum, frame):
        executor.close()

    previous = {
        signum: signal.signal(signum, handler) for signum in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        yield
    finally:
        for signum, old in previous.items():
            signal.signal(signum, old)


def _execute(
    ctx: click.Context,
    db_path: str,
    db_name: Optional[str],
    options: ScanOptions,
    fmt: str,
    quiet: bool,
    no_color: bool,
) -> None:
    debug = ctx.obj.get("debug", False) if ctx.obj else False
    console = Console(stderr=True, highlight=False, no_color=no_color, soft_wrap=True)
    status = Reporter(click.echo, console, quiet)

    try:
        spec, filters = prepare(options)
    except (InvalidOptions, InvalidFilterExpression) as e:
        status.error(str(e))
        if debug:
            raise
        sys.exit(EXIT_FAILURE)

    if options.count:
        reporter: Reporter = CountReporter(click.echo, console, spec, filters, quiet)
    else:
        reporter = StreamReporter(click.echo, console, get_formatter(fmt), quiet)

    store = open_store(db_path, db_name)
    executor = ScanExecutor(store, spec, filters)
    reporter.start(store.describe(), spec, filters)

    with cancel_on_signals(executor):
        outcome = executor.run(
            on_record=reporter.on_record,
            on_progress=reporter.on_progress if options.count else None,
            on_end=reporter.on_end,
            on_error=reporter.on_error,
            on_close_error=reporter.on_close_error,
        )

    if outcome.close_error is None:
        reporter.on_closed()

    if outcome.error is not None:
        if debug:
            raise outcome.error
        sys.exit(EXIT_FAILURE)

    if outcome.cancelled:
        reporter.on_cancelled(outcome.stats)
        sys.exit(EXIT_CANCELLED)


@click.group()
@click.version_option(version=__version__, prog_name="kvscan")
@click.option("--debug", is_flag=True, hidden=True, help="Re-raise errors with a traceback")
@click.pass_context
def cli(ctx: click.Context, debug: bool):
    """
    kvscan - Inspect ordered key-value stores

    Streams or counts the records of an existing LMDB store between optional
    bounds, with optional regex filters on keys and values.
    """
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@range_options
@click.option(
    "--exclude-keys",
    "-x",
    is_flag=True,
    help="Exclude keys from the output.",
)
@click.option(
    "--exclude-values",
    "-X",
    is_flag=True,
    help="Exclude values from the output.",
)
@click.option("--json", "-j", "as_json", is_flag=True, help="Format records as JSON.")
@click.option(
    "--format",
    "-f",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default="text",
    help="Output format (default: text)",
)
@click.pass_context
def scan(
    ctx: click.Context,
    db_path: str,
    gt: Optional[str],
    gte: Optional[str],
    lt: Optional[str],
    lte: Optional[str],
    limit: Optional[int],
    unlimited: bool,
    reverse: bool,
    key_filter: Optional[str],
    value_filter: Optional[str],
    key_encoding: Optional[str],
    value_encoding: Optional[str],
    db_name: Optional[str],
    quiet: bool,
    no_color: bool,
    exclude_keys: bool,
    exclude_values: bool,
    as_json: bool,
    format: str,
):
    """
    Stream records from a store

    Reads at most 100 records unless --limit or --unlimited is given.

    Examples:

        \b
        # First 100 records
        $ kvscan scan ./data.lmdb

        \b
        # Keys from b (inclusive) to e (exclusive), as JSON
        $ kvscan scan ./data.lmdb --gte b --lt e -L -j

        \b
        # Last two records whose value mentions "error"
        $ kvscan scan ./data.lmdb -r -l 2 -v error
    """
    fmt = "json" if as_json else format.lower()
    del format

    options = ScanOptions(
        gt=gt,
        gte=gte,
        lt=lt,
        lte=lte,
        limit=limit,
        unlimited=unlimited,
        reverse=reverse,
        exclude_keys=exclude_keys,
        exclude_values=exclude_values,
        key_filter=key_filter,
        value_filter=value_filter,
        key_encoding=key_encoding,
        value_encoding=value_encoding,
    )
    _execute(ctx, db_path, db_name, options, fmt, quiet, no_color)


@cli.command()
@range_options
@click.pass_context
def count(
    ctx: click.Context,
    db_path: str,
    gt: Optional[str],
    gte: Optional[str],
    lt: Optional[str],
    lte: Optional[str],
    limit: Optional[int],
    unlimited: bool,
    reverse: bool,
    key_filter: Optional[str],
    value_filter: Optional[str],
    key_encoding: Optional[str],
    value_encoding: Optional[str],
    db_name: Optional[str],
    quiet: bool,
    no_color: bool,
):
    """
    Count records in a store

    Bounds apply. Counts everything unless --limit is given.

    Examples:

        \b
        # Count every record, with progress every second
        $ kvscan count ./data.lmdb

        \b
        # Count user keys only
        $ kvscan count ./data.lmdb -k '^user:' -q
    """
    options = ScanOptions(
        gt=gt,
        gte=gte,
        lt=lt,
        lte=lte,
        limit=limit,
        unlimited=unlimited,
        reverse=reverse,
        key_filter=key_filter,
        value_filter=value_filter,
        key_encoding=key_encoding,
        value_encoding=value_encoding,
        count=True,
    )
    _execute(ctx, db_path, db_name, options, "text", quiet, no_color)


if __name__ == "__main__":
    cli()
