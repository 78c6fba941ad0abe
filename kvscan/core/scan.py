"""
Main scan API - user-facing entry points for kvscan

Example:
    >>> from kvscan import scan, count
    >>> for record in scan("data.lmdb", gte="b", lt="e", unlimited=True):
    ...     print(record)
    >>> count("data.lmdb", key_filter="^user:")
"""

from typing import Any, Optional, Union

from kvscan.core.executor import ScanExecutor, ScanOutcome
from kvscan.core.filters import FilterSet, compile_filters
from kvscan.core.options import ScanOptions
from kvscan.core.spec import ScanSpec, build_scan_spec
from kvscan.stores.base import BaseStore
from kvscan.stores.lmdb_store import LMDBStore

StoreSource = Union[str, BaseStore]


def prepare(options: ScanOptions) -> tuple[ScanSpec, FilterSet]:
    """
    Validate options and compile filters

    Runs before any store access, so bad options or a bad regex never open
    the store.

    Raises:
        InvalidOptions: If the options are malformed
        InvalidFilterExpression: If a filter does not compile
    """
    filters = compile_filters(options.key_filter, options.value_filter)
    spec = build_scan_spec(options)
    return spec, filters


def open_store(source: StoreSource, db_name: Optional[str] = None) -> BaseStore:
    """Return the store for a path, or the store itself if one was given"""
    if isinstance(source, BaseStore):
        return source
    return LMDBStore(str(source), db_name=db_name)


def run_scan(
    source: StoreSource,
    options: ScanOptions,
    *,
    db_name: Optional[str] = None,
    **callbacks: Any,
) -> ScanOutcome:
    """
    Prepare and run one scan, delivering results through callbacks

    Args:
        source: Store path or BaseStore instance
        options: Raw scan options
        db_name: Named sub-database (LMDB paths only)
        **callbacks: on_record, on_progress, on_end, on_error, on_close_error
            as accepted by ScanExecutor.run()

    Returns:
        ScanOutcome of the scan
    """
    spec, filters = prepare(options)
    executor = ScanExecutor(open_store(source, db_name), spec, filters)
    on_record = callbacks.pop("on_record", None) or (lambda record: None)
    return executor.run(on_record, **callbacks)


def _raise_for_outcome(outcome: ScanOutcome) -> None:
    if outcome.error is not None:
        raise outcome.error
    if outcome.close_error is not None:
        raise outcome.close_error


def scan(source: StoreSource, db_name: Optional[str] = None, **options: Any) -> list[dict[str, Any]]:
    """
    Scan a store and return the matching records

    Args:
        source: Store path or BaseStore instance
        db_name: Named sub-database (LMDB paths only)
        **options: Any ScanOptions field (gt, gte, lt, lte, limit, ...)

    Returns:
        Records in store order

    Raises:
        KvscanError: The scan error, or the close error if the scan succeeded
    """
    records: list[dict[str, Any]] = []
    outcome = run_scan(
        source, ScanOptions(**options), db_name=db_name, on_record=records.append
    )
    _raise_for_outcome(outcome)
    return records


def count(source: StoreSource, db_name: Optional[str] = None, **options: Any) -> int:
    """
    Count the records a scan would emit

    Unlimited unless a limit is given.
    """
    options["count"] = True
    outcome = run_scan(source, ScanOptions(**options), db_name=db_name)
    _raise_for_outcome(outcome)
    return outcome.stats.total_emitted
