"""
Scan Executor - runs one ScanSpec against one store

Builds the operator chain, pulls records through it one at a time and owns the
store handle from open to close:

    Project (root)
      ↓
    RecordFilter
      ↓
    RangeScan (leaf)
      ↓
    Store

State machine:

    IDLE → OPENING → STREAMING → DRAINING (normal end) → CLOSED
                   ↘           ↘ ABORTING (error)      ↗
                     CLOSED (open failed)
"""

import time
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from kvscan.core.errors import CloseError, KvscanError, StoreOpenError, StreamError
from kvscan.core.filters import FilterSet
from kvscan.core.options import PROGRESS_INTERVAL
from kvscan.core.spec import ScanSpec
from kvscan.core.stats import ProgressSnapshot, ScanStats
from kvscan.operators.base import Operator
from kvscan.operators.filter import RecordFilter
from kvscan.operators.project import Project
from kvscan.operators.range_scan import RangeScan
from kvscan.stores.base import BaseStore

RecordCallback = Callable[[dict[str, Any]], None]
ProgressCallback = Callable[[ProgressSnapshot], None]
EndCallback = Callable[[ScanStats], None]
ErrorCallback = Callable[[KvscanError, ScanStats], None]
CloseErrorCallback = Callable[[CloseError], None]


class ScanState(Enum):
    IDLE = "idle"
    OPENING = "opening"
    STREAMING = "streaming"
    DRAINING = "draining"
    ABORTING = "aborting"
    CLOSED = "closed"


@dataclass
class ScanOutcome:
    """How a scan ended"""

    stats: ScanStats
    state: ScanState
    error: Optional[KvscanError] = None
    close_error: Optional[CloseError] = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.cancelled


_DONE = object()


class ScanExecutor:
    """
    Executes a single scan

    The executor is responsible for:
    1. Opening the store
    2. Pulling records through RangeScan → RecordFilter → Project
    3. Forwarding survivors, progress, completion and errors to callbacks
    4. Closing the store exactly once, however the scan ended

    Scan failures (StoreOpenError, StreamError) are delivered through
    on_error and the returned ScanOutcome rather than raised. Exceptions
    raised by the callbacks themselves propagate after the store is closed.
    """

    def __init__(
        self,
        store: BaseStore,
        spec: ScanSpec,
        filters: Optional[FilterSet] = None,
        progress_interval: float = PROGRESS_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.spec = spec
        self.filters = filters if filters is not None else FilterSet()
        self.progress_interval = progress_interval
        self.stats = ScanStats(clock=clock)
        self.state = ScanState.IDLE
        self._close_requested = False
        self._store_closed = False
        self._on_progress: Optional[ProgressCallback] = None
        self._callback_error: Optional[Exception] = None

    def build_plan(self) -> Operator:
        """Build the operator chain bottom-up"""
        plan: Operator = RangeScan(self.store, self.spec, self.stats)
        plan = RecordFilter(plan, self.filters, self.stats, checkpoint=self._checkpoint)
        plan = Project(plan, self.spec)
        return plan

    def close(self) -> None:
        """
        Request that the scan stop

        Safe to call from a signal handler: the scan notices after the
        current store entry, whether or not it passed the filters, and goes
        through the normal close path.
        """
        self._close_requested = True

    def run(
        self,
        on_record: RecordCallback,
        on_progress: Optional[ProgressCallback] = None,
        on_end: Optional[EndCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        on_close_error: Optional[CloseErrorCallback] = None,
    ) -> ScanOutcome:
        """
        Run the scan to completion, error or cancellation

        Args:
            on_record: Called with every surviving record, in store order
            on_progress: Called once progress_interval seconds have passed since
                the previous snapshot, checked after every store entry
            on_end: Called with the final stats after a normal end
            on_error: Called with the error and partial stats
            on_close_error: Called if closing the store fails

        Returns:
            ScanOutcome with the stats and any scan or close error
        """
        if self.state is not ScanState.IDLE:
            raise RuntimeError(f"Scan already ran (state: {self.state.value})")

        outcome = ScanOutcome(stats=self.stats, state=self.state)
        self.stats.start()

        try:
            self.state = ScanState.OPENING
            try:
                self._open()
            except StoreOpenError as e:
                outcome.error = e
                self.stats.finish()
                if on_error is not None:
                    on_error(e, self.stats)
                return outcome

            self.state = ScanState.STREAMING
            try:
                self._stream(on_record, on_progress)
            except StreamError as e:
                self.state = ScanState.ABORTING
                outcome.error = e
                self.stats.finish()
                if on_error is not None:
                    on_error(e, self.stats)
                return outcome

            self.stats.finish()
            if self._close_requested:
                outcome.cancelled = True
            else:
                self.state = ScanState.DRAINING
                if on_end is not None:
                    on_end(self.stats)
            return outcome
        finally:
            outcome.close_error = self._close_store()
            self.state = ScanState.CLOSED
            outcome.state = self.state
            if outcome.close_error is not None and on_close_error is not None:
                on_close_error(outcome.close_error)

    def _open(self) -> None:
        try:
            self.store.open()
        except StoreOpenError:
            raise
        except Exception as e:
            raise StoreOpenError(self.store.path, str(e)) from e

    def _stream(
        self, on_record: RecordCallback, on_progress: Optional[ProgressCallback]
    ) -> None:
        self._on_progress = on_progress
        records = iter(self.build_plan())
        try:
            while not self._close_requested:
                record = self._pull(records)
                if record is _DONE:
                    break

                on_record(record)
        finally:
            # Release the store cursor before the store itself is closed
            close = getattr(records, "close", None)
            if close is not None:
                close()

        if self._callback_error is not None:
            raise self._callback_error

    def _checkpoint(self) -> bool:
        """Runs after every store entry; True ends the scan"""
        if (
            self._on_progress is not None
            and self.stats.window_elapsed >= self.progress_interval
        ):
            try:
                self._on_progress(self.stats.take_snapshot())
            except Exception as e:
                # Raised from run() once the operators are closed, not as a StreamError
                self._callback_error = e
                return True
        return self._close_requested

    def _pull(self, records: Iterator[dict[str, Any]]) -> Any:
        try:
            return next(records)
        except StopIteration:
            return _DONE
        except StreamError:
            raise
        except Exception as e:
            raise StreamError(self.store.path, str(e)) from e

    def _close_store(self) -> Optional[CloseError]:
        """Close the store once; return the failure instead of raising it"""
        if self._store_closed:
            return None
        self._store_closed = True

        try:
            self.store.close()
        except Exception as e:
            return CloseError(self.store.path, str(e))
        return None
