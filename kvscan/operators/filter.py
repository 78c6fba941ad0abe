"""
RecordFilter operator - applies key/value regex filters

Filtering always happens after the store's range and limit, never before.
"""

from collections.abc import Iterator
from typing import Any, Callable, Optional

from kvscan.core.filters import FilterSet
from kvscan.core.stats import ScanStats
from kvscan.operators.base import Operator


class RecordFilter(Operator):
    """
    RecordFilter operator - yields only records that match the FilterSet

    Pulls records from child, counts each one as filtered or emitted, and
    forwards the survivors. The checkpoint runs after every record, matched
    or not, and ends the iteration when it returns True.
    """

    def __init__(
        self,
        child: Operator,
        filters: FilterSet,
        stats: ScanStats,
        checkpoint: Optional[Callable[[], bool]] = None,
    ):
        """
        Initialize filter operator

        Args:
            child: Child operator to pull records from
            filters: Compiled filters (may be empty)
            stats: Counters for the running scan
            checkpoint: Called after each record; True stops the scan
        """
        super().__init__(child)
        self.filters = filters
        self.stats = stats
        self.checkpoint = checkpoint

    def __iter__(self) -> Iterator[dict[str, Any]]:
        for record in self.child:
            if self.filters.matches(record):
                self.stats.record_emitted()
                yield record
            else:
                self.stats.record_filtered()

            if self.checkpoint is not None and self.checkpoint():
                return

    def __repr__(self) -> str:
        return f"RecordFilter({self.filters!r})"
