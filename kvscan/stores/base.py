"""
Base store interface

All stores implement this interface so the executor can open them, run one
range scan and close them without knowing the engine behind them.
"""

from collections.abc import Iterator
from typing import Any, Optional

from kvscan.core.spec import ScanSpec

# (key, value); a field the ScanSpec does not fetch may come back as None
RawEntry = tuple[Optional[bytes], Optional[bytes]]


class BaseStore:
    """
    Base class for all store collaborators

    Stores are responsible for:
    1. Opening an existing database read-only (open)
    2. Yielding raw entries in key order between the ScanSpec bounds, in the
       spec's direction, stopping after spec.limit entries (range_scan)
    3. Releasing the handle (close)

    Keys are always bytes so that bound checks work; values may be None when
    spec.include_values is False.
    """

    def __init__(self, path: str, **options: Any):
        """
        Args:
            path: Location of the database
            **options: Store-specific open options
        """
        self.path = str(path)
        self.options = options

    def open(self) -> None:
        """
        Acquire the store handle

        Raises:
            StoreOpenError: If the store is missing or cannot be opened
        """
        raise NotImplementedError("Subclasses must implement open()")

    def range_scan(self, spec: ScanSpec) -> Iterator[RawEntry]:
        """
        Yield raw entries matching the ScanSpec bounds, direction and limit

        This must be lazy: one entry is read per pull, and closing the
        iterator releases any cursor or transaction it holds.
        """
        raise NotImplementedError("Subclasses must implement range_scan()")

    def close(self) -> None:
        """
        Release the store handle

        Must be safe to call on a store whose open() failed or never ran.
        """
        raise NotImplementedError("Subclasses must implement close()")

    @property
    def is_open(self) -> bool:
        return False

    def describe(self) -> str:
        """Human readable description of the store"""
        return self.path

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.path!r})"
