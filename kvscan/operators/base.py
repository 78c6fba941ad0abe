"""
Base operator class for pull-based scan execution

Each operator pulls records from its child on demand, so a slow consumer
throttles the store read and nothing is buffered ahead of it.
"""

from collections.abc import Iterator
from typing import Any, Optional


class Operator:
    """
    Base class for all scan operators

    Operators form a chain where:
    - The leaf (RangeScan) reads from the store
    - Internal operators (RecordFilter, Project) transform records
    - The root is pulled by the executor, one record at a time

    Operators are generators, so memory use is O(pipeline depth).
    """

    def __init__(self, child: Optional["Operator"] = None):
        """
        Initialize operator

        Args:
            child: Child operator to pull records from (None for the leaf)
        """
        self.child = child

    def __iter__(self) -> Iterator[dict[str, Any]]:
        """
        Execute operator and yield records

        Yields:
            Records as dictionaries with "key" and/or "value"
        """
        raise NotImplementedError(f"{self.__class__.__name__} must implement __iter__()")

    def __repr__(self) -> str:
        """String representation for debugging"""
        return f"{self.__class__.__name__}()"

    def explain(self) -> str:
        """Render the operator chain, root first"""
        lines = []
        node: Optional[Operator] = self
        depth = 0
        while node is not None:
            lines.append("  " * depth + repr(node))
            node = node.child
            depth += 1
        return "\n".join(lines)
