"""
Project operator - drops fields fetched only for filtering
"""

from collections.abc import Iterator
from typing import Any

from kvscan.core.spec import ScanSpec
from kvscan.operators.base import Operator


class Project(Operator):
    """
    Project operator - keeps only the output fields of a ScanSpec

    A value filter on a scan that excludes values still needs the values
    fetched; Project strips them again before the record is emitted.
    """

    def __init__(self, child: Operator, spec: ScanSpec):
        super().__init__(child)
        self.columns = [
            name
            for name, wanted in (("key", spec.output_keys), ("value", spec.output_values))
            if wanted
        ]
        self.passthrough = (spec.include_keys == spec.output_keys) and (
            spec.include_values == spec.output_values
        )

    def __iter__(self) -> Iterator[dict[str, Any]]:
        # Nothing was fetched beyond the output fields
        if self.passthrough:
            yield from self.child
            return

        for record in self.child:
            yield {col: record[col] for col in self.columns if col in record}

    def __repr__(self) -> str:
        col_str = ", ".join(self.columns)
        return f"Project({col_str})"
