"""
RangeScan operator - reads raw entries from the store

This is the leaf operator (has no child). Bounds, direction and limit are
enforced by the store itself; RangeScan only counts and decodes.
"""

from collections.abc import Iterator
from typing import Any

from kvscan.core.codecs import Codec, get_codec
from kvscan.core.spec import ScanSpec
from kvscan.core.stats import ScanStats
from kvscan.operators.base import Operator
from kvscan.stores.base import BaseStore


def _decode(codec: Codec, data: bytes, field: str) -> Any:
    try:
        return codec.decode(data)
    except ValueError as e:
        raise ValueError(f"Cannot decode {field} {data[:32]!r} as {codec.name}: {e}") from e


class RangeScan(Operator):
    """
    RangeScan operator - wrapper around a store's range-scan primitive

    Every entry the store returns counts as seen, whether or not it later
    survives filtering.
    """

    def __init__(self, store: BaseStore, spec: ScanSpec, stats: ScanStats):
        super().__init__(child=None)
        self.store = store
        self.spec = spec
        self.stats = stats
        self.key_codec = get_codec(spec.key_encoding)
        self.value_codec = get_codec(spec.value_encoding)

    def __iter__(self) -> Iterator[dict[str, Any]]:
        spec = self.spec

        for key, value in self.store.range_scan(spec):
            self.stats.record_seen()

            record: dict[str, Any] = {}
            if spec.include_keys:
                record["key"] = _decode(self.key_codec, key, "key")
            if spec.include_values:
                record["value"] = _decode(self.value_codec, value, "value")

            yield record

    def __repr__(self) -> str:
        return f"RangeScan({self.store.__class__.__name__}, {self.spec.to_dict()})"
