"""
ScanSpec - the canonical description of one range scan

build_scan_spec() validates a ScanOptions bag once, at the boundary, and
produces an immutable ScanSpec that the executor and the store work from.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from kvscan.core.codecs import DEFAULT_ENCODING, get_codec
from kvscan.core.errors import InvalidOptions
from kvscan.core.options import DEFAULT_LIMIT, ScanOptions


class Direction(Enum):
    """Key order of a scan"""

    ASCENDING = "ascending"
    DESCENDING = "descending"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Bound:
    """One side of a key range, already encoded with the key encoding"""

    value: bytes
    inclusive: bool
    text: str

    def __repr__(self) -> str:
        op = "=" if self.inclusive else ""
        return f"Bound({op}{self.text!r})"


@dataclass(frozen=True)
class ScanSpec:
    """
    Immutable scan specification

    include_keys/include_values say what the store must fetch;
    output_keys/output_values say what ends up in emitted records. They only
    differ when a filter needs a field the caller excluded from output.

    limit is None for an unlimited scan.
    """

    lower_bound: Optional[Bound] = None
    upper_bound: Optional[Bound] = None
    direction: Direction = Direction.ASCENDING
    limit: Optional[int] = DEFAULT_LIMIT
    include_keys: bool = True
    include_values: bool = True
    output_keys: bool = True
    output_values: bool = True
    key_encoding: str = DEFAULT_ENCODING
    value_encoding: str = DEFAULT_ENCODING
    count_mode: bool = False

    @property
    def reverse(self) -> bool:
        return self.direction is Direction.DESCENDING

    @property
    def covers_all_records(self) -> bool:
        """True when no bound or limit can leave records out of the scan"""
        return self.lower_bound is None and self.upper_bound is None and self.limit is None

    def below_lower(self, key: bytes) -> bool:
        """Is key before the start of the range?"""
        bound = self.lower_bound
        if bound is None:
            return False
        return key < bound.value or (key == bound.value and not bound.inclusive)

    def above_upper(self, key: bytes) -> bool:
        """Is key past the end of the range?"""
        bound = self.upper_bound
        if bound is None:
            return False
        return key > bound.value or (key == bound.value and not bound.inclusive)

    def in_range(self, key: bytes) -> bool:
        return not self.below_lower(key) and not self.above_upper(key)

    def to_dict(self) -> dict[str, Any]:
        """Read-stream options as shown to the user"""
        options: dict[str, Any] = {}

        if self.lower_bound is not None:
            options["gte" if self.lower_bound.inclusive else "gt"] = self.lower_bound.text
        if self.upper_bound is not None:
            options["lte" if self.upper_bound.inclusive else "lt"] = self.upper_bound.text

        options["limit"] = self.limit if self.limit is not None else "unlimited"
        options["reverse"] = self.reverse
        options["keys"] = self.include_keys
        options["values"] = self.include_values
        options["key_encoding"] = self.key_encoding
        options["value_encoding"] = self.value_encoding
        return options


def _parse_limit(raw: Any) -> Optional[int]:
    """Parse a limit option; None means no explicit limit was given"""
    if raw is None or raw == "":
        return None

    if isinstance(raw, bool):
        raise InvalidOptions(f"limit must be a positive integer, got {raw!r}")

    try:
        limit = int(raw)
    except (TypeError, ValueError):
        raise InvalidOptions(f"limit must be a positive integer, got {raw!r}")

    if limit <= 0:
        raise InvalidOptions(f"limit must be a positive integer, got {limit}")

    return limit


def _encoding_name(raw: Optional[str], side: str) -> str:
    try:
        return get_codec(raw or DEFAULT_ENCODING).name
    except ValueError as e:
        raise InvalidOptions(f"Invalid {side} encoding: {e}") from e


def _make_bound(
    exclusive: Optional[str], inclusive: Optional[str], encoding: str, side: str
) -> Optional[Bound]:
    """
    Build one side of the range

    When both the exclusive and the inclusive option are given, the inclusive
    one wins.
    """
    if inclusive is not None:
        text, is_inclusive = inclusive, True
    elif exclusive is not None:
        text, is_inclusive = exclusive, False
    else:
        return None

    try:
        value = get_codec(encoding).encode(text)
    except ValueError as e:
        raise InvalidOptions(f"Invalid {side} bound {text!r} for {encoding} keys: {e}") from e

    return Bound(value=value, inclusive=is_inclusive, text=text)


def build_scan_spec(options: ScanOptions) -> ScanSpec:
    """
    Validate raw options and build a ScanSpec

    Rules:
    - gt/gte set the lower bound and lt/lte the upper bound; inclusive wins
      when both forms are given. Bounds are never reordered.
    - An explicit limit wins over unlimited. Without either, a scan is
      limited to DEFAULT_LIMIT records and a count is unlimited.
    - A count fetches keys only, plus values when a value filter is active.
    - A filter on an excluded field still fetches it, but it stays out of
      the emitted records.

    Raises:
        InvalidOptions: If any option is malformed or the combination is
            meaningless
    """
    key_encoding = _encoding_name(options.key_encoding, "key")
    value_encoding = _encoding_name(options.value_encoding, "value")

    lower = _make_bound(options.gt, options.gte, key_encoding, "lower")
    upper = _make_bound(options.lt, options.lte, key_encoding, "upper")

    limit = _parse_limit(options.limit)
    if limit is None and not options.unlimited and not options.count:
        limit = DEFAULT_LIMIT

    key_filtered = options.key_filter is not None
    value_filtered = options.value_filter is not None

    if options.count:
        output_keys, output_values = True, False
    else:
        output_keys = not options.exclude_keys
        output_values = not options.exclude_values
        if not output_keys and not output_values:
            raise InvalidOptions("Cannot exclude both keys and values from a scan")

    return ScanSpec(
        lower_bound=lower,
        upper_bound=upper,
        direction=Direction.DESCENDING if options.reverse else Direction.ASCENDING,
        limit=limit,
        include_keys=output_keys or key_filtered,
        include_values=output_values or value_filtered,
        output_keys=output_keys,
        output_values=output_values,
        key_encoding=key_encoding,
        value_encoding=value_encoding,
        count_mode=options.count,
    )
