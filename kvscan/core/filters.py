"""
Filter engine - regex filters on keys and values

Patterns are compiled once, before the store is touched, and then applied
read-only to every fetched record.
"""

import re
from dataclasses import dataclass
from typing import Any, Optional

from kvscan.core.codecs import to_text
from kvscan.core.errors import InvalidFilterExpression


@dataclass(frozen=True)
class FilterSet:
    """Zero or one key matcher and zero or one value matcher"""

    key_pattern: Optional[re.Pattern] = None
    value_pattern: Optional[re.Pattern] = None

    @property
    def has_key_filter(self) -> bool:
        return self.key_pattern is not None

    @property
    def has_value_filter(self) -> bool:
        return self.value_pattern is not None

    @property
    def active(self) -> bool:
        return self.has_key_filter or self.has_value_filter

    def matches(self, record: dict[str, Any]) -> bool:
        """
        Check a record against every compiled matcher

        A matcher only applies when its field is present on the record.
        Matching is a regex search against the field's textual form.
        """
        if self.key_pattern is not None and "key" in record:
            if not self.key_pattern.search(to_text(record["key"])):
                return False

        if self.value_pattern is not None and "value" in record:
            if not self.value_pattern.search(to_text(record["value"])):
                return False

        return True

    def describe(self) -> dict[str, str]:
        described = {}
        if self.key_pattern is not None:
            described["key"] = self.key_pattern.pattern
        if self.value_pattern is not None:
            described["value"] = self.value_pattern.pattern
        return described

    def __repr__(self) -> str:
        parts = [f"{field}~/{pattern}/" for field, pattern in self.describe().items()]
        return f"FilterSet({', '.join(parts)})"


def _compile(field: str, pattern: Optional[str]) -> Optional[re.Pattern]:
    if pattern is None:
        return None

    try:
        return re.compile(pattern)
    except re.error as e:
        raise InvalidFilterExpression(field, pattern, str(e)) from e


def compile_filters(
    key_pattern: Optional[str] = None, value_pattern: Optional[str] = None
) -> FilterSet:
    """
    Compile key/value filter expressions

    Args:
        key_pattern: Regex applied to keys (None for no key filter)
        value_pattern: Regex applied to values (None for no value filter)

    Returns:
        FilterSet ready to apply

    Raises:
        InvalidFilterExpression: Naming the field whose pattern failed
    """
    return FilterSet(
        key_pattern=_compile("key", key_pattern),
        value_pattern=_compile("value", value_pattern),
    )
