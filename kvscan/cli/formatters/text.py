"""
Plain text formatter
"""

from typing import Any

from kvscan.cli.formatters.base import BaseFormatter
from kvscan.core.codecs import to_text

SEPARATOR = " : "


class TextFormatter(BaseFormatter):
    """
    Format records as plain text

    - key and value: "key : value"
    - key only: "key"
    - value only: "value"
    """

    def format_record(self, record: dict[str, Any]) -> str:
        has_key = "key" in record
        has_value = "value" in record

        if has_key and has_value:
            return f"{self._text(record['key'])}{SEPARATOR}{self._text(record['value'])}"
        if has_key:
            return self._text(record["key"])
        if has_value:
            return self._text(record["value"])
        return ""

    @staticmethod
    def _text(val: Any) -> str:
        if val is None:
            return ""
        return to_text(val)
