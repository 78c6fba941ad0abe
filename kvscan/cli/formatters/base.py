"""
Base formatter interface for CLI output

Records are streamed, so formatters render one record at a time.
"""

from typing import Any


class BaseFormatter:
    """Base class for all output formatters"""

    def format_record(self, record: dict[str, Any]) -> str:
        """
        Format a single record as one line of output

        Args:
            record: Record with "key" and/or "value"

        Returns:
            Formatted line without a trailing newline
        """
        raise NotImplementedError("Formatters must implement format_record() method")
