"""
Record formatters for CLI output

Available formatters:
- JSONFormatter: One JSON object per record
- TextFormatter: "key : value", or just the key or value
"""

from kvscan.cli.formatters.base import BaseFormatter
from kvscan.cli.formatters.json import JSONFormatter
from kvscan.cli.formatters.text import TextFormatter

__all__ = ["BaseFormatter", "JSONFormatter", "TextFormatter", "get_formatter"]


def get_formatter(format_name: str) -> BaseFormatter:
    """
    Get formatter by name

    Args:
        format_name: Name of formatter (text, json)

    Returns:
        Formatter instance

    Raises:
        ValueError: If formatter not found
    """
    formatters = {
        "text": TextFormatter,
        "json": JSONFormatter,
    }

    if format_name not in formatters:
        available = ", ".join(formatters.keys())
        raise ValueError(f"Unknown format: {format_name}. Available formats: {available}")

    return formatters[format_name]()
