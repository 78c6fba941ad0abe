"""
kvscan - Inspect ordered key-value stores from the terminal

This package turns bounds, limits and regex filters into a single range scan
over an existing store, streams the matching records, and reports either the
records themselves or a count with live progress.
"""

__version__ = "0.1.0"

# Main API
from kvscan.core.scan import count, run_scan, scan

__all__ = ["__version__", "count", "run_scan", "scan"]
