"""
Raw scan options

ScanOptions is the merged option set exactly as a caller supplied it: strings,
booleans and integers with nothing validated yet. build_scan_spec() turns it
into an immutable ScanSpec.
"""

from dataclasses import dataclass
from typing import Optional, Union

# Records streamed when neither --limit nor --unlimited is given
DEFAULT_LIMIT = 100

# Seconds between count-mode progress lines
PROGRESS_INTERVAL = 1.0


@dataclass
class ScanOptions:
    """Options for a single scan or count"""

    gt: Optional[str] = None
    gte: Optional[str] = None
    lt: Optional[str] = None
    lte: Optional[str] = None
    limit: Union[int, str, None] = None
    unlimited: bool = False
    reverse: bool = False
    exclude_keys: bool = False
    exclude_values: bool = False
    key_filter: Optional[str] = None
    value_filter: Optional[str] = None
    key_encoding: Optional[str] = None
    value_encoding: Optional[str] = None
    count: bool = False
