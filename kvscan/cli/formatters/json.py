"""
JSON formatter for machine-readable output
"""

import json
import math
from typing import Any

from kvscan.cli.formatters.base import BaseFormatter


def _clean_value(val: Any) -> Any:
    """Replace NaN and infinity (valid in stored JSON, not in output) with null"""
    if isinstance(val, float):
        if math.isnan(val) or math.isinf(val):
            return None
    if isinstance(val, dict):
        return {k: _clean_value(v) for k, v in val.items()}
    if isinstance(val, list):
        return [_clean_value(v) for v in val]
    return val


class JSONFormatter(BaseFormatter):
    """Format each record as a JSON object holding only its present fields"""

    def format_record(self, record: dict[str, Any]) -> str:
        return json.dumps({k: _clean_value(v) for k, v in record.items()}, ensure_ascii=False)
