"""
Pull-based operators for the scan pipeline

RangeScan (leaf) -> RecordFilter -> Project (root)
"""

from kvscan.operators.base import Operator
from kvscan.operators.filter import RecordFilter
from kvscan.operators.project import Project
from kvscan.operators.range_scan import RangeScan

__all__ = ["Operator", "RangeScan", "RecordFilter", "Project"]
