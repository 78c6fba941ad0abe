"""
Tests for the scan()/count()/run_scan() API
"""

import json

import pytest

from kvscan import count, run_scan, scan
from kvscan.core.errors import CloseError, InvalidFilterExpression, InvalidOptions, StoreOpenError
from kvscan.core.options import ScanOptions


class TestScanAPI:
    """Test the scan() entry point against LMDB"""

    def test_scan_all(self, abcde_lmdb):
        records = scan(str(abcde_lmdb))

        assert [r["key"] for r in records] == ["a", "b", "c", "d", "e"]
        assert records[0] == {"key": "a", "value": "a"}

    def test_scan_bounds(self, abcde_lmdb):
        records = scan(str(abcde_lmdb), gte="b", lt="e", unlimited=True)

        assert [r["key"] for r in records] == ["b", "c", "d"]

    def test_scan_reverse_limit(self, abcde_lmdb):
        records = scan(str(abcde_lmdb), reverse=True, limit=2)

        assert [r["key"] for r in records] == ["e", "d"]

    def test_scan_default_limit(self, make_lmdb):
        path = make_lmdb({f"k{i:04d}": str(i) for i in range(250)})

        assert len(scan(str(path))) == 100
        assert len(scan(str(path), unlimited=True)) == 250

    def test_scan_json_values(self, make_lmdb):
        """Test values decoded as JSON and filtered on their JSON text"""
        path = make_lmdb({
            "u1": json.dumps({"name": "ann", "active": True}),
            "u2": json.dumps({"name": "bob", "active": False}),
        })

        records = scan(str(path), value_encoding="json", value_filter='"active": true')

        assert records == [{"key": "u1", "value": {"active": True, "name": "ann"}}]

    def test_scan_store_instance(self, mock_store):
        """Test any BaseStore can be scanned directly"""
        records = scan(mock_store(), exclude_values=True, gt="c")

        assert records == [{"key": "d"}, {"key": "e"}]

    def test_missing_store(self, tmp_path):
        with pytest.raises(StoreOpenError, match="no such file"):
            scan(str(tmp_path / "missing.lmdb"))

    def test_close_error_raised_after_success(self, mock_store):
        with pytest.raises(CloseError):
            scan(mock_store(close_error=OSError("boom")))


class TestCountAPI:
    """Test the count() entry point"""

    def test_count_all(self, abcde_lmdb):
        assert count(str(abcde_lmdb)) == 5

    def test_count_is_unlimited_by_default(self, make_lmdb):
        path = make_lmdb({f"k{i:04d}": "v" for i in range(150)})

        assert count(str(path)) == 150

    def test_count_with_filter(self, abcde_lmdb):
        assert count(str(abcde_lmdb), key_filter="^c$") == 1

    def test_count_with_limit(self, abcde_lmdb):
        assert count(str(abcde_lmdb), limit=3) == 3


class TestValidationBeforeOpen:
    """Test that bad input never reaches the store"""

    def test_invalid_filter_never_opens(self, mock_store):
        """Test a bad regex fails with no open or close call"""
        store = mock_store()

        with pytest.raises(InvalidFilterExpression):
            run_scan(store, ScanOptions(key_filter="[oops"))

        assert store.calls == []

    def test_invalid_options_never_opens(self, mock_store):
        store = mock_store()

        with pytest.raises(InvalidOptions):
            run_scan(store, ScanOptions(limit=-1))

        assert store.calls == []

    def test_run_scan_callbacks(self, mock_store):
        seen = []

        outcome = run_scan(mock_store(), ScanOptions(lte="b"), on_record=seen.append)

        assert outcome.ok
        assert seen == [{"key": "a", "value": "a"}, {"key": "b", "value": "b"}]
