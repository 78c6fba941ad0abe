"""
Pytest configuration and shared fixtures
"""

import lmdb
import pytest

from kvscan.stores.base import BaseStore


def _to_bytes(val):
    return val if isinstance(val, bytes) else str(val).encode("utf-8")


class MockStore(BaseStore):
    """
    In-memory store for testing the executor and operators

    Applies bounds, direction and limit the way a real store does and
    records every call made against it.
    """

    def __init__(self, data, path="mock://store", open_error=None, close_error=None,
                 fail_after=None):
        super().__init__(path)
        self.data = sorted((_to_bytes(k), _to_bytes(v)) for k, v in data.items())
        self.open_error = open_error
        self.close_error = close_error
        self.fail_after = fail_after
        self.calls = []
        self.pulled = 0

    def open(self):
        self.calls.append("open")
        if self.open_error is not None:
            raise self.open_error

    def range_scan(self, spec):
        self.calls.append("range_scan")
        entries = [(k, v) for k, v in self.data if spec.in_range(k)]
        if spec.reverse:
            entries.reverse()
        if spec.limit is not None:
            entries = entries[: spec.limit]

        for i, (key, value) in enumerate(entries):
            if self.fail_after is not None and i >= self.fail_after:
                raise OSError("disk read failed")
            self.pulled += 1
            yield key, value if spec.include_values else None

    def close(self):
        self.calls.append("close")
        if self.close_error is not None:
            raise self.close_error


@pytest.fixture
def abcde():
    """Keys a..e, each mapped to itself"""
    return {k: k for k in "abcde"}


@pytest.fixture
def mock_store(abcde):
    """Factory for MockStore instances (defaults to the a..e data)"""

    def _make(data=None, **kwargs):
        return MockStore(abcde if data is None else data, **kwargs)

    return _make


@pytest.fixture
def make_lmdb(tmp_path):
    """Factory that writes records into a fresh LMDB environment"""

    def _make(records, name="data.lmdb", db_name=None):
        path = tmp_path / name
        env = lmdb.open(str(path), map_size=10 * 1024 * 1024, max_dbs=1 if db_name else 0)
        db = env.open_db(db_name.encode("utf-8")) if db_name else None
        with env.begin(write=True, db=db) as txn:
            for key, value in records.items():
                txn.put(_to_bytes(key), _to_bytes(value))
        env.close()
        return path

    return _make


@pytest.fixture
def abcde_lmdb(make_lmdb, abcde):
    """LMDB environment holding keys a..e, each mapped to itself"""
    return make_lmdb(abcde)
