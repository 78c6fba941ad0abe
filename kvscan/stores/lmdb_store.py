"""
LMDB store

Opens an existing LMDB environment read-only and walks a cursor over it.
LMDB keeps keys in lexicographic byte order, which is the order bounds are
compared in.
"""

import os
from collections.abc import Iterator
from typing import Any, Optional

import lmdb

from kvscan.core.errors import StoreOpenError
from kvscan.core.spec import ScanSpec
from kvscan.stores.base import BaseStore, RawEntry


class LMDBStore(BaseStore):
    """
    Read-only LMDB environment

    Options:
        db_name: Named sub-database to scan instead of the main one
    """

    def __init__(self, path: str, db_name: Optional[str] = None, **options: Any):
        super().__init__(path, **options)
        self.db_name = db_name
        self._env: Optional[lmdb.Environment] = None
        self._db: Any = None

    @property
    def is_open(self) -> bool:
        return self._env is not None

    def open(self) -> None:
        if not os.path.exists(self.path):
            raise StoreOpenError(self.path, "no such file or directory")

        try:
            env = lmdb.open(
                self.path,
                subdir=os.path.isdir(self.path),
                readonly=True,
                lock=False,
                max_dbs=1 if self.db_name else 0,
            )
        except lmdb.Error as e:
            raise StoreOpenError(self.path, str(e)) from e

        self._env = env

        if self.db_name:
            try:
                self._db = env.open_db(self.db_name.encode("utf-8"), create=False)
            except lmdb.Error as e:
                raise StoreOpenError(
                    self.path, f"cannot open database {self.db_name!r}: {e}"
                ) from e

    def range_scan(self, spec: ScanSpec) -> Iterator[RawEntry]:
        if self._env is None:
            raise RuntimeError(f"Store {self.path} is not open")

        txn = self._env.begin(db=self._db, buffers=False)
        try:
            cursor = txn.cursor()
            if spec.reverse:
                entries = self._descending(cursor, spec)
            else:
                entries = self._ascending(cursor, spec)

            count = 0
            for key, value in entries:
                if spec.limit is not None and count >= spec.limit:
                    break
                yield key, value
                count += 1
        finally:
            txn.abort()

    def _ascending(self, cursor: lmdb.Cursor, spec: ScanSpec) -> Iterator[RawEntry]:
        lower = spec.lower_bound
        if lower is not None:
            if not cursor.set_range(lower.value):
                return
            if not lower.inclusive and cursor.key() == lower.value:
                if not cursor.next():
                    return
        elif not cursor.first():
            return

        for key, value in cursor.iternext(keys=True, values=True):
            if spec.above_upper(key):
                return
            yield key, value if spec.include_values else None

    def _descending(self, cursor: lmdb.Cursor, spec: ScanSpec) -> Iterator[RawEntry]:
        upper = spec.upper_bound
        if upper is not None:
            # set_range lands on the first key >= upper, or fails past the end
            if not cursor.set_range(upper.value):
                if not cursor.last():
                    return
            elif spec.above_upper(cursor.key()):
                if not cursor.prev():
                    return
        elif not cursor.last():
            return

        for key, value in cursor.iterprev(keys=True, values=True):
            if spec.below_lower(key):
                return
            yield key, value if spec.include_values else None

    def close(self) -> None:
        env, self._env = self._env, None
        self._db = None
        if env is not None:
            env.close()

    def describe(self) -> str:
        if self.db_name:
            return f"{self.path} (database {self.db_name})"
        return self.path
