"""
Store collaborators

Stores open an existing database and expose a single range-scan primitive
that honours bounds, direction and limit.
"""

from kvscan.stores.base import BaseStore
from kvscan.stores.lmdb_store import LMDBStore

__all__ = ["BaseStore", "LMDBStore"]
