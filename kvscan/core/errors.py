"""
Exceptions raised while building or running a scan

Every failure is surfaced to the caller; nothing in kvscan retries.
"""


class KvscanError(Exception):
    """Base class for all kvscan errors"""

    pass


class InvalidOptions(KvscanError):
    """Raised when scan options cannot be turned into a ScanSpec"""

    pass


class InvalidFilterExpression(KvscanError):
    """Raised when a key or value filter does not compile"""

    def __init__(self, field: str, pattern: str, reason: str):
        self.field = field
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid {field} filter {pattern!r}: {reason}")


class StoreError(KvscanError):
    """Base class for failures that involve the store at a given path"""

    action = "using"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Error {self.action} database '{path}': {reason}")


class StoreOpenError(StoreError):
    """Raised when the store cannot be opened (missing path, corrupt files)"""

    action = "opening"


class StreamError(StoreError):
    """Raised when reading or decoding fails in the middle of a scan"""

    action = "streaming from"


class CloseError(StoreError):
    """Raised when the store handle fails to close"""

    action = "closing"
