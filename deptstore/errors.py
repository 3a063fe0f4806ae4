"""
Exceptions raised by the department store.
"""


class StoreError(Exception):
    """Base class for department store errors."""
    pass


class StoreInitError(StoreError):
    """The database file could not be opened or the schema could not be created."""
    pass


class StoreClosedError(StoreError):
    """An operation was attempted on a store that is not open."""
    pass
