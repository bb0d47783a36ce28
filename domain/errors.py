class StorageError(Exception):
    """Base class for failures inside a storage backend."""


class StorageUnavailable(StorageError):
    """No live connection to the storage engine could be obtained."""
