from .base import LocalStore, RemoteStore, Snapshot, StorageError
from .local import LocalSnapshotStore
from .remote import NullRemoteStore, RemoteSnapshotStore

__all__ = [
    "LocalStore",
    "RemoteStore",
    "Snapshot",
    "StorageError",
    "LocalSnapshotStore",
    "NullRemoteStore",
    "RemoteSnapshotStore",
]
