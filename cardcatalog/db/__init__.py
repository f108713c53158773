from cardcatalog.db.database import get_snapshot_store, init_db
from cardcatalog.db.snapshot_store import SnapshotStore, now_ms

__all__ = [
    "SnapshotStore",
    "get_snapshot_store",
    "init_db",
    "now_ms",
]
