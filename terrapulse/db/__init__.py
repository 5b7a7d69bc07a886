from terrapulse.db.database import get_session, init_db
from terrapulse.db.operations import (
    get_latest_snapshot,
    load_latest_snapshot,
    prune_snapshots,
    save_snapshot,
    snapshot_row_to_model,
)

__all__ = [
    "get_latest_snapshot",
    "get_session",
    "init_db",
    "load_latest_snapshot",
    "prune_snapshots",
    "save_snapshot",
    "snapshot_row_to_model",
]
