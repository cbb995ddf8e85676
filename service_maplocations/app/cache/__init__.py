"""
Cache package for Map Locations Service.

Holds the in-memory snapshot of map locations and the coordinator that
fills it on demand and refreshes it periodically.
"""

from .snapshot_store import SnapshotStore
from .refresher import CacheRefresher

__all__ = ["SnapshotStore", "CacheRefresher"]
