"""
In-memory snapshot of map locations.
"""

import asyncio
from datetime import datetime, timezone
from typing import Iterable, Optional, Tuple

from ..models import MapLocation


class SnapshotStore:
    """Holds the current snapshot and the lock guarding it.

    ``get`` and ``replace`` must only be called while holding ``lock``.
    The snapshot is an immutable tuple, so a value returned by ``get``
    stays consistent after the lock is released.
    """

    def __init__(self):
        self.lock = asyncio.Lock()
        self._records: Tuple[MapLocation, ...] = ()
        self._generation = 0
        self._updated_at: Optional[datetime] = None

    def get(self) -> Tuple[MapLocation, ...]:
        """Return the current snapshot (possibly empty)."""
        return self._records

    def replace(self, records: Iterable[MapLocation]) -> None:
        """Swap in a new snapshot, discarding the old one."""
        self._records = tuple(records)
        self._generation += 1
        self._updated_at = datetime.now(timezone.utc)

    def is_empty(self) -> bool:
        return not self._records

    @property
    def size(self) -> int:
        return len(self._records)

    @property
    def generation(self) -> int:
        """Number of successful replacements since process start."""
        return self._generation

    @property
    def updated_at(self) -> Optional[datetime]:
        return self._updated_at
