"""
Storage backend contract for Map Locations Service.
"""

from abc import ABC, abstractmethod
from typing import List

from ..models import MapLocation


class LocationStore(ABC):
    """Authoritative source of map locations.

    ``find_all`` must be idempotent and free of side effects. It may be
    slow or fail transiently; callers bound it with a timeout.
    """

    async def start(self):
        """Connect to the backend. Raise StartupError if it is unreachable."""

    async def stop(self):
        """Release backend resources."""

    async def health_check(self) -> bool:
        return True

    @abstractmethod
    async def find_all(self, timeout: float) -> List[MapLocation]:
        """Return every map location in backend order.

        Raises FetchError on connectivity failures and DecodeError when a
        document is not a valid map location.
        """
