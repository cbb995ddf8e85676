"""
Shared fixtures for Map Locations Service tests.
"""

import asyncio
import sys
import os
from typing import List

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_maplocations.app.models import MapLocation
from service_maplocations.app.persistence.base import LocationStore


class FakeLocationStore(LocationStore):
    """In-memory storage backend.

    ``responses`` are consumed in order; the last one repeats. A response is
    either a list of locations or an exception to raise.
    """

    def __init__(self, responses=None, delay: float = 0.0):
        self.responses = list(responses) if responses is not None else [[]]
        self.delay = delay
        self.calls = 0
        self.started = False
        self.stopped = False
        self.healthy = True

    async def start(self):
        self.started = True

    async def stop(self):
        self.stopped = True

    async def health_check(self) -> bool:
        return self.healthy

    async def find_all(self, timeout: float) -> List[MapLocation]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, BaseException):
            raise response
        return list(response)


def make_location(location_id: str, label: str, x: float, y: float) -> MapLocation:
    return MapLocation(id=location_id, location=label, xy={"x": x, "y": y})


@pytest.fixture
def snapshot_a():
    """First record set returned by the backend."""
    return [
        make_location("1", "Town", 1.5, 2.5),
        make_location("2", "Harbor", -3.0, 4.25),
    ]


@pytest.fixture
def snapshot_b():
    """Second record set, disjoint from the first."""
    return [
        make_location("3", "Keep", 10.0, 20.0),
        make_location("4", "Mill", 0.0, -1.0),
        make_location("5", "Ford", 7.75, 8.5),
    ]


@pytest.fixture
def fake_store_factory():
    """Build FakeLocationStore instances."""
    return FakeLocationStore
