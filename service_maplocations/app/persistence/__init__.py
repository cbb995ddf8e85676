"""
Persistence package for Map Locations Service.

Storage backends return the complete set of map locations in one call;
there is no incremental fetch.
"""

from .base import LocationStore
from .mongo import MongoLocationStore

__all__ = ["LocationStore", "MongoLocationStore"]
