"""
Location data models for Map Locations Service.
"""

import math
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class Coordinates(BaseModel):
    """Embedded XY coordinate pair."""

    model_config = ConfigDict(frozen=True)

    x: float = Field(..., description="X coordinate")
    y: float = Field(..., description="Y coordinate")

    @field_serializer("x", "y")
    def _whole_numbers_as_int(self, value: float) -> Union[int, float]:
        # 10.0 is written as 10; -0.0 keeps its sign, nan and inf stay floats
        if not value.is_integer() or (value == 0 and math.copysign(1.0, value) < 0):
            return value
        return int(value)


class MapLocation(BaseModel):
    """A single map location record.

    MongoDB keeps the identifier under ``_id``; it is served as ``id``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., alias="_id", description="Location ID")
    location: str = Field(..., description="Location label")
    xy: Coordinates

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_object_id(cls, value: Any) -> Any:
        # ObjectId and other BSON id types render as their string form
        if value is not None and not isinstance(value, (str, int, float, bool)):
            return str(value)
        return value

    def to_payload(self) -> dict:
        """Return the JSON-ready representation served by the API."""
        return self.model_dump(by_alias=False)
