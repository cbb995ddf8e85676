"""
Exceptions raised by Map Locations Service components.
"""

from typing import Any, Dict, Optional

from shared.errors import ServiceException


class StartupError(ServiceException):
    """Storage backend unreachable or misconfigured at launch."""

    status_code = 503

    def __init__(self, message: str = "Service failed to start", details: Optional[Dict[str, Any]] = None):
        super().__init__("STARTUP_ERROR", message, details)


class FetchError(ServiceException):
    """Fetching map locations from the storage backend failed or timed out."""

    status_code = 500
    code = "FETCH_ERROR"

    def __init__(self, message: str = "Failed to fetch map data from MongoDB", details: Optional[Dict[str, Any]] = None):
        super().__init__(type(self).code, message, details)


class DecodeError(FetchError):
    """The storage backend returned documents that are not valid map locations."""

    code = "DECODE_ERROR"

    def __init__(self, message: str = "Failed to decode map data", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class EncodeError(ServiceException):
    """The response payload could not be serialized."""

    status_code = 500

    def __init__(self, message: str = "Failed to encode map data as JSON", details: Optional[Dict[str, Any]] = None):
        super().__init__("ENCODE_ERROR", message, details)
