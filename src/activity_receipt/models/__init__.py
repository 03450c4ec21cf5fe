"""
Data Models
===========

Pydantic models for the activity receipt print server.

Models:
    Activity:
        - ActivityType: Known activity kinds (all GPS-capable)
        - ActivityRecord: The activity being printed
        - RoutePoint: {lat, lng} route point
        - Photo: Inline bytes or downloadable reference

    Request:
        - PrintRequest: Validated POST /print body
        - PrintResponse, StatusResponse, ErrorResponse: Response bodies
"""

from activity_receipt.models.activity import (
    ActivityRecord,
    ActivityType,
    Photo,
    RoutePoint,
    activity_supports_gps,
)
from activity_receipt.models.request import (
    ErrorResponse,
    PrintRequest,
    PrintResponse,
    StatusResponse,
)

__all__ = [
    # Activity
    "ActivityType",
    "ActivityRecord",
    "RoutePoint",
    "Photo",
    "activity_supports_gps",
    # Request
    "PrintRequest",
    "PrintResponse",
    "StatusResponse",
    "ErrorResponse",
]
