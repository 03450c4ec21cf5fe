"""
Print Request Schema
====================

Pydantic models for the HTTP contract of the print server.

Request (POST /print):
    {
        "activity": {...},          # required, see ActivityRecord
        "route": [{"lat", "lng"}],  # optional
        "photos": [{...}]           # optional
    }

Only a missing or malformed activity rejects the request. Route and photo
entries are kept raw here and validated later, per artifact, so that one
bad entry only costs its own section of the receipt.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError

from activity_receipt.errors import RequestValidationError
from activity_receipt.models.activity import ActivityRecord


class PrintRequest(BaseModel):
    """
    Validated print job.

    Attributes:
        activity: The activity to print
        route: Raw route points (validated by the route renderer)
        photos: Raw photo entries (validated one by one)
    """

    activity: ActivityRecord
    route: Optional[List[Any]] = None
    photos: Optional[List[Any]] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "PrintRequest":
        """
        Parse a decoded JSON body.

        Raises:
            RequestValidationError: If the body is not an object, the
                activity is missing, or the activity is malformed
        """
        if not isinstance(payload, dict):
            raise RequestValidationError("Request body must be a JSON object")

        activity = payload.get("activity")
        if not activity:
            raise RequestValidationError("Activity data is required")
        if not isinstance(activity, dict):
            raise RequestValidationError("Activity must be a JSON object")

        try:
            record = ActivityRecord.from_payload(activity)
        except ValidationError as e:
            raise RequestValidationError(f"Invalid activity: {e.errors()[0]['msg']}")

        route = payload.get("route")
        photos = payload.get("photos")
        return cls(
            activity=record,
            route=route if isinstance(route, list) else None,
            photos=photos if isinstance(photos, list) else None,
        )


class PrintResponse(BaseModel):
    """Successful print response."""

    success: bool = Field(default=True)
    message: str = Field(default="Print job sent")


class StatusResponse(BaseModel):
    """Liveness response."""

    status: str = Field(default="ready")
    port: int


class ErrorResponse(BaseModel):
    """Error response for 4xx/5xx results."""

    error: str
