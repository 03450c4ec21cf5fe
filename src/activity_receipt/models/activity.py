"""
Activity Models
===============

This module defines the activity data consumed by the receipt pipeline.

The web UI passes activity JSON through unchanged, so field names follow
the fitness API it comes from (``moving_time``, ``total_elevation_gain``,
``average_heartrate``...). Unknown fields are ignored.

Input Contract (from the web UI):
    {
        "activity": {
            "id": 123456789,
            "name": "Morning Run",
            "type": "Run",
            "distance": 8046.7,
            "moving_time": 2400,
            "elapsed_time": 2520,
            "total_elevation_gain": 42.0,
            "average_heartrate": 151.4,
            "start_date": "2026-10-19T11:05:00Z",
            "location_city": "Brooklyn",
            "location_state": "New York"
        },
        "route": [{"lat": 40.67, "lng": -73.97}, ...],
        "photos": [{"unique_id": "abc", "urls": {"600": "https://..."}}]
    }
"""

import base64
import binascii
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ActivityType(str, Enum):
    """
    Known activity kinds.

    Every kind listed here records a GPS track. Activities of other kinds
    (e.g. WeightTraining, Yoga) still print, with a route placeholder.
    """

    RUN = "Run"
    RIDE = "Ride"
    WALK = "Walk"
    HIKE = "Hike"
    SWIM = "Swim"
    VIRTUAL_RIDE = "VirtualRide"
    VIRTUAL_RUN = "VirtualRun"
    TRAIL_RUN = "TrailRun"
    EBIKE_RIDE = "EBikeRide"
    GRAVEL_RIDE = "GravelRide"
    MOUNTAIN_BIKE_RIDE = "MountainBikeRide"
    HANDCYCLE = "Handcycle"
    INLINE_SKATE = "InlineSkate"
    KAYAKING = "Kayaking"
    KITESURF = "Kitesurf"
    NORDIC_SKI = "NordicSki"
    ALPINE_SKI = "AlpineSki"
    BACKCOUNTRY_SKI = "BackcountrySki"
    CANOEING = "Canoeing"
    GOLF = "Golf"
    ICE_SKATE = "IceSkate"
    ROWING = "Rowing"
    SAIL = "Sail"
    SKATEBOARD = "Skateboard"
    SNOWBOARD = "Snowboard"
    SNOWSHOE = "Snowshoe"
    STAND_UP_PADDLING = "StandUpPaddling"
    SURFING = "Surfing"
    VELOMOBILE = "Velomobile"
    WINDSURF = "Windsurf"
    WHEELCHAIR = "Wheelchair"


def activity_supports_gps(activity_type: str) -> bool:
    """Return True if the activity kind records a GPS route."""
    return activity_type in ActivityType._value2member_map_


class ActivityRecord(BaseModel):
    """
    A single fitness activity, read-only input to one receipt job.

    Attributes:
        id: Activity identifier (used for the QR link)
        name: Activity title
        type: Activity kind (see ActivityType)
        distance: Distance in meters
        moving_time: Moving time in seconds
        elapsed_time: Elapsed time in seconds
        total_elevation_gain: Elevation gain in meters
        average_heartrate: Average heart rate in bpm (optional)
        start_date: Start timestamp (optional)
        location_city / location_state / location_country: Optional location
        description: Optional free-text description
    """

    model_config = ConfigDict(extra="ignore", frozen=True, allow_inf_nan=False)

    id: Optional[Union[int, str]] = Field(
        default=None,
        description="Activity identifier",
    )

    name: str = Field(
        default="Untitled Activity",
        description="Activity title",
    )

    type: str = Field(
        default="Run",
        description="Activity kind",
    )

    distance: float = Field(
        default=0.0,
        ge=0,
        description="Distance in meters",
    )

    moving_time: Optional[float] = Field(
        default=None,
        ge=0,
        description="Moving time in seconds",
    )

    elapsed_time: Optional[float] = Field(
        default=None,
        ge=0,
        description="Elapsed time in seconds",
    )

    total_elevation_gain: Optional[float] = Field(
        default=None,
        description="Elevation gain in meters",
    )

    average_heartrate: Optional[float] = Field(
        default=None,
        ge=0,
        description="Average heart rate in bpm",
    )

    start_date: Optional[datetime] = Field(
        default=None,
        description="Activity start timestamp",
    )

    location_city: Optional[str] = None
    location_state: Optional[str] = None
    location_country: Optional[str] = None

    description: Optional[str] = Field(
        default=None,
        description="Free-text description",
    )

    @classmethod
    def from_payload(cls, payload: dict) -> "ActivityRecord":
        """
        Build a record from web UI JSON.

        Accepts ``title`` as an alias of ``name`` and treats null
        numeric fields as absent.
        """
        data = {k: v for k, v in payload.items() if v is not None}
        if not data.get("name"):
            data["name"] = data.get("title") or "Untitled Activity"
        if not data.get("type"):
            data.pop("type", None)
        return cls.model_validate(data)

    @property
    def supports_gps(self) -> bool:
        """Whether this activity kind records a route."""
        return activity_supports_gps(self.type)

    @property
    def duration(self) -> Optional[float]:
        """Moving time, falling back to elapsed time."""
        return self.moving_time or self.elapsed_time or None


class RoutePoint(BaseModel):
    """
    Geographic route point.

    Attributes:
        lat: Latitude in degrees
        lng: Longitude in degrees
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude")
    lng: float = Field(..., ge=-180.0, le=180.0, description="Longitude")


class Photo(BaseModel):
    """
    Photo attached to an activity.

    A photo is either inline bytes (``data``, base64 in JSON) or a
    reference to download: ``urls`` keyed by size, or a bare ``url``.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, allow_inf_nan=False)

    unique_id: Optional[str] = Field(default=None, description="Opaque identifier")
    urls: Dict[str, str] = Field(default_factory=dict, description="Size -> URL")
    url: Optional[str] = Field(default=None, description="Direct URL")
    data: Optional[bytes] = Field(default=None, description="Raw image bytes")

    @field_validator("data", mode="before")
    @classmethod
    def decode_data(cls, v):
        """Decode base64 strings; pass raw bytes through."""
        if v is None or isinstance(v, (bytes, bytearray)):
            return v
        try:
            return base64.b64decode(v, validate=True)
        except (binascii.Error, ValueError, TypeError) as e:
            raise ValueError(f"Photo data is not valid base64: {e}")

    @property
    def source_url(self) -> Optional[str]:
        """Preferred download URL (600px, then 100px, then direct)."""
        return self.urls.get("600") or self.urls.get("100") or self.url

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the image bytes."""
        size = len(self.data) if self.data else 0
        return f"Photo(unique_id={self.unique_id!r}, url={self.source_url!r}, bytes={size})"
