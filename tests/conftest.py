"""
Test Configuration
==================

Pytest fixtures and test configuration for the activity receipt server.
"""

import cv2
import numpy as np
import pytest


@pytest.fixture
def sample_activity_payload():
    """Provide a sample activity dict as posted by the web UI."""
    return {
        "id": 123,
        "name": "Morning Run",
        "type": "Run",
        "distance": 1609.344,
        "moving_time": 480,
        "elapsed_time": 500,
        "total_elevation_gain": 100.0,
        "average_heartrate": 150.5,
        "start_date": "2026-10-19T07:05:00Z",
        "location_city": "Brooklyn",
        "location_state": "New York",
        "resource_state": 2,
    }


@pytest.fixture
def sample_activity(sample_activity_payload):
    """Provide a sample ActivityRecord."""
    from activity_receipt.models.activity import ActivityRecord

    return ActivityRecord.from_payload(sample_activity_payload)


@pytest.fixture
def sample_route():
    """Provide a small square route."""
    return [
        {"lat": 40.0, "lng": -74.0},
        {"lat": 40.01, "lng": -74.0},
        {"lat": 40.01, "lng": -73.99},
        {"lat": 40.0, "lng": -73.99},
    ]


@pytest.fixture
def make_png():
    """Factory for encoded PNG bytes of a solid BGR color."""

    def _make(width=16, height=8, color=(0, 0, 0)):
        image = np.zeros((height, width, 3), dtype=np.uint8)
        image[:, :] = color
        ok, buffer = cv2.imencode(".png", image)
        assert ok
        return buffer.tobytes()

    return _make


@pytest.fixture
def receipt_config():
    """Receipt layout defaults with the logo turned off."""
    from activity_receipt.config import ReceiptConfig

    config = ReceiptConfig()
    config.logo.enabled = False
    return config


@pytest.fixture
def test_settings(tmp_path):
    """Dry-run settings with no logo and pacing off."""
    from activity_receipt.config import Settings

    return Settings.model_validate({
        "printer": {"dry_run": True, "pacing": "off", "spool_dir": str(tmp_path)},
        "receipt": {"logo": {"enabled": False}},
    })


class RecordingSleep:
    """Stand-in for asyncio.sleep that records delays and advances a fake clock."""

    def __init__(self):
        self.delays = []
        self.now = 0.0

    async def __call__(self, seconds):
        self.delays.append(seconds)
        self.now += seconds


@pytest.fixture
def recording_sleep():
    """Provide a RecordingSleep."""
    return RecordingSleep()
