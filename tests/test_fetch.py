"""
Photo Fetcher Tests
===================

Tests for inline photos, URL downloads and failure mapping. A fake
requests session stands in for the network.
"""

import asyncio
import time

import pytest
import requests

from activity_receipt.errors import ImageDecodeError
from activity_receipt.imaging.fetch import PhotoFetcher
from activity_receipt.models.activity import Photo


class FakeResponse:
    def __init__(self, content=b"", status=200):
        self.content = content
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """Returns canned responses and records requested URLs."""

    def __init__(self, response=None, error=None, delay=0.0):
        self.response = response or FakeResponse(b"image-bytes")
        self.error = error
        self.delay = delay
        self.urls = []
        self.closed = False

    def get(self, url, timeout=None):
        self.urls.append(url)
        if self.delay:
            time.sleep(self.delay)
        if self.error:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


class TestPhotoFetcher:
    """Tests for PhotoFetcher.fetch."""

    def test_inline_data(self):
        session = FakeSession()
        fetcher = PhotoFetcher(session=session)
        assert asyncio.run(fetcher.fetch(Photo(data=b"inline"))) == b"inline"
        assert session.urls == []

    def test_prefers_600_url(self):
        session = FakeSession()
        fetcher = PhotoFetcher(session=session)
        photo = {"unique_id": "p1", "urls": {"100": "https://x/100.jpg", "600": "https://x/600.jpg"}}
        assert asyncio.run(fetcher.fetch(photo)) == b"image-bytes"
        assert session.urls == ["https://x/600.jpg"]

    def test_http_error(self):
        fetcher = PhotoFetcher(session=FakeSession(FakeResponse(status=404)))
        with pytest.raises(ImageDecodeError, match="Failed to fetch"):
            asyncio.run(fetcher.fetch(Photo(url="https://x/missing.jpg")))

    def test_network_error(self):
        fetcher = PhotoFetcher(session=FakeSession(error=requests.ConnectionError("refused")))
        with pytest.raises(ImageDecodeError):
            asyncio.run(fetcher.fetch(Photo(url="https://x/a.jpg")))

    def test_timeout(self):
        fetcher = PhotoFetcher(timeout=0.05, session=FakeSession(delay=0.5))
        with pytest.raises(ImageDecodeError, match="Timed out"):
            asyncio.run(fetcher.fetch(Photo(url="https://x/slow.jpg")))

    def test_empty_response(self):
        fetcher = PhotoFetcher(session=FakeSession(FakeResponse(b"")))
        with pytest.raises(ImageDecodeError, match="Empty"):
            asyncio.run(fetcher.fetch(Photo(url="https://x/empty.jpg")))

    def test_no_source(self):
        with pytest.raises(ImageDecodeError, match="no data or URL"):
            asyncio.run(PhotoFetcher(session=FakeSession()).fetch({"unique_id": "x"}))

    def test_invalid_entry(self):
        with pytest.raises(ImageDecodeError, match="Invalid photo"):
            asyncio.run(PhotoFetcher(session=FakeSession()).fetch({"urls": "not a mapping"}))

    def test_close(self):
        session = FakeSession()
        PhotoFetcher(session=session).close()
        assert session.closed
