"""
Photo Fetcher
=============

Resolves activity photos to encoded image bytes.

Inline bytes are returned as-is. URL references are downloaded with
``requests`` on a worker thread so the event loop is never blocked, under
a bounded wait. Every failure (HTTP status, network error, timeout,
missing reference) becomes an ImageDecodeError: a photo that cannot be
fetched is treated exactly like one that cannot be decoded.
"""

import asyncio
import logging
from typing import Any, Optional

import requests

from activity_receipt.errors import ImageDecodeError
from activity_receipt.models.activity import Photo


logger = logging.getLogger(__name__)


class PhotoFetcher:
    """
    Downloads photo bytes with a bounded wait.

    Attributes:
        timeout: Seconds before a download is abandoned
        session: Optional requests session (connection reuse, tests)
    """

    def __init__(
        self,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()

    def _download(self, url: str) -> bytes:
        """Blocking download, run on a worker thread."""
        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.content

    async def fetch(self, photo: Any) -> bytes:
        """
        Resolve a photo to encoded image bytes.

        Args:
            photo: Photo model or raw photo dict from the request

        Returns:
            Encoded image bytes (PNG/JPEG)

        Raises:
            ImageDecodeError: If the photo is malformed or cannot be fetched
        """
        if not isinstance(photo, Photo):
            try:
                photo = Photo.model_validate(photo)
            except ValueError as e:
                raise ImageDecodeError(f"Invalid photo entry: {e}")

        if photo.data:
            return photo.data

        url = photo.source_url
        if not url:
            raise ImageDecodeError(f"Photo {photo.unique_id!r} has no data or URL")

        try:
            content = await asyncio.wait_for(
                asyncio.to_thread(self._download, url),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            raise ImageDecodeError(f"Timed out fetching photo {url}")
        except requests.RequestException as e:
            raise ImageDecodeError(f"Failed to fetch photo {url}: {e}")

        if not content:
            raise ImageDecodeError(f"Empty response for photo {url}")

        logger.debug(f"Fetched photo {photo.unique_id!r}: {len(content)} bytes")
        return content

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()
