"""HTTP client for fetching remote image data."""

from __future__ import annotations

import aiohttp

from ..errors import (
    EditorBridgeConnectionError,
    EditorBridgeResponseError,
    EditorBridgeTimeout,
)


class ImageFetcher:
    """Fetch image bytes referenced by URL in ``image_data`` replies."""

    def __init__(self, session: aiohttp.ClientSession, *, timeout: float = 30.0) -> None:
        self._session = session
        self._timeout = timeout

    async def fetch(self, url: str) -> tuple[bytes, str]:
        """Download an image.

        Returns:
            Tuple of (image bytes, content type).

        Raises:
            EditorBridgeResponseError: If the server answers with non-200.
            EditorBridgeTimeout: If the request times out.
            EditorBridgeConnectionError: If the request fails.
        """
        try:
            async with self._session.get(
                url,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as resp:
                if resp.status != 200:
                    raise EditorBridgeResponseError(
                        resp.status, f"Image fetch failed with status {resp.status}"
                    )
                image_data = await resp.read()
                content_type = resp.headers.get("Content-Type", "image/png")
                return image_data, content_type
        except TimeoutError as err:
            raise EditorBridgeTimeout("Image request timed out") from err
        except aiohttp.ClientError as err:
            raise EditorBridgeConnectionError("Image request failed") from err
