"""Two-phase download: request image data, receive it, save it locally."""

from __future__ import annotations

import base64
import binascii
import logging
import re
from pathlib import Path
from urllib.parse import unquote_to_bytes

from .errors import EditorBridgeError
from .protocol import GetImageData, ImageData

_LOGGER = logging.getLogger(__name__)

DEFAULT_DOWNLOAD_FILENAME = "edited-image.png"
DOWNLOAD_FAILED_MESSAGE = "Failed to get image data for download"

_IMAGE_SUFFIX = re.compile(r"\.(png|jpg|jpeg)$", re.IGNORECASE)
_DATA_URL = re.compile(r"^data:(?P<mime>[^;,]*)(?P<params>(;[^;,]*)*),(?P<data>.*)$", re.DOTALL)


class DownloadError(EditorBridgeError):
    """A pending download could not be completed."""


def normalize_filename(filename: str | None) -> str:
    """Apply the default name and make sure the name ends in an image suffix.

    Names without a ``.png``/``.jpg``/``.jpeg`` suffix (any case) get
    ``.png`` appended.
    """
    name = filename or DEFAULT_DOWNLOAD_FILENAME
    if not _IMAGE_SUFFIX.search(name):
        name += ".png"
    return name


def decode_data_url(url: str) -> tuple[bytes, str]:
    """Decode a ``data:`` URL into its bytes and media type.

    Raises:
        ValueError: If url is not a well-formed data URL.
    """
    match = _DATA_URL.match(url)
    if match is None:
        raise ValueError("Not a data URL")

    mime = match.group("mime") or "text/plain"
    params = match.group("params").split(";")
    payload = match.group("data")

    if "base64" in params:
        try:
            return base64.b64decode(payload, validate=True), mime
        except binascii.Error as err:
            raise ValueError("Invalid base64 payload in data URL") from err
    return unquote_to_bytes(payload), mime


def is_remote_url(url: str) -> bool:
    return url.lower().startswith(("http://", "https://"))


class DownloadCoordinator:
    """Correlate ``image_data`` replies with the pending download request.

    Only one download is tracked at a time; a new request replaces the
    pending one.
    """

    def __init__(self, download_dir: Path | str | None = None) -> None:
        self.download_dir = Path(download_dir) if download_dir else None
        self._pending: str | None = None

    @property
    def pending(self) -> str | None:
        """Filename of the pending download, if any."""
        return self._pending

    def request(self, filename: str | None = None) -> GetImageData:
        """Record a download intent and return the command that fulfils it."""
        name = normalize_filename(filename)
        if self._pending is not None:
            _LOGGER.debug("Replacing pending download %s with %s", self._pending, name)
        self._pending = name
        return GetImageData(format="png")

    def cancel(self) -> None:
        self._pending = None

    def claim(self, notification: ImageData) -> tuple[str, str]:
        """Match an ``image_data`` reply to the pending download.

        Clears the pending download on success.

        Returns:
            Tuple of (filename, image data reference).

        Raises:
            DownloadError: If no download is pending or the reply has no data.
        """
        image_data = self._check(notification)
        filename = self._pending or DEFAULT_DOWNLOAD_FILENAME
        self._pending = None
        return filename, image_data

    def complete(self, notification: ImageData) -> Path:
        """Claim a reply carrying a ``data:`` URL and save it.

        A reply that cannot be decoded leaves the download pending.

        Raises:
            DownloadError: If the reply cannot be claimed, decoded or saved.
        """
        image_data = self._check(notification)
        try:
            data, _mime = decode_data_url(image_data)
        except ValueError as err:
            raise DownloadError(str(err)) from err

        filename, _ = self.claim(notification)
        return self.save(filename, data)

    def _check(self, notification: ImageData) -> str:
        if self._pending is None:
            raise DownloadError("Received image data with no pending download")
        if not notification.image_data:
            raise DownloadError("Received image data reply without data")
        return notification.image_data

    def save(self, filename: str, data: bytes) -> Path:
        """Write downloaded bytes into the download directory.

        Raises:
            DownloadError: If the file cannot be written.
        """
        directory = self.download_dir or Path.cwd()
        # Keep host-supplied names inside the download directory
        target = directory / Path(filename).name
        try:
            directory.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as err:
            raise DownloadError(f"Failed to save {target}: {err}") from err

        _LOGGER.info("Saved %d bytes to %s", len(data), target)
        return target
