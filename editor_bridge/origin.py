"""Origin computation and inbound origin validation."""

from __future__ import annotations

from urllib.parse import urlsplit

_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443}


def origin_of(url: str) -> str:
    """Return the serialized origin (scheme://host[:port]) of ``url``.

    Scheme and host are lowercased and the scheme's default port is omitted,
    matching how browsers report ``MessageEvent.origin``.

    Raises:
        ValueError: If the URL has no scheme or host.
    """
    parts = urlsplit(url.strip())
    scheme = parts.scheme.lower()
    host = parts.hostname
    if not scheme or not host:
        raise ValueError(f"URL has no origin: {url!r}")

    # urlsplit strips IPv6 brackets
    if ":" in host:
        host = f"[{host}]"

    port = parts.port
    if port is None or port == _DEFAULT_PORTS.get(scheme):
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{port}"


class OriginValidator:
    """Accept messages only from the origin of the configured endpoint URL.

    The origin is derived from the current URL on every check, so a URL
    change takes effect immediately.
    """

    def __init__(self, url: str | None = None) -> None:
        self.url = url

    @property
    def origin(self) -> str | None:
        """Origin of the configured URL, or None if none is usable."""
        if not self.url:
            return None
        try:
            return origin_of(self.url)
        except ValueError:
            return None

    def accepts(self, origin: str | None) -> bool:
        """Return True when ``origin`` exactly equals the endpoint origin."""
        expected = self.origin
        if expected is None or not isinstance(origin, str):
            return False
        return origin == expected
