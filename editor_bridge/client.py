"""Open an editor session over the relay named in the configuration.

Usage:
    config = load_config("editor.yaml")
    session, channel = await connect_session(config)
    session.load_image("https://cdn.example.com/cat.png", "user-42")
    ...
    session.close()
    await channel.close()
"""

from __future__ import annotations

import logging

from .config import EditorConfig
from .errors import ConfigError
from .session import EditorSession
from .transport.http import ImageFetcher
from .transport.relay import RelayChannel

_LOGGER = logging.getLogger(__name__)


async def connect_session(
    config: EditorConfig,
    *,
    session_id: str | None = None,
    fetcher: ImageFetcher | None = None,
) -> tuple[EditorSession, RelayChannel]:
    """Connect to ``config.relay_url`` and return a configured session.

    Raises:
        ConfigError: If no relay URL is configured.
        EditorBridgeError: If the relay connection fails.
    """
    if not config.relay_url:
        raise ConfigError("relay_url is not configured")

    channel = RelayChannel(config.relay_url)
    await channel.connect()

    session = EditorSession(
        channel,
        session_id=session_id,
        download_dir=config.download_dir,
        fetcher=fetcher,
    )
    session.configure(config)
    _LOGGER.info("[%s] Session connected via %s", session.session_id, config.relay_url)
    return session, channel
