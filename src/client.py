"""HTTP client factory for pumpscout.

One aiohttp session is shared by the feed client and the notifier for the
whole process. The caller owns it and closes it on shutdown, so it is obvious
when connections are opened and when they end.
"""

from __future__ import annotations

import logging

import aiohttp

USER_AGENT = "pumpscout/0.1"


def build_session() -> aiohttp.ClientSession:
    """Create the shared HTTP session. Must be called inside a running loop."""

    logging.getLogger(__name__).info("Initializing HTTP session")

    return aiohttp.ClientSession(headers={"User-Agent": USER_AGENT})
