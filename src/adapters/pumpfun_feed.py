"""Pump.fun migrations feed adapter.

Implements the core FeedPort on top of a shared aiohttp session.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Mapping

import aiohttp

from core.errors import FetchError
from core.models import RawCandidate

LOGGER = logging.getLogger(__name__)

# Keep error messages readable when the upstream returns an HTML error page.
_MAX_BODY_CHARS = 500


class PumpFunFeedClient:
    """Fetch the most recent migrations from the discovery API."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        api_key: str,
        api_base: str,
        timeout: float = 10.0,
    ) -> None:
        self._session = session
        self._api_key = api_key
        self._api_base = api_base.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    def _endpoint(self) -> str:
        return f"{self._api_base}/migrations"

    async def fetch(self, limit: int) -> List[RawCandidate]:
        """Issue one request and decode the ``{"data": [...]}`` envelope."""

        params = {"limit": str(limit), "sort": "desc"}
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        try:
            async with self._session.get(
                self._endpoint(), params=params, headers=headers, timeout=self._timeout
            ) as resp:
                if resp.status < 200 or resp.status >= 300:
                    # Error pages are not always UTF-8; the body is only quoted.
                    body = await resp.text(errors="replace")
                    raise FetchError(f"Feed returned HTTP {resp.status}: {body[:_MAX_BODY_CHARS]}")
                try:
                    payload = await resp.json(content_type=None)
                except ValueError as exc:
                    raise FetchError(f"Feed returned invalid JSON: {exc}") from exc
        except asyncio.TimeoutError as exc:
            raise FetchError(f"Feed request timed out after {self._timeout.total}s") from exc
        except aiohttp.ClientError as exc:
            raise FetchError(f"Feed request failed: {exc}") from exc

        return _decode_envelope(payload)


def _decode_envelope(payload: Any) -> List[RawCandidate]:
    if not isinstance(payload, Mapping):
        raise FetchError("Feed response is not a JSON object")
    data = payload.get("data")
    if not isinstance(data, list):
        raise FetchError("Feed response is missing the data list")

    records: List[RawCandidate] = []
    for item in data:
        if not isinstance(item, Mapping):
            LOGGER.debug("Skipping non-object feed item: %r", item)
            continue
        records.append(RawCandidate.from_payload(item))
    return records
