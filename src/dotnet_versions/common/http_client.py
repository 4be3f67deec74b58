"""Async client for the .NET release-metadata endpoints."""

from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

import aiohttp

from ..constants import Constants
from .logging_utils import Timer, extra_context, is_debug_enabled, safe_url

logger = logging.getLogger(__name__)

HEADERS_JSON = {"Accept": "application/json", "User-Agent": Constants.USER_AGENT}


class ReleaseMetadataClient:
    """Fetches JSON documents from the release-metadata host.

    The session is created lazily on the first request, or explicitly through
    ``start()`` / ``async with``. Transport failures surface as
    ``aiohttp.ClientError`` or ``asyncio.TimeoutError``; callers decide how to
    report them.
    """

    def __init__(
        self,
        base_url: str = Constants.RELEASE_METADATA_BASE_URL,
        timeout: int = Constants.REQUEST_TIMEOUT,
    ):
        """Initialize the client.

        Args:
            base_url: Root of the release-metadata tree.
            timeout: Total request timeout in seconds.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def base_url(self) -> str:
        return self._base_url

    def index_url(self) -> str:
        """URL of the top-level channel index."""
        return f"{self._base_url}/{Constants.RELEASES_INDEX_FILE}"

    def channel_url(self, channel: str) -> str:
        """URL of the detailed manifest for one ``major.minor`` channel."""
        return f"{self._base_url}/{channel}/{Constants.CHANNEL_RELEASES_FILE}"

    async def start(self) -> None:
        """Start the HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout, headers=HEADERS_JSON)

    async def stop(self) -> None:
        """Stop the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def get_json(self, url: str) -> Tuple[int, str, Optional[Any]]:
        """GET ``url`` and decode the body as JSON.

        Args:
            url: Target URL.

        Returns:
            Tuple of (status, reason, parsed_json_or_none). The body is only
            decoded for 2xx responses; undecodable bodies yield None.
        """
        if self._session is None:
            await self.start()
        assert self._session is not None

        target = safe_url(url)
        with Timer() as t:
            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP request",
                    extra=extra_context(
                        event="http_request", component="http_client", action="GET", target=target
                    ),
                )
            async with self._session.get(url) as response:
                status = response.status
                reason = response.reason or ""
                data = None
                if 200 <= status < 300:
                    try:
                        data = await response.json(content_type=None)
                    except ValueError:
                        logger.debug("JSON decode error for %s", target)

        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    status_code=status,
                    duration_ms=t.duration_ms(),
                    target=target,
                ),
            )
        return status, reason, data

    async def __aenter__(self) -> "ReleaseMetadataClient":
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.stop()


def describe_status(status: int, reason: str) -> str:
    """Human-readable status for error messages, e.g. ``404 Not Found``."""
    return f"{status} {reason}".strip()
