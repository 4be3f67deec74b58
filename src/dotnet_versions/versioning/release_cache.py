"""Process-scoped caches for the releases index and per-channel manifests.

Nothing here is persisted; a ``ReleaseCache`` lives as long as its owner and
is discarded after the run.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Dict, List, Optional, Sequence

import aiohttp

from ..common.http_client import ReleaseMetadataClient, describe_status
from ..common.logging_utils import extra_context, is_debug_enabled
from .errors import CacheNotInitializedError, InvalidVersionFormatError, ManifestFetchError
from .models import ChannelManifest, ReleaseChannelSummary

logger = logging.getLogger(__name__)


def channel_for(version: str) -> str:
    """Derive the ``major.minor`` channel key from a version-like string.

    Raises:
        InvalidVersionFormatError: fewer than two dot-separated components.
    """
    parts = version.split(".")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise InvalidVersionFormatError(version)
    return f"{parts[0]}.{parts[1]}"


async def _fetch_json(client: ReleaseMetadataClient, url: str, what: str) -> Any:
    """GET ``url`` through ``client``, mapping every failure to ManifestFetchError."""
    try:
        status, reason, data = await client.get_json(url)
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        raise ManifestFetchError(f"Failed to fetch {what}: {str(exc) or type(exc).__name__}") from exc
    if not 200 <= status < 300:
        raise ManifestFetchError(f"Failed to fetch {what}: {describe_status(status, reason)}")
    return data


class ReleaseIndexCache:
    """Holds the top-level channel index, newest channel first.

    Populated at most once by ``load_release_index``. Two concurrent first
    loads may both hit the network; the data is identical so the second
    write is harmless.
    """

    def __init__(self, client: ReleaseMetadataClient):
        self._client = client
        self._releases: Optional[List[ReleaseChannelSummary]] = None
        self._allow_preview = False

    @property
    def is_loaded(self) -> bool:
        return self._releases is not None

    @property
    def allow_preview(self) -> bool:
        """Preview flag recorded when the index was populated."""
        return self._allow_preview

    @property
    def releases(self) -> List[ReleaseChannelSummary]:
        """The loaded index.

        Raises:
            CacheNotInitializedError: the index has not been populated yet.
        """
        if self._releases is None:
            raise CacheNotInitializedError()
        return self._releases

    async def load_release_index(self, allow_preview: bool = False) -> None:
        """Fetch and store the releases index unless already populated.

        Raises:
            ManifestFetchError: non-success status, transport failure, or a
                body without a ``releases-index`` array.
        """
        if self._releases is not None:
            return

        url = self._client.index_url()
        logger.debug("Fetching releases index: %s", url)
        data = await _fetch_json(self._client, url, "releases index")
        entries = data.get("releases-index") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise ManifestFetchError(
                "Invalid releases index response: releases data is missing or malformed"
            )

        self._releases = [ReleaseChannelSummary.from_dict(e) for e in entries if isinstance(e, dict)]
        self._allow_preview = allow_preview
        if is_debug_enabled(logger):
            logger.debug(
                "Loaded releases index",
                extra=extra_context(
                    event="cache_fill",
                    component="release_index",
                    channels=[r.channel_version for r in self._releases],
                ),
            )

    def set_releases(self, releases: Sequence[ReleaseChannelSummary], allow_preview: bool = False) -> None:
        """Seed the index directly, bypassing the network."""
        self._releases = list(releases)
        self._allow_preview = allow_preview

    def reset(self) -> None:
        self._releases = None
        self._allow_preview = False


class ReleaseManifestCache:
    """Single-flight cache of per-channel ``releases.json`` manifests.

    The map holds one ``asyncio.Task`` per channel, installed before the
    fetch is awaited, so concurrent callers for the same channel share a
    single request. Failed or cancelled tasks are evicted so the next call
    retries; successful ones live as long as the cache.
    """

    def __init__(self, client: ReleaseMetadataClient):
        self._client = client
        self._tasks: Dict[str, "asyncio.Task[ChannelManifest]"] = {}

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, channel: object) -> bool:
        return channel in self._tasks

    async def fetch_release_manifest(self, version: str) -> ChannelManifest:
        """Return the manifest for the channel of ``version``.

        Args:
            version: Any version-like string with at least two components,
                e.g. ``8.0.100`` (channel ``8.0``).

        Raises:
            InvalidVersionFormatError: channel key cannot be derived.
            ManifestFetchError: the shared fetch failed.
        """
        channel = channel_for(version)

        task = self._tasks.get(channel)
        if task is not None and task.done() and (task.cancelled() or task.exception() is not None):
            self._tasks.pop(channel, None)
            task = None

        if task is None:
            task = asyncio.ensure_future(self._fetch(channel))
            self._tasks[channel] = task
            task.add_done_callback(functools.partial(self._evict_failed, channel))
        else:
            logger.debug("Using cached release manifest for channel %s", channel)

        if task.done():
            return task.result()
        return await asyncio.shield(task)

    async def _fetch(self, channel: str) -> ChannelManifest:
        url = self._client.channel_url(channel)
        logger.debug("Fetching release manifest: %s", url)
        data = await _fetch_json(self._client, url, f"releases for channel {channel}")
        if not isinstance(data, dict) or not isinstance(data.get("releases"), list):
            raise ManifestFetchError(
                f"Invalid manifest structure for channel {channel}: missing releases array"
            )
        manifest = ChannelManifest.from_dict(channel, data)
        logger.debug("Fetched manifest for channel %s with %d releases", channel, len(manifest.releases))
        return manifest

    def _evict_failed(self, channel: str, task: "asyncio.Task[ChannelManifest]") -> None:
        if not (task.cancelled() or task.exception() is not None):
            return
        # A retry may already have installed a fresh task for this channel.
        if self._tasks.get(channel) is task:
            del self._tasks[channel]
            logger.debug("Evicted failed release manifest fetch for channel %s", channel)

    def clear(self) -> None:
        self._tasks.clear()


class ReleaseCache:
    """Owns the index and manifest caches for one resolution run.

    Pass one instance to the resolver and inclusion mapper instead of relying
    on module-level state; ``reset()`` returns it to the empty state.
    """

    def __init__(self, client: Optional[ReleaseMetadataClient] = None):
        self.client = client or ReleaseMetadataClient()
        self.index = ReleaseIndexCache(self.client)
        self.manifests = ReleaseManifestCache(self.client)

    async def init(self, allow_preview: bool = False) -> None:
        """Populate the releases index (no-op when already loaded)."""
        await self.index.load_release_index(allow_preview)

    def reset(self) -> None:
        """Drop the index and every cached manifest."""
        self.index.reset()
        self.manifests.clear()

    async def fetch_release_manifest(self, version: str) -> ChannelManifest:
        return await self.manifests.fetch_release_manifest(version)
