"""Tests for the releases index cache and the single-flight manifest cache."""

import asyncio

import aiohttp
import pytest

from dotnet_versions.versioning.errors import (
    CacheNotInitializedError,
    InvalidVersionFormatError,
    ManifestFetchError,
)
from dotnet_versions.versioning.release_cache import (
    ReleaseCache,
    ReleaseIndexCache,
    ReleaseManifestCache,
    channel_for,
)

INDEX_URL = "https://metadata.test/releases-index.json"

INDEX_BODY = {
    "releases-index": [
        {
            "channel-version": "10.0",
            "latest-sdk": "10.0.100",
            "latest-release": "10.0.0",
            "release-type": "lts",
            "support-phase": "active",
        },
        {
            "channel-version": "9.0",
            "latest-sdk": "9.0.300",
            "latest-release": "9.0.6",
            "release-type": "sts",
            "support-phase": "active",
        },
    ]
}

MANIFEST_8_0 = {
    "releases": [
        {
            "sdks": [{"version": "8.0.200"}, {"version": "8.0.100"}],
            "runtime": {"version": "8.0.1"},
            "aspnetcore-runtime": {"version": "8.0.1"},
        }
    ]
}


class _FakeClient:
    """Stand-in for ReleaseMetadataClient returning canned responses per URL.

    A response is a (status, reason, data) tuple or an exception to raise.
    A list of responses is consumed one call at a time.
    """

    def __init__(self, responses):
        self._responses = {url: list(r) if isinstance(r, list) else [r] for url, r in responses.items()}
        self.calls = []

    def index_url(self):
        return INDEX_URL

    def channel_url(self, channel):
        return f"https://metadata.test/{channel}/releases.json"

    async def get_json(self, url):
        self.calls.append(url)
        await asyncio.sleep(0)
        queue = self._responses[url]
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, BaseException):
            raise response
        return response


def channel_url(channel):
    return f"https://metadata.test/{channel}/releases.json"


class TestChannelFor:
    """Tests for channel key derivation."""

    def test_takes_first_two_components(self):
        assert channel_for("8.0.100") == "8.0"
        assert channel_for("10.0") == "10.0"
        assert channel_for("11.0.100-preview.1") == "11.0"

    @pytest.mark.parametrize("version", ["invalid", "8", ""])
    def test_rejects_short_versions(self, version):
        with pytest.raises(InvalidVersionFormatError, match="Invalid version format"):
            channel_for(version)


class TestReleaseIndexCache:
    """Tests for ReleaseIndexCache."""

    def test_load_populates_once(self):
        """A second load is a no-op and does not hit the network."""
        client = _FakeClient({INDEX_URL: (200, "OK", INDEX_BODY)})
        cache = ReleaseIndexCache(client)

        async def _run():
            await cache.load_release_index()
            await cache.load_release_index(allow_preview=True)

        asyncio.run(_run())

        assert client.calls == [INDEX_URL]
        assert [r.channel_version for r in cache.releases] == ["10.0", "9.0"]
        assert cache.releases[0].latest_sdk == "10.0.100"
        assert cache.allow_preview is False

    def test_load_records_preview_flag(self):
        client = _FakeClient({INDEX_URL: (200, "OK", INDEX_BODY)})
        cache = ReleaseIndexCache(client)
        asyncio.run(cache.load_release_index(allow_preview=True))
        assert cache.allow_preview is True

    def test_access_before_load_fails(self):
        cache = ReleaseIndexCache(_FakeClient({}))
        assert cache.is_loaded is False
        with pytest.raises(CacheNotInitializedError):
            _ = cache.releases

    def test_non_success_status_fails(self):
        client = _FakeClient({INDEX_URL: (503, "Service Unavailable", None)})
        cache = ReleaseIndexCache(client)
        with pytest.raises(ManifestFetchError, match="503 Service Unavailable"):
            asyncio.run(cache.load_release_index())
        assert cache.is_loaded is False

    @pytest.mark.parametrize("body", [None, {}, {"releases-index": "nope"}, ["not", "a", "dict"]])
    def test_malformed_body_fails(self, body):
        cache = ReleaseIndexCache(_FakeClient({INDEX_URL: (200, "OK", body)}))
        with pytest.raises(ManifestFetchError, match="missing or malformed"):
            asyncio.run(cache.load_release_index())

    def test_transport_error_becomes_fetch_error(self):
        client = _FakeClient({INDEX_URL: aiohttp.ClientConnectionError("refused")})
        cache = ReleaseIndexCache(client)
        with pytest.raises(ManifestFetchError, match="refused"):
            asyncio.run(cache.load_release_index())

    def test_reset_clears_index(self):
        cache = ReleaseIndexCache(_FakeClient({}))
        cache.set_releases([], allow_preview=True)
        assert cache.is_loaded is True
        cache.reset()
        assert cache.is_loaded is False
        assert cache.allow_preview is False


class TestReleaseManifestCache:
    """Tests for ReleaseManifestCache."""

    def test_fetch_manifest(self):
        client = _FakeClient({channel_url("8.0"): (200, "OK", MANIFEST_8_0)})
        cache = ReleaseManifestCache(client)

        manifest = asyncio.run(cache.fetch_release_manifest("8.0.100"))

        assert client.calls == [channel_url("8.0")]
        assert manifest.channel == "8.0"
        assert manifest.releases[0].sdks == ["8.0.200", "8.0.100"]
        assert manifest.releases[0].runtime == "8.0.1"
        assert manifest.releases[0].aspnetcore_runtime == "8.0.1"

    def test_concurrent_same_channel_single_request(self):
        """Two concurrent requests for one channel share a single fetch."""
        client = _FakeClient({channel_url("8.0"): (200, "OK", MANIFEST_8_0)})
        cache = ReleaseManifestCache(client)

        async def _run():
            return await asyncio.gather(
                cache.fetch_release_manifest("8.0.100"),
                cache.fetch_release_manifest("8.0.200"),
            )

        first, second = asyncio.run(_run())

        assert len(client.calls) == 1
        assert first is second

    def test_many_concurrent_callers(self):
        client = _FakeClient({channel_url("8.0"): (200, "OK", MANIFEST_8_0)})
        cache = ReleaseManifestCache(client)

        async def _run():
            return await asyncio.gather(*(cache.fetch_release_manifest(f"8.0.{n}") for n in range(20)))

        results = asyncio.run(_run())
        assert len(client.calls) == 1
        assert all(r is results[0] for r in results)

    def test_distinct_channels_fetch_separately(self):
        client = _FakeClient({
            channel_url("8.0"): (200, "OK", MANIFEST_8_0),
            channel_url("9.0"): (200, "OK", {"releases": []}),
        })
        cache = ReleaseManifestCache(client)

        async def _run():
            await asyncio.gather(
                cache.fetch_release_manifest("8.0.100"),
                cache.fetch_release_manifest("9.0.100"),
            )

        asyncio.run(_run())
        assert sorted(client.calls) == [channel_url("8.0"), channel_url("9.0")]
        assert "8.0" in cache and "9.0" in cache

    def test_completed_manifest_reused_across_runs(self):
        client = _FakeClient({channel_url("8.0"): (200, "OK", MANIFEST_8_0)})
        cache = ReleaseManifestCache(client)

        first = asyncio.run(cache.fetch_release_manifest("8.0.100"))
        second = asyncio.run(cache.fetch_release_manifest("8.0.300"))

        assert first is second
        assert len(client.calls) == 1

    def test_invalid_version(self):
        cache = ReleaseManifestCache(_FakeClient({}))
        with pytest.raises(InvalidVersionFormatError):
            asyncio.run(cache.fetch_release_manifest("invalid"))
        assert len(cache) == 0

    def test_fetch_failure(self):
        client = _FakeClient({channel_url("8.0"): (404, "Not Found", None)})
        cache = ReleaseManifestCache(client)
        with pytest.raises(ManifestFetchError, match="Failed to fetch releases for channel 8.0"):
            asyncio.run(cache.fetch_release_manifest("8.0.100"))

    def test_missing_releases_array(self):
        client = _FakeClient({channel_url("8.0"): (200, "OK", {"sdks": []})})
        cache = ReleaseManifestCache(client)
        with pytest.raises(ManifestFetchError, match="missing releases array"):
            asyncio.run(cache.fetch_release_manifest("8.0.100"))

    def test_concurrent_callers_share_failure(self):
        client = _FakeClient({channel_url("8.0"): (500, "Internal Server Error", None)})
        cache = ReleaseManifestCache(client)

        async def _run():
            return await asyncio.gather(
                cache.fetch_release_manifest("8.0.100"),
                cache.fetch_release_manifest("8.0.200"),
                return_exceptions=True,
            )

        results = asyncio.run(_run())
        assert len(client.calls) == 1
        assert all(isinstance(r, ManifestFetchError) for r in results)
        assert results[0] is results[1]

    def test_failed_fetch_is_evicted_and_retried(self):
        """A transient failure must not poison later calls for the channel."""
        client = _FakeClient({
            channel_url("8.0"): [
                aiohttp.ServerDisconnectedError(),
                (200, "OK", MANIFEST_8_0),
            ]
        })
        cache = ReleaseManifestCache(client)

        with pytest.raises(ManifestFetchError):
            asyncio.run(cache.fetch_release_manifest("8.0.100"))
        assert "8.0" not in cache

        manifest = asyncio.run(cache.fetch_release_manifest("8.0.100"))
        assert manifest.releases[0].runtime == "8.0.1"
        assert len(client.calls) == 2

    def test_retry_within_same_loop(self):
        client = _FakeClient({
            channel_url("8.0"): [(502, "Bad Gateway", None), (200, "OK", MANIFEST_8_0)]
        })
        cache = ReleaseManifestCache(client)

        async def _run():
            with pytest.raises(ManifestFetchError):
                await cache.fetch_release_manifest("8.0.100")
            return await cache.fetch_release_manifest("8.0.100")

        manifest = asyncio.run(_run())
        assert manifest.channel == "8.0"
        assert len(client.calls) == 2

    def test_cancelled_caller_does_not_cancel_shared_fetch(self):
        client = _FakeClient({channel_url("8.0"): (200, "OK", MANIFEST_8_0)})
        cache = ReleaseManifestCache(client)

        async def _run():
            impatient = asyncio.ensure_future(cache.fetch_release_manifest("8.0.100"))
            patient = asyncio.ensure_future(cache.fetch_release_manifest("8.0.200"))
            await asyncio.sleep(0)
            impatient.cancel()
            return await patient

        manifest = asyncio.run(_run())
        assert manifest.channel == "8.0"
        assert len(client.calls) == 1

    def test_clear(self):
        client = _FakeClient({channel_url("8.0"): (200, "OK", MANIFEST_8_0)})
        cache = ReleaseManifestCache(client)
        asyncio.run(cache.fetch_release_manifest("8.0.100"))
        cache.clear()
        asyncio.run(cache.fetch_release_manifest("8.0.100"))
        assert len(client.calls) == 2


class TestReleaseCache:
    """Tests for the composite cache lifecycle."""

    def test_init_and_reset(self):
        client = _FakeClient({
            INDEX_URL: (200, "OK", INDEX_BODY),
            channel_url("8.0"): (200, "OK", MANIFEST_8_0),
        })
        cache = ReleaseCache(client)

        async def _run():
            await cache.init()
            await cache.fetch_release_manifest("8.0.100")

        asyncio.run(_run())
        assert cache.index.is_loaded
        assert len(cache.manifests) == 1

        cache.reset()
        assert not cache.index.is_loaded
        assert len(cache.manifests) == 0

    def test_instances_do_not_share_state(self):
        client = _FakeClient({INDEX_URL: (200, "OK", INDEX_BODY)})
        first = ReleaseCache(client)
        second = ReleaseCache(client)
        asyncio.run(first.init())
        assert first.index.is_loaded
        assert not second.index.is_loaded
