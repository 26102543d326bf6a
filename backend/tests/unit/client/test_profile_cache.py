"""
Unit tests for profile fetching and ProfileCache.

WHAT: Tests the mock fallback, TTL freshness, invalidation and shared
in-flight fetches.

HOW: The API client is an AsyncMock; time comes from a settable clock.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from solodesk.client.profile import ProfileCache, fetch_user_profile
from solodesk.core.exceptions import ApiRequestError
from solodesk.schemas.user_profile import MOCK_PROFILE


PROFILE_DATA = {
    "businessName": "Jane Doe Design",
    "email": "jane@studio.test",
    "phone": "+1 555 0100",
}


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def api():
    mock = MagicMock()
    mock.get_profile = AsyncMock(return_value=PROFILE_DATA)
    return mock


class TestFetchUserProfile:
    """Single fetch with fallback."""

    @pytest.mark.asyncio
    async def test_success(self, api):
        profile = await fetch_user_profile(api)

        assert profile.business_name == "Jane Doe Design"
        assert profile.website == ""

    @pytest.mark.asyncio
    async def test_api_error_falls_back(self, api):
        api.get_profile.side_effect = ApiRequestError(message="down", response_status=500)

        assert await fetch_user_profile(api) is MOCK_PROFILE

    @pytest.mark.asyncio
    async def test_invalid_body_falls_back(self, api):
        api.get_profile.return_value = {"address": "not an object"}

        assert await fetch_user_profile(api) is MOCK_PROFILE

    @pytest.mark.asyncio
    async def test_empty_data_gives_defaults(self, api):
        api.get_profile.return_value = None

        profile = await fetch_user_profile(api)

        assert profile == MOCK_PROFILE


class TestProfileCache:
    """Caching behaviour."""

    @pytest.mark.asyncio
    async def test_cached_within_ttl(self, api):
        clock = FakeClock()
        cache = ProfileCache(api, ttl_seconds=60, clock=clock)

        first = await cache.get()
        clock.now += 59
        second = await cache.get()

        assert first is second
        assert api.get_profile.await_count == 1

    @pytest.mark.asyncio
    async def test_refetch_after_ttl(self, api):
        clock = FakeClock()
        cache = ProfileCache(api, ttl_seconds=60, clock=clock)

        await cache.get()
        clock.now += 60
        await cache.get()

        assert api.get_profile.await_count == 2

    @pytest.mark.asyncio
    async def test_invalidate(self, api):
        cache = ProfileCache(api, ttl_seconds=60, clock=FakeClock())

        await cache.get()
        cache.invalidate()
        assert cache.is_fresh is False
        await cache.get()

        assert api.get_profile.await_count == 2

    @pytest.mark.asyncio
    async def test_mock_not_cached(self, api):
        api.get_profile.side_effect = [ApiRequestError(message="down"), PROFILE_DATA]
        cache = ProfileCache(api, ttl_seconds=60, clock=FakeClock())

        assert await cache.get() is MOCK_PROFILE
        assert (await cache.get()).business_name == "Jane Doe Design"

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_fetch(self, api):
        release = asyncio.Event()

        async def slow_profile():
            await release.wait()
            return PROFILE_DATA

        api.get_profile = AsyncMock(side_effect=slow_profile)
        cache = ProfileCache(api, ttl_seconds=60, clock=FakeClock())

        waiters = [asyncio.ensure_future(cache.get()) for _ in range(3)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*waiters)

        assert api.get_profile.await_count == 1
        assert all(r is results[0] for r in results)

    @pytest.mark.asyncio
    async def test_invalidate_during_fetch_discards_result(self, api):
        release = asyncio.Event()
        responses = [PROFILE_DATA, {**PROFILE_DATA, "businessName": "Renamed Studio"}]

        async def slow_profile():
            data = responses.pop(0)
            if responses:
                await release.wait()
            return data

        api.get_profile = AsyncMock(side_effect=slow_profile)
        cache = ProfileCache(api, ttl_seconds=60, clock=FakeClock())

        pending = asyncio.ensure_future(cache.get())
        await asyncio.sleep(0)
        cache.invalidate()
        release.set()
        stale = await pending

        assert stale.business_name == "Jane Doe Design"
        assert cache.is_fresh is False
        fresh = await cache.get()
        assert fresh.business_name == "Renamed Studio"
        assert api.get_profile.await_count == 2
