"""
User profile fetching with mock fallback.

WHAT: Fetches the business profile templates are branded with and caches
it for every editor.

WHY: Editors must stay usable when the profile cannot be loaded (offline,
server error, user without a profile yet). Any failure is logged and the
fixed MOCK_PROFILE is used instead; nothing is raised to the editor.

HOW: ProfileCache keeps the last fetched profile for a TTL. Concurrent
callers during a fetch share the same request. invalidate() forces the
next get() to refetch (done after a template save). Each invalidate() bumps a
generation counter so a response started earlier is never cached.
"""

import asyncio
import logging
import time
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from solodesk.client.api_client import SoloDeskApiClient
from solodesk.core.config import settings
from solodesk.core.exceptions import AppException
from solodesk.schemas.user_profile import MOCK_PROFILE, UserProfile


logger = logging.getLogger(__name__)


async def fetch_user_profile(api: SoloDeskApiClient) -> UserProfile:
    """
    Fetch the profile once, falling back to MOCK_PROFILE on any failure.

    Failures covered: transport errors, non-2xx, success=false and bodies
    that are not a valid profile. No retry.
    """
    try:
        data = await api.get_profile()
        return UserProfile.model_validate(data or {})
    except AppException as e:
        logger.warning("Profile fetch failed, using mock profile: %s", e.message)
    except PydanticValidationError as e:
        logger.warning("Profile response invalid, using mock profile: %s", e)
    return MOCK_PROFILE


class ProfileCache:
    """
    Shared, TTL-bound profile cache.

    Example:
        cache = ProfileCache(api)
        profile = await cache.get()
        cache.invalidate()
    """

    def __init__(
        self,
        api: SoloDeskApiClient,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            api: API client used for fetches
            ttl_seconds: Freshness window (defaults to PROFILE_CACHE_TTL_SECONDS)
            clock: Monotonic time source (tests)
        """
        self._api = api
        self._ttl = settings.PROFILE_CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._profile: Optional[UserProfile] = None
        self._fetched_at: Optional[float] = None
        self._inflight: Optional["asyncio.Task[UserProfile]"] = None
        self._generation = 0

    @property
    def is_fresh(self) -> bool:
        if self._profile is None or self._fetched_at is None:
            return False
        return self._clock() - self._fetched_at < self._ttl

    async def get(self) -> UserProfile:
        """
        Cached profile, fetching when missing or stale.

        The mock fallback is returned but not cached, so the next call
        tries the API again.
        """
        if self.is_fresh:
            return self._profile

        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._fetch(self._generation))
        task = self._inflight
        try:
            return await asyncio.shield(task)
        finally:
            if task.done() and self._inflight is task:
                self._inflight = None

    async def _fetch(self, generation: int) -> UserProfile:
        profile = await fetch_user_profile(self._api)
        # Not stored if invalidate() ran while the request was out
        if profile is not MOCK_PROFILE and generation == self._generation:
            self._profile = profile
            self._fetched_at = self._clock()
        return profile

    def invalidate(self) -> None:
        """
        Drop the cached profile; the next get() refetches.

        A fetch already in flight still answers its waiters but its result
        is not cached.
        """
        self._generation += 1
        self._inflight = None
        self._profile = None
        self._fetched_at = None
