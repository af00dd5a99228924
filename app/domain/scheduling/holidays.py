"""
Public holiday feed and its 24-hour cache

The feed is the gov.uk bank-holidays JSON document. A failed fetch never
fails the caller: the cache hands back an empty list and does not remember
the failure, so the next call retries.
"""

import asyncio
import logging
from datetime import date
from typing import Optional

import httpx
from pydantic import BaseModel

from ...cache import Cache, cache
from ...config import (
    HOLIDAY_CACHE_TTL_SECONDS,
    HOLIDAY_FETCH_TIMEOUT,
    HOLIDAYS_DIVISION,
    HOLIDAYS_FEED_URL,
)
from ...shared.errors import DependencyFailure

logger = logging.getLogger(__name__)


class PublicHoliday(BaseModel):
    date: date
    title: str


class HolidayFeedClient:
    """Fetches public holidays over HTTP"""

    def __init__(
        self,
        url: str = HOLIDAYS_FEED_URL,
        division: str = HOLIDAYS_DIVISION,
        timeout: float = HOLIDAY_FETCH_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.division = division
        self.timeout = timeout
        self.transport = transport

    async def fetch(self) -> list[PublicHoliday]:
        """
        Download and parse the feed.

        Raises:
            DependencyFailure: On network errors, non-200 responses or a malformed body
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.url)
        except httpx.HTTPError as e:
            raise DependencyFailure(f"Holiday feed unreachable: {e}") from e

        if response.status_code != 200:
            raise DependencyFailure(f"Holiday feed returned HTTP {response.status_code}")

        try:
            events = response.json()[self.division]["events"]
            holidays = [PublicHoliday(date=event["date"], title=event["title"]) for event in events]
        except Exception as e:
            raise DependencyFailure(f"Holiday feed returned an unexpected payload: {e}") from e

        logger.info(f"✅ Fetched {len(holidays)} public holidays ({self.division})")
        return holidays


class HolidayCache:
    """
    Process-wide holiday list with a freshness window.

    Readers within the TTL get the cached list. On a miss one caller fetches
    while concurrent callers wait on the lock and then read the refreshed entry.
    """

    def __init__(
        self,
        feed: HolidayFeedClient,
        store: Optional[Cache] = None,
        ttl: float = HOLIDAY_CACHE_TTL_SECONDS,
    ):
        self.feed = feed
        self.store = store if store is not None else cache
        self.ttl = ttl
        self.cache_key = f"public_holidays:{feed.division}"
        self._lock = asyncio.Lock()

    async def get_holidays(self) -> list[PublicHoliday]:
        cached = self.store.get(self.cache_key)
        if cached is not None:
            return cached

        async with self._lock:
            # Another caller may have refreshed while we waited
            cached = self.store.get(self.cache_key)
            if cached is not None:
                return cached

            try:
                holidays = await self.feed.fetch()
            except DependencyFailure as e:
                logger.warning(f"⚠️ Failed to fetch public holidays, continuing without them: {e.detail}")
                return []

            self.store.set(self.cache_key, holidays, self.ttl)
            return holidays

    async def get_holidays_between(self, start: date, end: date) -> list[PublicHoliday]:
        return [holiday for holiday in await self.get_holidays() if start <= holiday.date <= end]


# Global holiday cache shared by every request in this process
holiday_cache = HolidayCache(feed=HolidayFeedClient())
