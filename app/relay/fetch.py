"""Fan one inbound request out to every upstream endpoint concurrently."""

import asyncio
import logging
import time
from dataclasses import dataclass

import httpx
from cachetools import TTLCache

from app.relay.endpoints import Endpoint, strip_query

logger = logging.getLogger(__name__)

_MAX_CACHE_ENTRIES = 512


@dataclass(frozen=True)
class UpstreamResponse:
    status_code: int
    reason: str
    content_type: str
    url: str
    body: str

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> "UpstreamResponse":
        return cls(
            status_code=response.status_code,
            reason=response.reason_phrase,
            content_type=response.headers.get("content-type", ""),
            url=str(response.url),
            body=response.text,
        )


class UpstreamCache:
    """URL-keyed response cache with a fixed time-to-live.

    Every completed response is stored, whatever its status. A ttl of 0
    turns the cache into a no-op.
    """

    def __init__(self, ttl: int, max_entries: int = _MAX_CACHE_ENTRIES, timer=time.monotonic):
        self.ttl = ttl
        self._entries: TTLCache | None = (
            TTLCache(maxsize=max_entries, ttl=ttl, timer=timer) if ttl > 0 else None
        )

    def __len__(self) -> int:
        return 0 if self._entries is None else len(self._entries)

    def get(self, url: str) -> UpstreamResponse | None:
        if self._entries is None:
            return None
        return self._entries.get(url)

    def put(self, url: str, response: UpstreamResponse) -> None:
        if self._entries is not None:
            self._entries[url] = response


async def _fetch_one(
    client: httpx.AsyncClient, url: str, cache: UpstreamCache | None
) -> UpstreamResponse | None:
    if cache is not None:
        cached = cache.get(url)
        if cached is not None:
            logger.debug("Cache hit: %s", strip_query(url))
            return cached

    try:
        response = await client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.error("Upstream fetch failed for %s: %r", strip_query(url), exc)
        return None

    result = UpstreamResponse.from_httpx(response)
    if cache is not None:
        cache.put(url, result)
    return result


async def fetch_all(
    endpoints: tuple[Endpoint, ...],
    query_string: str,
    *,
    timeout: float,
    cache: UpstreamCache | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[UpstreamResponse | None]:
    """
    GET every endpoint with *query_string* appended, all at once.
    Waits for every request; a transport failure leaves None in that slot
    instead of aborting the batch. Results follow the order of *endpoints*.
    """
    async with httpx.AsyncClient(
        timeout=timeout, follow_redirects=True, transport=transport
    ) as client:
        results = await asyncio.gather(
            *(_fetch_one(client, ep.url_for(query_string), cache) for ep in endpoints)
        )

    failed = sum(1 for r in results if r is None)
    if failed:
        logger.warning("%d of %d upstream requests failed", failed, len(results))
    return list(results)
