"""Framework-independent request handler: guard, fan out, collate, respond."""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime

import httpx

from app.relay.collate import collate, normalize_response
from app.relay.config import RelayConfig
from app.relay.endpoints import build_endpoints
from app.relay.fetch import UpstreamCache, fetch_all

logger = logging.getLogger(__name__)

FORBIDDEN_BODY = "Requests are not allowed from this domain."
_FORBIDDEN_REASON = "Not a whitelisted domain."

JSON_CONTENT_TYPE = "application/json;charset=UTF-8"


@dataclass
class ProxyResponse:
    status_code: int
    body: str
    headers: dict[str, str] = field(default_factory=dict)


def check_origin(origin: str | None, allowed: tuple[str, ...], debug: bool = False) -> bool:
    """Return True if *origin* may use the relay. Debug mode lets everything through."""
    if debug:
        return True
    if not origin:
        return False
    return origin.rstrip("/") in allowed


def forbidden_response() -> ProxyResponse:
    return ProxyResponse(
        status_code=403,
        body=FORBIDDEN_BODY,
        headers={"Content-Type": "text/plain;charset=UTF-8"},
    )


def response_headers(expires_minutes: int, now: datetime | None = None) -> dict[str, str]:
    now = now or datetime.now(timezone.utc)
    expires = now + timedelta(minutes=expires_minutes)
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "GET",
        "Access-Control-Allow-Headers": "*",
        "Cache-Control": "public",
        "Expires": format_datetime(expires, usegmt=True),
        "Content-Type": JSON_CONTENT_TYPE,
    }


def build_response(collated: dict, expires_minutes: int, now: datetime | None = None) -> ProxyResponse:
    return ProxyResponse(
        status_code=200,
        body=json.dumps(collated),
        headers=response_headers(expires_minutes, now),
    )


class WeatherProxy:
    """
    Serve one relay request end to end.

    The API key, whitelist and cache policy all come from *config*; nothing
    is read from the environment here. *transport* replaces the network
    layer of the outbound client (tests pass an ``httpx.MockTransport``).
    """

    def __init__(
        self,
        config: RelayConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.endpoints = build_endpoints(config.api_key, config.base_url)
        self.cache = UpstreamCache(config.cache_ttl) if config.cache_ttl > 0 else None
        self._transport = transport

    async def handle(self, origin: str | None, query_string: str) -> ProxyResponse:
        if not check_origin(origin, self.config.allowed_origins, self.config.debug):
            logger.info("Rejected origin %r: %s", origin, _FORBIDDEN_REASON)
            return forbidden_response()

        responses = await fetch_all(
            self.endpoints,
            query_string,
            timeout=self.config.upstream_timeout,
            cache=self.cache,
            transport=self._transport,
        )
        normalized = [
            normalize_response(resp, ep.url_for(query_string))
            for ep, resp in zip(self.endpoints, responses)
        ]
        return build_response(collate(self.endpoints, normalized), self.config.expires_minutes)
