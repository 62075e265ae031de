"""Turn upstream responses into JSON strings and merge them by endpoint name."""

import json
import logging

from app.relay.endpoints import Endpoint, strip_query
from app.relay.fetch import UpstreamResponse

logger = logging.getLogger(__name__)

_JSON_CONTENT_TYPE = "application/json"


def normalize_response(response: UpstreamResponse | None, url: str) -> str:
    """
    Return a JSON string for one upstream slot.

    JSON responses pass through untouched, whatever their status, since
    Weatherbit puts useful detail in its 4xx JSON bodies. Anything else
    becomes an error object naming the status and the URL without its
    query string. *url* is the requested URL, used when the fetch itself
    failed and there is no response.
    """
    if response is None:
        return json.dumps({"error": f"Upstream request failed: URL: {strip_query(url)}"})

    if _JSON_CONTENT_TYPE in response.content_type.lower():
        return response.body

    return json.dumps(
        {
            "error": (
                f"HTTP status: {response.status_code} {response.reason}: "
                f"URL: {strip_query(response.url)}"
            )
        }
    )


def collate(endpoints: tuple[Endpoint, ...], results: list[str]) -> dict:
    """Parse each normalized result and key it by its endpoint's name."""
    collated: dict = {}
    for endpoint, raw in zip(endpoints, results, strict=True):
        try:
            collated[endpoint.name] = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("Error collating %s: %s", endpoint.name, exc)
            collated[endpoint.name] = {"error": f"Error collating: {exc}"}
    return collated
