"""The fixed list of Weatherbit endpoints every request fans out to."""

from dataclasses import dataclass

_HOURLY_WINDOW = 48  # hours
_DAILY_WINDOW = 16  # days

# (name, path, fixed params) in response order
_ENDPOINTS = (
    ("USAGE", "/subscription/usage", ""),
    ("CURRENT", "/current", ""),
    ("HOURLY", "/forecast/hourly", f"hours={_HOURLY_WINDOW}&"),
    ("DAILY", "/forecast/daily", f"days={_DAILY_WINDOW}&"),
    ("ALERTS", "/alerts", ""),
)


@dataclass(frozen=True)
class Endpoint:
    name: str
    url_template: str

    def url_for(self, query_string: str) -> str:
        """Append the caller's query string verbatim."""
        return self.url_template + query_string


def build_endpoints(api_key: str, base_url: str) -> tuple[Endpoint, ...]:
    """
    Bake *api_key* into each endpoint template.
    Every template ends with ``&`` so the forwarded query string can be
    appended directly.
    """
    base = base_url.rstrip("/")
    return tuple(
        Endpoint(name, f"{base}{path}?key={api_key}&{params}")
        for name, path, params in _ENDPOINTS
    )


def strip_query(url: str) -> str:
    """Drop the query string, which carries the API key."""
    return url.split("?", 1)[0]
