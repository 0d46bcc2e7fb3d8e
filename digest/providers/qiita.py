"""Qiita v2 `/items` search client."""

import requests

from ..config import QIITA_API_URL, REQUEST_TIMEOUT
from ..errors import ConfigError, ParseError, RateLimitError, TransportError
from ..log import get_logger
from ..models import Article
from .base import SearchProvider

RATE_LIMIT_TYPE = "rate_limit_exceeded"


class QiitaSearch(SearchProvider):
    name = "qiita"

    def __init__(self, token: str, timeout: float = REQUEST_TIMEOUT, session: requests.Session | None = None):
        if not token:
            raise ConfigError("QIITA_ACCESS_TOKEN is not set")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def search(self, query) -> list[Article]:
        """Fetch one page of `/items` for a SearchQuery."""
        get_logger().debug("qiita: GET items %s", query.params)
        try:
            r = self.session.get(
                f"{QIITA_API_URL}/items",
                params=query.params,
                headers={"Authorization": f"Bearer {self.token}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Qiita request failed: {e}") from e

        if r.status_code == 429:
            raise RateLimitError("Qiita rate limit (HTTP 429)", r.status_code)

        try:
            data = r.json()
        except ValueError as e:
            if r.status_code >= 400:
                raise TransportError(f"Qiita API {r.status_code}: {r.text[:200]}", r.status_code) from e
            raise ParseError(f"Qiita returned non-JSON body: {r.text[:200]}") from e

        if isinstance(data, dict) and data.get("type") == RATE_LIMIT_TYPE:
            raise RateLimitError(f"Qiita rate limit: {data.get('message', '')}", r.status_code)
        if r.status_code >= 400:
            detail = data.get("message", "") if isinstance(data, dict) else ""
            raise TransportError(f"Qiita API {r.status_code}: {detail}", r.status_code)

        return parse_items(data)


def parse_items(data) -> list[Article]:
    """Decode an `/items` payload; a lone object counts as a one-item page.

    Items that do not decode are dropped; the rest of the page is kept.
    """
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ParseError(f"Unexpected Qiita payload type: {type(data).__name__}")
    articles = []
    for item in data:
        try:
            articles.append(Article.from_api(item))
        except ParseError as e:
            get_logger().debug("qiita: skipping item: %s", e)
    return articles
