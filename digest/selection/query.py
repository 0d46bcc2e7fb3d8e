"""Qiita search query construction for each cascade strategy."""

from dataclasses import dataclass
from urllib.parse import urlencode

from ..config import MIN_STOCKS, PER_PAGE, QIITA_API_URL

TAG_SEARCH = "tag-search"
TITLE_SEARCH = "title-search"
UNSCOPED = "unscoped"

_SCOPES = {
    TAG_SEARCH: "tag",
    TITLE_SEARCH: "title",
}


@dataclass(frozen=True)
class SearchQuery:
    """One ready-to-issue request against Qiita's `/items` endpoint."""
    query: str
    page: int = 1
    per_page: int = PER_PAGE

    @property
    def params(self) -> dict:
        return {"page": self.page, "per_page": self.per_page, "query": self.query}

    @property
    def url(self) -> str:
        return f"{QIITA_API_URL}/items?{urlencode(self.params)}"


def scoped_terms(topic: str, scope: str) -> list[str]:
    """`"cursor rules"` + `"tag"` -> `["tag:cursor", "tag:rules"]`."""
    return [f"{scope}:{word}" for word in topic.split()]


def build_query(topic: str, strategy: str, page: int = 1,
                min_stocks: int = MIN_STOCKS, per_page: int = PER_PAGE) -> SearchQuery:
    """Build the search for ``strategy`` and ``page`` (1-based).

    Multi-word topics become one scoped term per word; Qiita treats
    space-separated terms as AND. ``unscoped`` ignores the topic and relies on
    the popularity filter alone.
    """
    if page < 1:
        raise ValueError(f"page is 1-based, got {page}")

    parts = [f"stocks:>={min_stocks}"]
    if strategy in _SCOPES:
        if not topic or not topic.strip():
            raise ValueError(f"{strategy} needs a non-empty topic")
        parts.extend(scoped_terms(topic, _SCOPES[strategy]))
    elif strategy != UNSCOPED:
        raise ValueError(f"Unknown search strategy: {strategy}")

    return SearchQuery(query=" ".join(parts), page=page, per_page=per_page)
