"""Article selection engine."""

from .cascade import CascadeConfig, SelectionCascade
from .history import first_new_article
from .query import TAG_SEARCH, TITLE_SEARCH, UNSCOPED, SearchQuery, build_query
from .weights import pick_interest

__all__ = [
    "CascadeConfig", "SelectionCascade", "first_new_article", "SearchQuery",
    "build_query", "pick_interest", "TAG_SEARCH", "TITLE_SEARCH", "UNSCOPED",
]
