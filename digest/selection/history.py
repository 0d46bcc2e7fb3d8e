"""First-unseen-article scan against a room's delivery history."""

from ..errors import ParseError, TransportError
from ..log import get_logger
from ..models import Article
from ..providers.base import HistoryStore


def first_new_article(room_id: str, articles: list[Article], history: HistoryStore) -> Article | None:
    """Return the first article in ``articles`` not yet sent to ``room_id``.

    Search order is preserved. A lookup that fails for one candidate is
    inconclusive: that candidate is skipped and the scan moves on.
    """
    logger = get_logger()
    for article in articles:
        try:
            seen = history.exists(room_id, article.url)
        except (TransportError, ParseError) as e:
            logger.debug("History lookup failed for %s in %s: %s", article.url, room_id, e)
            continue
        if not seen:
            return article
    return None
