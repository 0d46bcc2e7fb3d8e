"""Per-room selection cascade: weighted topic -> tag -> title -> prune -> unscoped.

Each stage pages through search results (page budget from CascadeConfig) and
stops at the first article the room has not seen. Stage order is data, not
code: the topic stages run in ``topic_stages`` order, and the unscoped stage
is always the last resort.
"""

import random
from dataclasses import dataclass, field

from ..config import MIN_STOCKS, PAGE_BUDGET, PER_PAGE
from ..errors import ParseError, RateLimitError, TransportError
from ..log import get_logger
from ..models import GENERIC_LABEL, Article, Interest, Outcome, Room
from ..providers.base import HistoryStore, InterestStore, SearchProvider
from .history import first_new_article
from .query import TAG_SEARCH, TITLE_SEARCH, UNSCOPED, build_query
from .weights import pick_interest


@dataclass
class CascadeConfig:
    """Tunable knobs of the cascade."""
    page_budget: int = PAGE_BUDGET
    per_page: int = PER_PAGE
    min_stocks: int = MIN_STOCKS
    topic_stages: list[str] = field(default_factory=lambda: [TAG_SEARCH, TITLE_SEARCH])
    prune_exhausted: bool = True


class SelectionCascade:
    """Turns a room's interests into at most one unseen article."""

    def __init__(
        self,
        search: SearchProvider,
        history: HistoryStore,
        interests: InterestStore,
        config: CascadeConfig | None = None,
        rng: random.Random | None = None,
    ):
        self.search = search
        self.history = history
        self.interest_store = interests
        self.config = config or CascadeConfig()
        self.rng = rng
        self.logger = get_logger()

    def select(self, room: Room, interests: list[Interest] | None = None) -> Outcome:
        """Run the cascade for ``room``.

        ``interests`` may be passed in when the caller already loaded them in
        bulk; otherwise they are read from the interest store.
        """
        if interests is None:
            interests = self.interest_store.interests(room.room_id)
        outcome = Outcome(room_id=room.room_id)

        usable = [i for i in interests if i.topic.strip() and i.priority > 0]
        if usable:
            interest = pick_interest(usable, self.rng)
            topic = interest.topic.strip()
            self.logger.debug("%s: picked interest %r (priority %d)", room.room_id, topic, interest.priority)

            exhausted = True
            for stage in self.config.topic_stages:
                article, stage_exhausted = self._run_stage(room.room_id, stage, topic)
                if article is not None:
                    outcome.article, outcome.label, outcome.stage = article, topic, stage
                    return outcome
                exhausted = exhausted and stage_exhausted

            # A stage cut short by rate limiting or outages proves nothing about the topic
            if self.config.prune_exhausted and exhausted:
                if self._prune(room.room_id, interest.topic):
                    outcome.pruned.append(interest.topic)

        article, _ = self._run_stage(room.room_id, UNSCOPED)
        if article is not None:
            outcome.article, outcome.label, outcome.stage = article, GENERIC_LABEL, UNSCOPED
        return outcome

    def _run_stage(self, room_id: str, stage: str, topic: str = "") -> tuple[Article | None, bool]:
        """Page through one strategy; first unseen article wins.

        Returns ``(article, exhausted)``. ``exhausted`` is True only when the
        stage ended on an empty page or used its whole page budget having read
        at least one page.
        """
        pages_read = 0
        for page in range(1, self.config.page_budget + 1):
            query = build_query(
                topic, stage, page,
                min_stocks=self.config.min_stocks, per_page=self.config.per_page,
            )
            try:
                articles = self.search.search(query)
            except RateLimitError as e:
                self.logger.warning("%s: rate limited during %s — abandoning stage: %s", room_id, stage, e)
                return None, False
            except (TransportError, ParseError) as e:
                self.logger.debug("%s: %s page %d failed: %s", room_id, stage, page, e)
                continue
            pages_read += 1

            if not articles:
                self.logger.debug("%s: %s exhausted at page %d", room_id, stage, page)
                return None, True

            article = first_new_article(room_id, articles, self.history)
            if article is not None:
                self.logger.debug("%s: %s page %d -> %s", room_id, stage, page, article.url)
                return article, False
        return None, pages_read > 0

    def _prune(self, room_id: str, topic: str) -> bool:
        """Forget an interest whose tag and title searches ran dry."""
        try:
            self.interest_store.delete(room_id, topic)
        except (TransportError, ParseError) as e:
            self.logger.warning("%s: could not remove interest %r: %s", room_id, topic, e)
            return False
        self.logger.info("%s: removed exhausted interest %r", room_id, topic)
        return True
