"""Tests for digest/selection/cascade.py: the per-room selection cascade."""

from conftest import FakeHistory, FakeInterests, FakeSearch, make_article

from digest.errors import ParseError, RateLimitError, TransportError
from digest.models import GENERIC_LABEL, Interest, Room
from digest.selection.cascade import CascadeConfig, SelectionCascade
from digest.selection.query import TAG_SEARCH, TITLE_SEARCH, UNSCOPED

UNSCOPED_Q = "stocks:>=30"


class FirstPick:
    """rng stub: always draws 0, i.e. the first interest wins."""

    def randrange(self, total):
        return 0


def cascade_for(search, history=None, interests=None, **config):
    return SelectionCascade(
        search,
        history or FakeHistory(),
        interests or FakeInterests(),
        config=CascadeConfig(**config),
        rng=FirstPick(),
    )


class TestScenarios:
    def test_a_second_tag_page_has_new_article(self):
        seen = [make_article(i) for i in range(1, 4)]
        fresh = make_article(4)
        search = FakeSearch({
            ("stocks:>=30 tag:go", 1): seen,
            ("stocks:>=30 tag:go", 2): [fresh],
        })
        history = FakeHistory(seen={("room-a", a.url) for a in seen})
        store = FakeInterests({"room-a": [Interest("room-a", "go", 6), Interest("room-a", "rust", 2)]})

        outcome = cascade_for(search, history, store).select(Room("room-a"))

        assert outcome.article is fresh
        assert outcome.label == "go"
        assert outcome.stage == TAG_SEARCH
        assert store.deleted == []
        assert search.calls == [("stocks:>=30 tag:go", 1), ("stocks:>=30 tag:go", 2)]
        assert not any("title:" in q for q in search.queries())

    def test_b_exhausted_topic_is_pruned_then_unscoped(self):
        popular_seen = make_article(10)
        popular_new = make_article(11)
        search = FakeSearch({
            (UNSCOPED_Q, 1): [popular_seen, popular_new],
        })
        history = FakeHistory(seen={("room-b", popular_seen.url)})
        store = FakeInterests({"room-b": [Interest("room-b", "obscure-topic", 5)]})

        outcome = cascade_for(search, history, store).select(Room("room-b"))

        assert store.deleted == [("room-b", "obscure-topic")]
        assert outcome.pruned == ["obscure-topic"]
        assert outcome.article is popular_new
        assert outcome.label == GENERIC_LABEL
        assert outcome.stage == UNSCOPED
        # Empty first page ends each topic stage early
        assert search.calls == [
            ("stocks:>=30 tag:obscure-topic", 1),
            ("stocks:>=30 title:obscure-topic", 1),
            (UNSCOPED_Q, 1),
        ]

    def test_c_no_interests_unscoped_only_not_found(self):
        pages = {(UNSCOPED_Q, p): [make_article(p)] for p in range(1, 5)}
        search = FakeSearch(pages)
        history = FakeHistory(seen={("room-c", make_article(p).url) for p in range(1, 5)})

        outcome = cascade_for(search, history).select(Room("room-c"))

        assert not outcome.found
        assert outcome.pruned == []
        assert search.calls == [(UNSCOPED_Q, p) for p in range(1, 5)]

    def test_d_rate_limit_aborts_tag_stage_only(self):
        fresh = make_article(5)
        search = FakeSearch({
            ("stocks:>=30 tag:go", 1): RateLimitError("quota"),
            ("stocks:>=30 title:go", 1): [fresh],
        })
        store = FakeInterests({"room-d": [Interest("room-d", "go", 3)]})

        outcome = cascade_for(search, interests=store).select(Room("room-d"))

        assert outcome.article is fresh
        assert outcome.stage == TITLE_SEARCH
        assert search.queries().count("stocks:>=30 tag:go") == 1


class TestPaging:
    def test_transport_error_skips_to_next_page(self):
        fresh = make_article(2)
        search = FakeSearch({
            (UNSCOPED_Q, 1): TransportError("boom"),
            (UNSCOPED_Q, 2): ParseError("bad json"),
            (UNSCOPED_Q, 3): [fresh],
        })
        outcome = cascade_for(search).select(Room("r"))
        assert outcome.article is fresh
        assert [p for _, p in search.calls] == [1, 2, 3]

    def test_page_budget_is_configurable(self):
        pages = {(UNSCOPED_Q, p): [make_article(p)] for p in range(1, 10)}
        history = FakeHistory(seen={("r", make_article(p).url) for p in range(1, 10)})
        search = FakeSearch(pages)

        cascade_for(search, history, page_budget=2).select(Room("r"))
        assert search.calls == [(UNSCOPED_Q, 1), (UNSCOPED_Q, 2)]

    def test_full_budget_per_stage(self):
        """Every topic stage gets four pages before falling through."""
        def full_page(p):
            return [make_article(100 + p)]

        search = FakeSearch({
            **{("stocks:>=30 tag:go", p): full_page(p) for p in range(1, 5)},
            **{("stocks:>=30 title:go", p): full_page(p) for p in range(1, 5)},
        })
        history = FakeHistory(seen={("r", make_article(100 + p).url) for p in range(1, 5)})
        store = FakeInterests({"r": [Interest("r", "go", 1)]})

        outcome = cascade_for(search, history, store).select(Room("r"))

        queries = search.queries()
        assert queries.count("stocks:>=30 tag:go") == 4
        assert queries.count("stocks:>=30 title:go") == 4
        assert store.deleted == [("r", "go")]
        assert not outcome.found


class TestPruning:
    def test_not_pruned_when_title_stage_finds_article(self):
        fresh = make_article(1)
        search = FakeSearch({("stocks:>=30 title:cursor title:rules", 1): [fresh]})
        store = FakeInterests({"r": [Interest("r", "cursor rules", 3)]})

        outcome = cascade_for(search, interests=store).select(Room("r"))

        assert outcome.article is fresh
        assert outcome.label == "cursor rules"
        assert store.deleted == []
        assert "stocks:>=30 tag:cursor tag:rules" in search.queries()

    def test_not_pruned_after_rate_limited_stage(self):
        search = FakeSearch({("stocks:>=30 tag:go", 1): RateLimitError("quota")})
        store = FakeInterests({"r": [Interest("r", "go", 3)]})

        outcome = cascade_for(search, interests=store).select(Room("r"))

        assert store.deleted == []
        assert outcome.pruned == []
        assert (UNSCOPED_Q, 1) in search.calls

    def test_not_pruned_when_no_page_could_be_read(self):
        down = {
            (q, p): TransportError("down")
            for q in ("stocks:>=30 tag:go", "stocks:>=30 title:go")
            for p in range(1, 5)
        }
        store = FakeInterests({"r": [Interest("r", "go", 3)]})

        cascade_for(FakeSearch(down), interests=store).select(Room("r"))
        assert store.deleted == []

    def test_last_interest_can_be_pruned(self):
        store = FakeInterests({"r": [Interest("r", "go", 3)]})
        cascade_for(FakeSearch(), interests=store).select(Room("r"))
        assert store.interests("r") == []

    def test_failed_delete_still_falls_back(self):
        fresh = make_article(9)
        store = FakeInterests({"r": [Interest("r", "go", 3)]})
        store.fail_delete = TransportError("supabase down")
        search = FakeSearch({(UNSCOPED_Q, 1): [fresh]})

        outcome = cascade_for(search, interests=store).select(Room("r"))

        assert outcome.article is fresh
        assert outcome.pruned == []

    def test_pruning_can_be_disabled(self):
        store = FakeInterests({"r": [Interest("r", "go", 3)]})
        cascade_for(FakeSearch(), interests=store, prune_exhausted=False).select(Room("r"))
        assert store.deleted == []


class TestInvariants:
    def test_never_returns_seen_article(self):
        articles = [make_article(i) for i in range(1, 31)]
        seen = {("r", a.url) for a in articles[:29]}
        search = FakeSearch({(UNSCOPED_Q, 1): articles})

        outcome = cascade_for(search, FakeHistory(seen=seen)).select(Room("r"))
        assert outcome.article is articles[29]

    def test_uses_preloaded_interests(self):
        store = FakeInterests({"r": [Interest("r", "stored", 3)]})
        search = FakeSearch()

        cascade_for(search, interests=store).select(Room("r"), [Interest("r", "given", 3)])

        assert "stocks:>=30 tag:given" in search.queries()
        assert "stocks:>=30 tag:stored" not in search.queries()

    def test_blank_topics_use_unscoped_path(self):
        store = FakeInterests({"r": [Interest("r", "   ", 3)]})
        search = FakeSearch()

        cascade_for(search, interests=store).select(Room("r"))

        assert search.calls[0] == (UNSCOPED_Q, 1)
        assert store.deleted == []
