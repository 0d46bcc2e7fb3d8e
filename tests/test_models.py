"""Tests for digest/models.py: decoding and outcome/report records."""

import pytest

from digest.errors import ParseError
from digest.models import GENERIC_LABEL, Article, Interest, Outcome, RunReport


class TestArticle:
    def test_from_api(self, sample_item):
        a = Article.from_api(sample_item)
        assert a.title == "Goで並行処理入門"
        assert a.created_at.startswith("2024-05-01")
        assert a.likes_count == 80
        assert a.summary == ""

    def test_rejects_non_dict(self):
        with pytest.raises(ParseError):
            Article.from_api(["not", "a", "dict"])

    def test_bad_numbers(self, sample_item):
        sample_item["stocks_count"] = "many"
        with pytest.raises(ParseError):
            Article.from_api(sample_item)


class TestInterest:
    def test_from_row(self):
        i = Interest.from_row({"room_id": 123, "field_name": "Go", "priority": 6})
        assert (i.room_id, i.topic, i.priority) == ("123", "Go", 6)

    def test_null_priority_is_zero(self):
        assert Interest.from_row({"room_id": "1", "field_name": "Go", "priority": None}).priority == 0


class TestOutcome:
    def test_defaults_to_not_found(self):
        o = Outcome("r1")
        assert not o.found
        assert o.label == GENERIC_LABEL

    def test_found(self, sample_article):
        assert Outcome("r1", sample_article, label="Go").found


class TestRunReport:
    def test_summary(self):
        report = RunReport(processed=3, delivered=["a"], skipped=["b"], failed=["c"])
        text = report.summary()
        assert "Rooms processed: 3" in text
        assert "[+] delivered: 1" in text
        assert "[!] failed:    1" in text

    def test_as_dict(self):
        assert RunReport().as_dict() == {
            "processed": 0, "delivered": [], "skipped": [], "failed": [], "pruned": {},
        }
