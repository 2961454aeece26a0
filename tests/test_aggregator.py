"""Tests for src.dashboard.aggregator: fan-out, dedup, priority and milestone selection.

Run with coverage:
    pytest tests/test_aggregator.py --maxfail=1 -v --cov=src.dashboard.aggregator --cov-report=term-missing
"""

import datetime as dt
import threading

import pytest

from src.dashboard import aggregator
from src.dashboard.errors import UpstreamError

NOW = dt.datetime(2015, 3, 1, tzinfo=dt.timezone.utc)
PAST = "2015-01-01T08:00:00Z"
FUTURE1 = "2015-03-15T08:00:00Z"
FUTURE2 = "2015-04-15T08:00:00Z"


def test_fan_out_flattens_lists_and_values():
    result = aggregator.fan_out(lambda n: [n] * n if n > 1 else {"n": n}, [1, 2, 3])
    assert sorted(str(item) for item in result) == sorted(["{'n': 1}", "2", "2", "3", "3", "3"])


def test_fan_out_empty_input():
    assert aggregator.fan_out(lambda n: [n], []) == []


def test_fan_out_fails_fast_without_partial_results():
    release = threading.Event()

    def fetch(org):
        if org == "bad":
            raise UpstreamError("Not Found", 404, "/orgs/bad/repos")
        release.wait(0.5)
        return [org]

    with pytest.raises(UpstreamError):
        aggregator.fan_out(fetch, ["a", "bad", "c"], max_workers=3)
    release.set()


def test_map_concurrently_keeps_input_order():
    assert aggregator.map_concurrently(lambda n: n * 10, [3, 1, 2]) == [30, 10, 20]


def test_dedupe_by_keeps_first_occurrence_and_skips_missing():
    users = [{"login": "a"}, {"login": "b"}, {"login": "a"}, {"id": 9}, "junk", {"login": "c"}]
    assert aggregator.dedupe_by(users, "login") == ["a", "b", "c"]


def test_get_field_tolerates_missing_and_wrong_types():
    issue = {"labels": [{"name": "p1"}], "user": None}
    assert aggregator.get_field(issue, "labels", 0, "name") == "p1"
    assert aggregator.get_field(issue, "user", "login", default="?") == "?"
    assert aggregator.get_field(issue, "labels", 5, "name") is None
    assert aggregator.get_field("not a dict", "x", default=0) == 0


def test_partition_by_priority_preserves_order():
    a = {"id": "A", "labels": [{"name": "p1"}]}
    b = {"id": "B", "labels": []}
    c = {"id": "C", "labels": [{"name": "p1"}, {"name": "other"}]}
    result = aggregator.partition_by_priority([a, b, c])
    assert result == {"p1": [a, c], "p2": [b]}


def test_partition_by_priority_tolerates_malformed_labels():
    odd = [{"id": 1}, {"id": 2, "labels": None}, {"id": 3, "labels": [{"color": "f00"}, "p1"]}]
    result = aggregator.partition_by_priority(odd)
    assert result["p1"] == []
    assert [i["id"] for i in result["p2"]] == [1, 2, 3]


def test_parse_due_on():
    assert aggregator.parse_due_on(FUTURE1) == dt.datetime(2015, 3, 15, 8, tzinfo=dt.timezone.utc)
    assert aggregator.parse_due_on(None) is None
    assert aggregator.parse_due_on("soon") is None


def test_current_and_next_milestone_selection():
    milestones = [
        {"number": 1, "due_on": PAST},
        {"number": 2, "due_on": FUTURE1},
        {"number": 3, "due_on": FUTURE2},
    ]
    assert aggregator.select_current_milestone(milestones, NOW)["number"] == 2
    assert aggregator.select_next_milestone(milestones, NOW)["number"] == 3


def test_next_milestone_clamps_to_last():
    milestones = [{"number": 1, "due_on": PAST}, {"number": 2, "due_on": FUTURE1}]
    assert aggregator.select_next_milestone(milestones, NOW)["number"] == 2


def test_all_past_selects_last_listed():
    milestones = [{"number": 1, "due_on": PAST}, {"number": 2, "due_on": None}]
    assert aggregator.select_current_milestone(milestones, NOW)["number"] == 2
    assert aggregator.select_next_milestone(milestones, NOW)["number"] == 2


def test_selection_on_empty_list():
    assert aggregator.select_current_milestone([], NOW) is None
    assert aggregator.select_next_milestone([], NOW) is None
