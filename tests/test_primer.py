"""Tests for src.dashboard.primer covering bypass flags, refresh failures and timers.

Run with:
    pytest tests/test_primer.py --maxfail=1 -v --cov=src.dashboard.primer --cov-report=term-missing
"""

from unittest.mock import MagicMock, patch

from src.dashboard.cache import SnapshotStore
from src.dashboard.errors import NotFoundError, Result, UpstreamError
from src.dashboard.primer import CachePrimer

PATH = "/api/github/foundation-users"


def _primer(view, resources=None):
    primer = CachePrimer(SnapshotStore(), resources or [(PATH, None)], default_interval=60)
    primer.register(PATH, view)
    return primer


def test_default_interval_applies_when_unspecified():
    primer = CachePrimer(SnapshotStore(), [("/a", None), ("/b", 30)], default_interval=3600)
    assert primer.resources == [("/a", 3600), ("/b", 30)]


def test_read_computes_when_no_snapshot():
    view = MagicMock(return_value=Result(value=["ann"]))
    primer = _primer(view)
    assert primer.read(PATH).value == ["ann"]
    view.assert_called_once()


def test_refresh_writes_snapshot_and_consumes_bypass_once(capsys):
    view = MagicMock(return_value=Result(value=["ann", "bob"]))
    primer = _primer(view)

    assert primer.refresh(PATH) is True
    assert primer.store.read(PATH) == ["ann", "bob"]
    assert view.call_count == 1
    assert "refreshed" in capsys.readouterr().out

    # The next read is served from the snapshot; no second recomputation.
    assert primer.read(PATH).value == ["ann", "bob"]
    assert view.call_count == 1


def test_bypass_flag_is_cleared_by_any_read():
    view = MagicMock(return_value=Result(value=["fresh"]))
    primer = _primer(view)
    primer.store.write(PATH, ["stale"])

    primer.bypass_once(PATH)
    assert primer.read(PATH).value == ["fresh"]
    assert primer.read(PATH).value == ["stale"]
    assert view.call_count == 1


def test_failed_refresh_keeps_previous_snapshot(capsys):
    view = MagicMock(return_value=Result(error=UpstreamError("API rate limit exceeded", 403, "/orgs/x/members")))
    primer = _primer(view)
    primer.store.write(PATH, ["ann"])

    assert primer.refresh(PATH) is False
    assert primer.store.read(PATH) == ["ann"]
    assert "updating cache entry for /api/github/foundation-users" in capsys.readouterr().out


def test_refresh_rejects_non_json_values(capsys):
    primer = _primer(MagicMock(return_value=Result(value={"when": object()})))
    assert primer.refresh(PATH) is False
    assert primer.store.read(PATH) is None
    assert "not JSON serializable" in capsys.readouterr().out


def test_unregistered_path_is_not_found():
    primer = CachePrimer(SnapshotStore(), [])
    assert isinstance(primer.read("/api/unknown").error, NotFoundError)


def test_refresh_all_counts_successes():
    primer = CachePrimer(SnapshotStore(), [("/ok", None), ("/bad", None)])
    primer.register("/ok", lambda: Result(value=[1]))
    primer.register("/bad", lambda: Result(error=UpstreamError("boom")))
    assert primer.refresh_all() == 1


@patch("src.dashboard.primer.threading.Timer")
def test_start_refreshes_now_and_arms_daemon_timers(mock_timer):
    view = MagicMock(return_value=Result(value=["ann"]))
    primer = _primer(view, [(PATH, 120)])

    primer.start()
    assert view.call_count == 1
    mock_timer.assert_called_once_with(120, primer._tick, args=(PATH, 120))
    timer = mock_timer.return_value
    assert timer.daemon is True
    timer.start.assert_called_once()

    primer.stop()
    timer.cancel.assert_called_once()


@patch("src.dashboard.primer.threading.Timer")
def test_tick_rearms_even_when_refresh_fails(mock_timer):
    primer = _primer(MagicMock(return_value=Result(error=UpstreamError("boom"))))
    primer._tick(PATH, 60)
    mock_timer.assert_called_once_with(60, primer._tick, args=(PATH, 60))


@patch("src.dashboard.primer.threading.Timer")
def test_no_timers_after_stop(mock_timer):
    primer = _primer(MagicMock(return_value=Result(value=[])))
    primer.stop()
    primer._tick(PATH, 60)
    mock_timer.assert_not_called()
