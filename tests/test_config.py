"""Tests for src.dashboard.config ensuring env overrides and defaults work.

Run with coverage to validate configuration handling:
    pytest tests/test_config.py --maxfail=1 -v --cov=src.dashboard.config --cov-report=term-missing
"""

from importlib import reload

import src.dashboard.config as config


def test_config_defaults_are_present():
    assert config.ORGS == ["MozillaFoundation", "MozillaScience"]
    assert config.CACHE_MAX_ENTRIES > 0 and config.CACHE_TTL_SEC > 0
    assert config.UPCOMING_LIMIT == 6
    assert config.PRIORITY_LABEL == "p1"
    assert all(name.startswith("mozilla/") for name in config.SUPPLEMENTARY_REPOS)
    assert "mozilla/build.webmaker.org" in config.SUPPLEMENTARY_REPOS


def test_primed_resources_default_to_hourly_refresh():
    paths = [path for path, _ in config.PRIMED_RESOURCES]
    assert "/api/github/mozilla-repo-names" in paths
    assert config.DEFAULT_REFRESH_SEC == 3600


def test_env_override_for_max_pages(monkeypatch):
    monkeypatch.setenv("MAX_PAGES", "9")
    reloaded = reload(config)
    try:
        assert reloaded.MAX_PAGES == 9
    finally:
        monkeypatch.delenv("MAX_PAGES", raising=False)
        reload(config)
