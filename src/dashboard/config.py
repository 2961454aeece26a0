"""Central configuration constants for the dashboard's GitHub aggregation layer."""

from __future__ import annotations

import os
from typing import List, Optional, Tuple

USER_AGENT = "build.webmaker.org"
BASE_URL = "https://api.github.com"
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "30"))
PLAN_REPO = os.getenv("PLAN_REPO", "MozillaFoundation/plan")
ORGS: List[str] = ["MozillaFoundation", "MozillaScience"]
CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", "100"))
CACHE_TTL_SEC = int(os.getenv("CACHE_TTL_SEC", str(5 * 60)))
MAX_PAGES = int(os.getenv("MAX_PAGES", "50"))  # 0 = no cap
FANOUT_MAX_WORKERS = int(os.getenv("FANOUT_MAX_WORKERS", "8"))
UPCOMING_LIMIT = 6
PRIORITY_LABEL = "p1"
TEAM_MEMBERS_PER_PAGE = 100
DEFAULT_REFRESH_SEC = int(os.getenv("DEFAULT_REFRESH_SEC", str(60 * 60)))
SNAPSHOT_DIR = os.getenv("SNAPSHOT_DIR", "./output/snapshots")

_MOZILLA_REPO_NAMES = """
id.webmaker.org webmaker-curriculum snippets teach.webmaker.org goggles.webmaker.org
webmaker-tests sawmill login.webmaker.org openbadges-badgekit webmaker-app
api.webmaker.org popcorn.webmaker.org webmaker-mediasync webmaker.org
webmaker-app-cordova webmaker-metrics nimble mozilla-opennews teach-api
mozillafestival.org call-congress-net-neutrality thimble.webmaker.org
advocacy.mozilla.org privacybadges webmaker-profile-2 call-congress
build.webmaker.org webmaker-landing-pages webliteracymap events.webmaker.org
badgekit-api openbadges-specification make-valet webmaker-auth
webmaker-events-service webmaker-language-picker MakeAPI blog.webmaker.org
webmaker-login-ux webmaker-desktop webmaker-app-publisher badges.mozilla.org
lumberyard webmaker-download-locales webmaker-addons bsd-forms-and-wrappers
popcorn-js hivelearningnetworks.org webmaker-firehose makeapi-client makerstrap
webmaker-app-bot webmaker-screenshot react-i18n webmaker-kits-builder
webmaker-app-guide
"""

SUPPLEMENTARY_REPOS: List[str] = [f"mozilla/{name}" for name in _MOZILLA_REPO_NAMES.split()]

# (resource path, refresh interval in seconds); None = DEFAULT_REFRESH_SEC
PRIMED_RESOURCES: List[Tuple[str, Optional[int]]] = [
    ("/api/github/mozilla-repo-names", None),
    ("/api/github/foundation-users", None),
    ("/api/github/mozilla-labels", None),
    ("/api/github/mozilla-milestones", None),
]

__all__ = [
    "USER_AGENT",
    "BASE_URL",
    "REQUEST_TIMEOUT",
    "PLAN_REPO",
    "ORGS",
    "CACHE_MAX_ENTRIES",
    "CACHE_TTL_SEC",
    "MAX_PAGES",
    "FANOUT_MAX_WORKERS",
    "UPCOMING_LIMIT",
    "PRIORITY_LABEL",
    "TEAM_MEMBERS_PER_PAGE",
    "DEFAULT_REFRESH_SEC",
    "SNAPSHOT_DIR",
    "SUPPLEMENTARY_REPOS",
    "PRIMED_RESOURCES",
]
