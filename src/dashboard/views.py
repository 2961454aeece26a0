"""The primed aggregate views, keyed by the route path that serves them."""

from __future__ import annotations

from typing import Dict

from .errors import MalformedResponse, Result
from .github import GithubClient
from .primer import CachePrimer, View

REPO_NAMES_PATH = "/api/github/mozilla-repo-names"
FOUNDATION_USERS_PATH = "/api/github/foundation-users"
LABELS_PATH = "/api/github/mozilla-labels"
MILESTONES_PATH = "/api/github/mozilla-milestones"


def build_views(client: GithubClient, primer: CachePrimer) -> Dict[str, View]:
    """Return the view callables; labels and milestones read repo names through the primer."""

    def repo_names() -> Result:
        return client.get_repo_names()

    def foundation_users() -> Result:
        return client.get_users_for_orgs()

    def _known_repos() -> Result:
        err, names = primer.read(REPO_NAMES_PATH)
        if err is not None:
            return Result(error=err)
        if not isinstance(names, list):
            return Result(error=MalformedResponse(f"{REPO_NAMES_PATH} is not a list"))
        return Result(value=names)

    def labels() -> Result:
        err, names = _known_repos()
        return Result(error=err) if err is not None else client.get_labels_for_repos(names)

    def milestones() -> Result:
        err, names = _known_repos()
        return Result(error=err) if err is not None else client.get_milestones_for_repos(names)

    return {
        REPO_NAMES_PATH: repo_names,
        FOUNDATION_USERS_PATH: foundation_users,
        LABELS_PATH: labels,
        MILESTONES_PATH: milestones,
    }


def register_views(client: GithubClient, primer: CachePrimer) -> CachePrimer:
    for path, view in build_views(client, primer).items():
        primer.register(path, view)
    return primer


__all__ = [
    "REPO_NAMES_PATH",
    "FOUNDATION_USERS_PATH",
    "LABELS_PATH",
    "MILESTONES_PATH",
    "build_views",
    "register_views",
]
