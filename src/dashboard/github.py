"""GitHub facade: every named operation the dashboard's routes and primer may call."""

from __future__ import annotations

import datetime as dt
import functools
from typing import Any, Callable, Dict, List, MutableMapping, Optional, Sequence

from src.secrets import GithubSecrets

from . import http_client
from .aggregator import (
    dedupe_by,
    fan_out,
    get_field,
    map_concurrently,
    partition_by_priority,
    select_current_milestone,
    select_next_milestone,
)
from .cache import ResponseCache
from .config import (
    BASE_URL,
    FANOUT_MAX_WORKERS,
    ORGS,
    PLAN_REPO,
    SUPPLEMENTARY_REPOS,
    TEAM_MEMBERS_PER_PAGE,
    UPCOMING_LIMIT,
)
from .errors import GithubError, MalformedResponse, NotFoundError, Result

MY_ISSUE_FILTERS = ("assigned", "subscribed", "mentioned", "created")


def returns_result(method: Callable[..., Any]) -> Callable[..., Result]:
    """Turn a raising operation into one that always resolves to a Result."""

    @functools.wraps(method)
    def wrapper(self: "GithubClient", *args: Any, **kwargs: Any) -> Result:
        try:
            return Result(value=method(self, *args, **kwargs))
        except GithubError as exc:
            print(f"[error] {method.__name__}: {exc}")
            return Result(error=exc)

    return wrapper


class GithubClient:
    """Named GitHub operations backed by a shared response cache."""

    def __init__(
        self,
        secrets: GithubSecrets,
        cache: Optional[ResponseCache] = None,
        orgs: Optional[Sequence[str]] = None,
        supplementary_repos: Optional[Sequence[str]] = None,
        plan_repo: str = PLAN_REPO,
        max_workers: int = FANOUT_MAX_WORKERS,
    ) -> None:
        self.secrets = secrets
        self.token = secrets.token
        self.cache = cache if cache is not None else ResponseCache()
        self.orgs = list(orgs if orgs is not None else ORGS)
        self.supplementary_repos = list(
            supplementary_repos if supplementary_repos is not None else SUPPLEMENTARY_REPOS
        )
        self.plan_repo = plan_repo
        self.max_workers = max_workers

    # -- cached primitives -------------------------------------------------

    def _cached(self, path: str, loader: Callable[[str], Any], *, paged: bool = False) -> Any:
        # A single page and the full paged listing of one path are different queries.
        key = f"{BASE_URL}{path}#all" if paged else f"{BASE_URL}{path}"
        copy = self.cache.get(key)
        if copy is not None:
            return copy
        value = loader(path)
        self.cache.set(key, value)
        return value

    def fetch_json(self, fragment: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Single cached GET with the server token."""
        path = http_client.resource_path(fragment, params)
        return self._cached(path, lambda p: http_client.request_json("GET", p, self.token))

    def fetch_all(self, fragment: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Cached GET that follows pagination to the end."""
        path = http_client.resource_path(fragment, params)
        return self._cached(path, lambda p: http_client.paged_get(p, self.token), paged=True)

    def _fetch_list(self, fragment: str, params: Optional[Dict[str, Any]] = None, *, paged: bool = False) -> List[Any]:
        data = self.fetch_all(fragment, params) if paged else self.fetch_json(fragment, params)
        if not isinstance(data, list):
            raise MalformedResponse(f"expected a list from {fragment}, got {type(data).__name__}")
        return data

    # -- plan repo milestones ----------------------------------------------

    def _milestones(self) -> List[Any]:
        return self._fetch_list(f"/repos/{self.plan_repo}/milestones")

    def _issues_for_milestone(self, number: Any) -> List[Any]:
        if number is None:
            raise MalformedResponse("milestone without a number")
        return self._fetch_list(f"/repos/{self.plan_repo}/issues", {"milestone": number})

    @returns_result
    def get_milestones(self) -> List[Any]:
        return self._milestones()

    @returns_result
    def get_issues_for_milestone(self, number: Any) -> List[Any]:
        return self._issues_for_milestone(number)

    def _prioritized_issues(self, milestone: Any) -> Dict[str, List[Any]]:
        if milestone is None:
            raise NotFoundError("no milestones in plan repo")
        return partition_by_priority(self._issues_for_milestone(get_field(milestone, "number")))

    @returns_result
    def this_milestone(self, now: Optional[dt.datetime] = None) -> Dict[str, List[Any]]:
        return self._prioritized_issues(select_current_milestone(self._milestones(), now))

    @returns_result
    def next_milestone(self, now: Optional[dt.datetime] = None) -> Dict[str, List[Any]]:
        return self._prioritized_issues(select_next_milestone(self._milestones(), now))

    @returns_result
    def upcoming_milestones(self) -> List[Dict[str, Any]]:
        def annotate(milestone: Dict[str, Any]) -> Dict[str, Any]:
            annotated = dict(milestone)
            annotated["issues"] = self._issues_for_milestone(get_field(milestone, "number"))
            return annotated

        upcoming = [m for m in self._milestones()[:UPCOMING_LIMIT] if isinstance(m, dict)]
        return map_concurrently(annotate, upcoming, self.max_workers)

    # -- org / repo enumeration -------------------------------------------

    def _fan_out_paged(self, template: str, targets: Sequence[str]) -> List[Any]:
        return fan_out(
            lambda target: self._fetch_list(template.format(target), paged=True),
            list(targets),
            self.max_workers,
        )

    @returns_result
    def get_repos(self, orgs: Optional[Sequence[str]] = None) -> List[Any]:
        return self._fan_out_paged("/orgs/{}/repos", orgs if orgs is not None else self.orgs)

    @returns_result
    def get_repo_names(self, orgs: Optional[Sequence[str]] = None) -> List[str]:
        repos = self._fan_out_paged("/orgs/{}/repos", orgs if orgs is not None else self.orgs)
        names = [get_field(repo, "full_name") for repo in repos]
        return [name for name in names if isinstance(name, str)] + list(self.supplementary_repos)

    @returns_result
    def get_users_for_orgs(self, orgs: Optional[Sequence[str]] = None) -> List[str]:
        members = self._fan_out_paged("/orgs/{}/members", orgs if orgs is not None else self.orgs)
        return dedupe_by(members, "login")

    @returns_result
    def get_milestones_for_repos(self, repos: Sequence[str]) -> List[str]:
        return dedupe_by(self._fan_out_paged("/repos/{}/milestones", repos), "title")

    @returns_result
    def get_labels_for_repos(self, repos: Sequence[str]) -> List[str]:
        return dedupe_by(self._fan_out_paged("/repos/{}/labels", repos), "name")

    # -- issue queries -----------------------------------------------------

    @returns_result
    def my_issues(self, issue_filter: str) -> Any:
        if issue_filter not in MY_ISSUE_FILTERS:
            raise NotFoundError(f"unknown issue filter {issue_filter!r}")
        return self.fetch_json("/issues", {"filter": issue_filter, "sort": "updated", "per_page": 100})

    def my_issues_assigned(self) -> Result:
        return self.my_issues("assigned")

    def my_issues_subscribed(self) -> Result:
        return self.my_issues("subscribed")

    def my_issues_mentioned(self) -> Result:
        return self.my_issues("mentioned")

    def my_issues_created(self) -> Result:
        return self.my_issues("created")

    @returns_result
    def search(self, q: str, sort: Optional[str] = None, order: Optional[str] = None) -> Any:
        return self.fetch_json(
            "/search/issues",
            {"q": q or "", "sort": sort or "updated", "order": order or "asc"},
        )

    # -- users and teams ---------------------------------------------------

    @returns_result
    def get_user_info(self, username: str) -> Any:
        return self.fetch_json(f"/users/{username}")

    @returns_result
    def team_members(self, team: str, org: Optional[str] = None) -> List[Any]:
        org = org or (self.orgs[0] if self.orgs else self.plan_repo.split("/", 1)[0])
        teams = self._fetch_list(f"/orgs/{org}/teams")
        wanted = (team or "").lower()
        match = next(
            (t for t in teams if str(get_field(t, "name", default="")).lower() == wanted),
            None,
        )
        if match is None or get_field(match, "id") is None:
            raise NotFoundError(f"team {team!r} not found in {org}")

        members = self._fetch_list(
            f"/teams/{match['id']}/members", {"per_page": TEAM_MEMBERS_PER_PAGE}
        )
        print(f"[info] team {team}: {len(members)} members")
        logins = [login for login in (get_field(m, "login") for m in members) if login]
        return fan_out(lambda login: self.fetch_json(f"/users/{login}"), logins, self.max_workers)

    # -- token-scoped calls (never cached) ---------------------------------

    @returns_result
    def get_user_from_token(self, token: str) -> Any:
        return http_client.request_json("GET", "/user", token)

    @returns_result
    def post_issue_with_token(self, token: str, body: Dict[str, Any]) -> Any:
        return http_client.request_json("POST", f"/repos/{self.plan_repo}/issues", token, body)

    def resolve_session_user(self, session: MutableMapping[str, Any]) -> Optional[Any]:
        """Session hook: the GitHub user for `session["token"]`, or None.

        A token GitHub rejects is cleared from the session.
        """
        token = session.get("token")
        if not token:
            return None
        err, user = self.get_user_from_token(token)
        if err is not None:
            session["token"] = None
            return None
        return user

    @returns_result
    def rate_limit(self) -> Any:
        return http_client.request_json("GET", "/rate_limit", self.token)

    def log_rate_limit(self) -> Optional[int]:
        err, data = self.rate_limit()
        if err is not None:
            return None
        remaining = get_field(data, "rate", "remaining")
        print(f"[rate-limit] GitHub API requests left: {remaining}")
        return remaining


__all__ = ["GithubClient", "MY_ISSUE_FILTERS", "returns_result"]
