"""Entry points for priming and inspecting the dashboard's GitHub views."""

from __future__ import annotations

import argparse
import json
import sys
import threading
from typing import Callable, Dict, List, Optional

from src.secrets import load_github_secrets

from .cache import ResponseCache, SnapshotStore
from .config import SNAPSHOT_DIR
from .errors import Result
from .github import GithubClient
from .primer import CachePrimer
from .views import (
    FOUNDATION_USERS_PATH,
    LABELS_PATH,
    MILESTONES_PATH,
    REPO_NAMES_PATH,
    register_views,
)


def build_dashboard(snapshot_dir: Optional[str] = SNAPSHOT_DIR) -> tuple[GithubClient, CachePrimer]:
    """Construct the client, both cache tiers and the primer once, wired together."""
    client = GithubClient(load_github_secrets(), ResponseCache())
    primer = CachePrimer(SnapshotStore(snapshot_dir))
    register_views(client, primer)
    return client, primer


def _view_table(client: GithubClient, primer: CachePrimer) -> Dict[str, Callable[[], Result]]:
    return {
        "now": client.this_milestone,
        "next": client.next_milestone,
        "upcoming": client.upcoming_milestones,
        "assigned": client.my_issues_assigned,
        "subscribed": client.my_issues_subscribed,
        "mentioned": client.my_issues_mentioned,
        "created": client.my_issues_created,
        "repo-names": lambda: primer.read(REPO_NAMES_PATH),
        "users": lambda: primer.read(FOUNDATION_USERS_PATH),
        "labels": lambda: primer.read(LABELS_PATH),
        "milestones": lambda: primer.read(MILESTONES_PATH),
    }


VIEW_NAMES = [
    "now", "next", "upcoming", "assigned", "subscribed", "mentioned", "created",
    "repo-names", "users", "labels", "milestones",
]


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Prime and inspect the cached GitHub views behind the build dashboard.",
    )
    parser.add_argument("--snapshot-dir", default=SNAPSHOT_DIR)
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("prime", help="refresh every primed view once")
    show = sub.add_parser("show", help="print one view as JSON")
    show.add_argument("view", choices=VIEW_NAMES)
    sub.add_parser("rate-limit", help="print remaining API quota")
    sub.add_parser("serve", help="keep primed views fresh until interrupted")
    return parser


def _block_until_interrupted() -> None:
    threading.Event().wait()


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point used by both CLI and imports; returns the process exit code."""
    args = build_arg_parser().parse_args(argv)
    client, primer = build_dashboard(args.snapshot_dir)

    if args.command == "prime":
        refreshed = primer.refresh_all()
        print(f"Refreshed {refreshed}/{len(primer.resources)} views.")
        return 0 if refreshed == len(primer.resources) else 1

    if args.command == "show":
        err, value = _view_table(client, primer)[args.view]()
        if err is not None:
            print(f"[error] {args.view}: {err}")
            return 1
        print(json.dumps(value, indent=2, ensure_ascii=False))
        return 0

    if args.command == "rate-limit":
        return 0 if client.log_rate_limit() is not None else 1

    client.log_rate_limit()
    primer.start()
    print(f"Priming {len(primer.resources)} views; Ctrl-C to stop.")
    try:
        _block_until_interrupted()
    except KeyboardInterrupt:
        pass
    finally:
        primer.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
