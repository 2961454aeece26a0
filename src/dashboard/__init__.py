"""GitHub aggregation and caching layer behind the build dashboard."""

from .github import GithubClient
from .runner import build_dashboard, main

__all__ = ["GithubClient", "build_dashboard", "main"]
