"""Utilities for loading local (gitignored) dashboard credentials."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_SECRETS_FILENAME = "local_secrets.json"


@dataclass(frozen=True)
class GithubSecrets:
    """OAuth app credentials plus the long-lived server-to-server token."""

    client_id: Optional[str]
    client_secret: Optional[str]
    token: Optional[str]


def _default_secrets_path() -> Path:
    root = Path(__file__).resolve().parents[1]
    return root / DEFAULT_SECRETS_FILENAME


def load_local_secrets(path: Optional[str | Path] = None) -> Dict[str, Any]:
    """Load secrets from a JSON file; return {} when unavailable."""

    candidate = path or os.getenv("LOCAL_SECRETS_FILE") or _default_secrets_path()
    secrets_path = Path(candidate).expanduser()
    if not secrets_path.exists():
        return {}
    try:
        with secrets_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
            return data if isinstance(data, dict) else {}
    except (OSError, json.JSONDecodeError):
        return {}


def load_github_secrets(path: Optional[str | Path] = None) -> GithubSecrets:
    """Resolve GitHub credentials from the secrets file, falling back to env vars."""

    github = load_local_secrets(path).get("github") or {}
    if not isinstance(github, dict):
        github = {}
    return GithubSecrets(
        client_id=github.get("client_id") or os.getenv("GITHUB_CLIENT_ID"),
        client_secret=github.get("client_secret") or os.getenv("GITHUB_CLIENT_SECRET"),
        token=github.get("token") or os.getenv("GITHUB_TOKEN"),
    )


__all__ = [
    "DEFAULT_SECRETS_FILENAME",
    "GithubSecrets",
    "load_local_secrets",
    "load_github_secrets",
]
