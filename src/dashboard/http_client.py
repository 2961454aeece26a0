"""HTTP helpers for the GitHub REST API: canonical paths, single requests, pagination."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import parse_qsl, urlencode

import requests

from .config import BASE_URL, MAX_PAGES, REQUEST_TIMEOUT, USER_AGENT
from .errors import MalformedResponse, TransportError, UpstreamError

# GitHub serves page 1 for page=0, so counting from 0 would fetch the first page twice.
FIRST_PAGE = 1
PER_PAGE = 100

SESSION = requests.Session()
SESSION.headers.update(
    {
        "Accept": "application/vnd.github.v3+json",
        "User-Agent": USER_AGENT,
    }
)


def resource_path(fragment: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Return the canonical `/path?k=v` form of a query.

    Parameters from the fragment and from `params` are merged, `None` values are
    dropped and the remainder is sorted and URL-encoded, so two logically
    identical queries always map to the same cache key.
    """
    path = fragment if fragment.startswith("/") else f"/{fragment}"
    path, _, query = path.partition("?")
    path = path.rstrip("/") or "/"
    merged: Dict[str, str] = dict(parse_qsl(query, keep_blank_values=True))
    for key, value in (params or {}).items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = str(value)
    if not merged:
        return path
    return f"{path}?{urlencode(sorted(merged.items()))}"


def auth_headers(token: Optional[str]) -> Dict[str, str]:
    return {"Authorization": f"token {token}"} if token else {}


def error_message(data: Any) -> Optional[str]:
    """Return the error indicator carried by a JSON payload, if any."""
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return None


def log_http_error(status: int, path: str, message: Optional[str]) -> None:
    """Print a short, human-readable message when GitHub returns an error."""
    print(f"[error] HTTP {status} for {path}\n  -> {(message or '')[:300]}")


def send(
    method: str,
    path: str,
    token: Optional[str] = None,
    body: Optional[Dict[str, Any]] = None,
) -> Tuple[int, Any]:
    """Issue one request and return `(status, decoded JSON)`.

    Transport failures become TransportError and undecodable bodies become
    MalformedResponse; HTTP status is left for the caller to judge.
    """
    url = f"{BASE_URL}{path}"
    try:
        resp = SESSION.request(
            method,
            url,
            headers=auth_headers(token),
            json=body,
            timeout=REQUEST_TIMEOUT,
        )
    except requests.RequestException as exc:
        raise TransportError(f"{method} {path}: {exc}") from exc

    try:
        data = resp.json()
    except ValueError as exc:
        snippet = (getattr(resp, "text", "") or "")[:200]
        raise MalformedResponse(f"{method} {path}: non-JSON body {snippet!r}") from exc
    return resp.status_code, data


def request_json(
    method: str,
    path: str,
    token: Optional[str] = None,
    body: Optional[Dict[str, Any]] = None,
) -> Any:
    """Perform a single request and return its JSON, raising on error payloads."""
    status, data = send(method, path, token, body)
    if status >= 400:
        message = error_message(data) or "unexpected response"
        log_http_error(status, path, message)
        raise UpstreamError(message, status, path)
    return data


def paged_get(path: str, token: Optional[str] = None, *, max_pages: int = MAX_PAGES) -> Any:
    """Retrieve pages until the API returns an empty page and return them concatenated.

    A first page that is a JSON object rather than a list is returned verbatim
    (single-object resource) unless it carries an error message. `max_pages`
    bounds the loop; 0 disables the ceiling.
    """
    collection: List[Any] = []
    # n non-empty pages cost n+1 requests: the loop only ends on an empty page.
    page = FIRST_PAGE
    fetched = 0
    while True:
        if max_pages and fetched >= max_pages:
            print(f"[warn] page ceiling {max_pages} reached for {path}; returning {len(collection)} items")
            return collection

        page_path = resource_path(path, {"per_page": PER_PAGE, "page": page})
        status, data = send("GET", page_path, token)
        fetched += 1

        message = error_message(data)
        if status >= 400 or (message and not isinstance(data, list)):
            log_http_error(status, page_path, message)
            raise UpstreamError(message or "unexpected response", status, page_path)

        if isinstance(data, list) and data:
            collection.extend(data)
            page += 1
            continue

        if collection or isinstance(data, list):
            return collection

        # Non-list payload on the first page: a single object, not a listing.
        return data


__all__ = [
    "FIRST_PAGE",
    "PER_PAGE",
    "SESSION",
    "resource_path",
    "auth_headers",
    "error_message",
    "log_http_error",
    "send",
    "request_json",
    "paged_get",
]
