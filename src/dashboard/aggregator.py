"""Helpers that combine single-resource fetches into cross-repository views."""

from __future__ import annotations

import datetime as dt
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, as_completed, wait
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from .config import FANOUT_MAX_WORKERS, PRIORITY_LABEL

T = TypeVar("T")

_MISSING = object()


def _run_all(func: Callable[[T], Any], items: Sequence[T], max_workers: int) -> List[Future]:
    """Submit one call per item and wait; the first failure cancels whatever is still queued."""
    if not items:
        return []
    workers = max(1, min(max_workers, len(items)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(func, item) for item in items]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in done:
            exc = future.exception()
            if exc is not None:
                for other in pending:
                    other.cancel()
                raise exc
    return futures


def fan_out(
    func: Callable[[T], Any],
    items: Sequence[T],
    max_workers: int = FANOUT_MAX_WORKERS,
) -> List[Any]:
    """Call `func` for every item concurrently and flatten results in completion order.

    List results are concatenated, anything else is appended. If any call
    raises, that exception propagates and no partial collection is returned.
    """
    futures = _run_all(func, items, max_workers)
    collection: List[Any] = []
    for future in as_completed(futures):
        result = future.result()
        if isinstance(result, list):
            collection.extend(result)
        else:
            collection.append(result)
    return collection


def map_concurrently(
    func: Callable[[T], Any],
    items: Sequence[T],
    max_workers: int = FANOUT_MAX_WORKERS,
) -> List[Any]:
    """Like fan_out, but one result per item, in input order."""
    futures = _run_all(func, items, max_workers)
    return [future.result() for future in futures]


def get_field(obj: Any, *path: Any, default: Any = None) -> Any:
    """Walk nested dicts/lists; absent or wrong-typed steps resolve to `default`."""
    current = obj
    for part in path:
        if isinstance(current, dict):
            current = current.get(part, _MISSING)
        elif isinstance(current, list) and isinstance(part, int) and -len(current) <= part < len(current):
            current = current[part]
        else:
            return default
        if current is _MISSING:
            return default
    return current


def dedupe_by(items: Iterable[Any], key: str) -> List[Any]:
    """Return each distinct `item[key]` once, first occurrence first; missing keys are skipped."""
    seen = set()
    unique: List[Any] = []
    for item in items:
        identity = get_field(item, key)
        if identity is None:
            continue
        try:
            if identity in seen:
                continue
            seen.add(identity)
        except TypeError:
            if identity in unique:
                continue
        unique.append(identity)
    return unique


def label_names(issue: Any) -> List[str]:
    labels = get_field(issue, "labels", default=[])
    if not isinstance(labels, list):
        return []
    names = [get_field(label, "name") for label in labels]
    return [name for name in names if isinstance(name, str)]


def has_label(issue: Any, name: str) -> bool:
    return name in label_names(issue)


def partition_by_priority(issues: Iterable[Any], label: str = PRIORITY_LABEL) -> Dict[str, List[Any]]:
    """Split issues into {"p1": [...], "p2": [...]} keeping input order within each side."""
    result: Dict[str, List[Any]] = {"p1": [], "p2": []}
    for issue in issues or []:
        target = result["p1"] if has_label(issue, label) else result["p2"]
        target.append(issue)
    return result


def parse_due_on(raw: Any) -> Optional[dt.datetime]:
    """Parse a GitHub timestamp (`2015-02-01T08:00:00Z`) into an aware datetime."""
    if not isinstance(raw, str) or not raw:
        return None
    try:
        parsed = dt.datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed


def _first_future_index(milestones: Sequence[Any], now: dt.datetime) -> Optional[int]:
    for index, milestone in enumerate(milestones):
        due = parse_due_on(get_field(milestone, "due_on"))
        if due is not None and due > now:
            return index
    return None


def _now(now: Optional[dt.datetime]) -> dt.datetime:
    if now is None:
        return dt.datetime.now(dt.timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=dt.timezone.utc)
    return now


def select_current_milestone(milestones: Sequence[Any], now: Optional[dt.datetime] = None) -> Optional[Any]:
    """First milestone due in the future; the last one when none is (upstream order)."""
    if not milestones:
        return None
    index = _first_future_index(milestones, _now(now))
    return milestones[-1] if index is None else milestones[index]


def select_next_milestone(milestones: Sequence[Any], now: Optional[dt.datetime] = None) -> Optional[Any]:
    """The milestone after the current one, clamped to the last element."""
    if not milestones:
        return None
    index = _first_future_index(milestones, _now(now))
    if index is None:
        return milestones[-1]
    return milestones[min(index + 1, len(milestones) - 1)]


__all__ = [
    "fan_out",
    "map_concurrently",
    "get_field",
    "dedupe_by",
    "label_names",
    "has_label",
    "partition_by_priority",
    "parse_due_on",
    "select_current_milestone",
    "select_next_milestone",
]
