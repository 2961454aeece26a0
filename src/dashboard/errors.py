"""Error taxonomy for upstream calls and the result value returned to callers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Optional


class GithubError(RuntimeError):
    """Base class for every failure raised by the aggregation layer."""


class TransportError(GithubError):
    """Network, DNS, TLS or timeout failure talking to the API."""


class MalformedResponse(GithubError):
    """The API answered with something that is not the JSON we expect."""


class NotFoundError(GithubError):
    """A lookup that needs a match (team, milestone) found nothing."""


class UpstreamError(GithubError):
    """The API answered with an error payload (includes rate-limit exhaustion)."""

    def __init__(self, message: str, status: Optional[int] = None, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.path = path

    def __str__(self) -> str:
        where = f" for {self.path}" if self.path else ""
        code = f"HTTP {self.status}" if self.status is not None else "error"
        return f"{code}{where}: {self.message}"


@dataclass(frozen=True)
class Result:
    """Outcome of a facade operation: exactly one of error/value is meaningful."""

    error: Optional[BaseException] = None
    value: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __iter__(self) -> Iterator[Any]:
        yield self.error
        yield self.value


__all__ = [
    "GithubError",
    "TransportError",
    "MalformedResponse",
    "NotFoundError",
    "UpstreamError",
    "Result",
]
