"""Domain models shared by the client and the presentation layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Union

from knowledge_search.errors import EmptyQueryError

if TYPE_CHECKING:  # pragma: no cover
    from knowledge_search.schemas import SearchResponse


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SearchRequest:
    """A single query submission, created fresh for every send."""

    query: str
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if not self.query or self.query != self.query.strip():
            raise EmptyQueryError("SearchRequest.query must be non-empty and trimmed")

    @classmethod
    def from_raw(cls, raw_query: str | None) -> "SearchRequest":
        query = (raw_query or "").strip()
        if not query:
            raise EmptyQueryError()
        return cls(query=query)

    def to_payload(self) -> dict[str, str]:
        return {
            "query": self.query,
            "timestamp": self.timestamp.isoformat().replace("+00:00", "Z"),
        }


@dataclass(frozen=True)
class Idle:
    """Input editable, submit enabled, result panel hidden."""


@dataclass(frozen=True)
class Loading:
    """A request is in flight."""

    request: SearchRequest


@dataclass(frozen=True)
class Result:
    """The webhook answered and the response has been rendered."""

    response: "SearchResponse"


@dataclass(frozen=True)
class Error:
    """The attempt failed; ``message`` is what the user sees."""

    message: str
    kind: str = "error"


UiState = Union[Idle, Loading, Result, Error]

__all__ = ["Error", "Idle", "Loading", "Result", "SearchRequest", "UiState"]
