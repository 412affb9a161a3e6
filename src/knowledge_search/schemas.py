"""Pydantic models for the webhook wire format.

The webhook is an external service and every field it returns is optional.
Alternate field names are resolved here, once, when the payload is decoded:

* ``answer`` then ``message`` then :data:`FALLBACK_ANSWER`
* source ``name`` then ``title`` then ``"Reference <n>"`` (1-based)
* source ``url`` then ``link`` then :data:`PLACEHOLDER_URL`

Empty strings and ``null`` count as absent. Malformed metadata fields are
dropped one by one instead of failing the whole response.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

FALLBACK_ANSWER = "No answer could be retrieved."
PLACEHOLDER_URL = "#"


def _first_text(data: Mapping[str, Any], keys: Sequence[str]) -> str | None:
    for key in keys:
        value = data.get(key)
        if not value or isinstance(value, (Mapping, list)):
            continue
        return value if isinstance(value, str) else str(value)
    return None


class SearchRequestBody(BaseModel):
    """Body POSTed to the webhook."""

    query: str = Field(..., min_length=1, description="Trimmed end-user question")
    timestamp: Optional[str] = Field(default=None, description="ISO-8601 submission time")

    @field_validator("query")
    @classmethod
    def _query_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("query must not be blank")
        return value


class ResponseMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    file_count: Optional[int] = Field(default=None, ge=0, alias="fileCount")
    timestamp: Optional[datetime] = None
    processing_time: Optional[float] = Field(default=None, alias="processingTime")

    @field_validator("file_count", "timestamp", "processing_time", mode="wrap")
    @classmethod
    def _drop_malformed(cls, value: Any, handler):
        try:
            return handler(value)
        except ValidationError:
            return None

    @property
    def is_empty(self) -> bool:
        return self.file_count is None and self.timestamp is None and self.processing_time is None


class SourceLink(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    url: str = PLACEHOLDER_URL


class SearchResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    answer: str = FALLBACK_ANSWER
    metadata: Optional[ResponseMetadata] = None
    sources: List[SourceLink] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _resolve_alternate_fields(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        metadata = data.get("metadata")
        raw_sources = data.get("sources")
        entries = raw_sources if isinstance(raw_sources, list) else []
        sources = []
        for index, entry in enumerate(entries, start=1):
            if not isinstance(entry, Mapping):
                entry = {}
            sources.append(
                {
                    "name": _first_text(entry, ("name", "title")) or f"Reference {index}",
                    "url": _first_text(entry, ("url", "link")) or PLACEHOLDER_URL,
                }
            )
        # Build a fresh dict so the caller's payload is never touched.
        return {
            "answer": _first_text(data, ("answer", "message")) or FALLBACK_ANSWER,
            "metadata": metadata if isinstance(metadata, Mapping) else None,
            "sources": sources,
        }

    @property
    def has_sources(self) -> bool:
        return bool(self.sources)


__all__ = [
    "FALLBACK_ANSWER",
    "PLACEHOLDER_URL",
    "ResponseMetadata",
    "SearchRequestBody",
    "SearchResponse",
    "SourceLink",
]
