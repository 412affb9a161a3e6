"""HTTPX client for the search webhook."""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx
from pydantic import ValidationError

from knowledge_search.config import Settings, get_settings
from knowledge_search.errors import (
    DecodeError,
    HttpStatusError,
    RequestTimeoutError,
    SearchClientError,
    TransportError,
)
from knowledge_search.metrics.observability import SearchMetrics, TimedSection, get_logger
from knowledge_search.models import SearchRequest
from knowledge_search.schemas import SearchResponse

JSON_HEADERS = {"Content-Type": "application/json"}


@dataclass
class WebhookClient:
    """Sends one query per call to the configured webhook.

    Every attempt is single-shot: the only bound on it is the configured
    timeout, and ``settings.max_retries`` is not consumed.
    """

    settings: Settings = field(default_factory=get_settings)
    http_client: httpx.Client | None = None

    def __post_init__(self) -> None:
        self._owns_client = self.http_client is None
        self._client = self.http_client or httpx.Client(timeout=self.settings.timeout_seconds)
        self._logger = get_logger("client")
        if self.settings.max_retries:
            self._logger.debug("client.retry_unsupported", max_retries=self.settings.max_retries)

    @property
    def endpoint(self) -> str:
        return self.settings.endpoint

    def send(self, query: str) -> SearchResponse:
        """Trim ``query``, POST it and decode the answer.

        Raises :class:`~knowledge_search.errors.EmptyQueryError` for blank input
        and a :class:`~knowledge_search.errors.SearchClientError` subclass for
        every failed round trip.
        """

        return self.send_request(SearchRequest.from_raw(query))

    def send_request(self, request: SearchRequest) -> SearchResponse:
        payload = request.to_payload()
        self._logger.info("client.request", endpoint=self.endpoint, query=request.query)
        try:
            with TimedSection(SearchMetrics.observe_request) as timer:
                response = self._client.post(
                    self.endpoint,
                    json=payload,
                    headers=JSON_HEADERS,
                    timeout=self.settings.timeout_seconds,
                )
        except httpx.TimeoutException as exc:
            raise self._failed(RequestTimeoutError(self.settings.timeout_seconds)) from exc
        except httpx.NetworkError as exc:
            raise self._failed(
                TransportError(f"Could not reach {self.endpoint}: {exc}", is_connectivity=True)
            ) from exc
        except httpx.TransportError as exc:
            raise self._failed(TransportError(f"Request to {self.endpoint} failed: {exc}")) from exc

        self._logger.info("client.response", status=response.status_code, duration_seconds=timer.elapsed)
        if not response.is_success:
            raise self._failed(HttpStatusError(response.status_code, response.reason_phrase))
        return self._decode(response)

    def _decode(self, response: httpx.Response) -> SearchResponse:
        try:
            data = response.json()
        except ValueError as exc:
            raise self._failed(DecodeError("The response body is not valid JSON")) from exc
        if not isinstance(data, dict):
            raise self._failed(DecodeError(f"Expected a JSON object, got {type(data).__name__}"))
        try:
            parsed = SearchResponse.model_validate(data)
        except ValidationError as exc:  # pragma: no cover - every field is defaulted
            raise self._failed(DecodeError(f"Unexpected response shape: {exc}")) from exc
        SearchMetrics.record_outcome("success")
        return parsed

    def _failed(self, error: SearchClientError) -> SearchClientError:
        SearchMetrics.record_outcome(error.kind)
        self._logger.warning("client.error", kind=error.kind, detail=str(error), endpoint=self.endpoint)
        return error

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "WebhookClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
