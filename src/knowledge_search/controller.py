"""Display-state lifecycle for a single search attempt.

The controller owns the current :data:`~knowledge_search.models.UiState` and
is the only writer of the presentation surface. One submission runs
Idle -> Loading -> Result | Error, and the submit control is restored on
every exit path.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable, Iterator, Protocol
from uuid import uuid4

from knowledge_search.config import Settings, get_settings
from knowledge_search.errors import EmptyQueryError, SearchClientError, TransportError
from knowledge_search.metrics.observability import bind_correlation_id, clear_correlation_id, get_logger
from knowledge_search.models import Error, Idle, Loading, Result, SearchRequest, UiState
from knowledge_search.rendering import render_metadata, render_sources
from knowledge_search.samples import sample_payload
from knowledge_search.schemas import SearchResponse

SUBMIT_LABEL = "Search"
LOADING_LABEL = "Searching..."
EMPTY_QUERY_NOTICE = "Please enter a question."
GENERIC_ERROR_MESSAGE = "An error occurred."
CONNECTIVITY_MESSAGE = "Cannot reach the server.\n\nCheck the webhook URL:\n{endpoint}"

Scheduler = Callable[[float, Callable[[], None]], None]


class SearchClient(Protocol):
    endpoint: str

    def send_request(self, request: SearchRequest) -> SearchResponse: ...


class PresentationSurface(Protocol):
    """Sinks the controller reads from and writes to."""

    query_text: str
    submit_enabled: bool
    submit_label: str
    result_visible: bool
    loading_visible: bool
    result_content_visible: bool
    answer_text: str
    metadata_html: str
    sources_visible: bool
    sources_html: str
    error_visible: bool
    error_message: str

    def notify(self, message: str) -> None: ...

    def scroll_to_results(self) -> None: ...


@dataclass
class ViewState:
    """In-memory presentation surface."""

    query_text: str = ""
    submit_enabled: bool = True
    submit_label: str = SUBMIT_LABEL
    result_visible: bool = False
    loading_visible: bool = False
    result_content_visible: bool = False
    answer_text: str = ""
    metadata_html: str = ""
    sources_visible: bool = False
    sources_html: str = ""
    error_visible: bool = False
    error_message: str = ""
    notifications: list[str] = field(default_factory=list)
    scroll_requests: int = 0

    def notify(self, message: str) -> None:
        self.notifications.append(message)

    def scroll_to_results(self) -> None:
        self.scroll_requests += 1


def timer_scheduler(delay_seconds: float, callback: Callable[[], None]) -> None:
    timer = threading.Timer(delay_seconds, callback)
    timer.daemon = True
    timer.start()


def describe_error(error: BaseException, endpoint: str) -> str:
    """User-facing message for a failed attempt."""

    if isinstance(error, TransportError) and error.is_connectivity:
        return CONNECTIVITY_MESSAGE.format(endpoint=endpoint)
    return str(error) or GENERIC_ERROR_MESSAGE


class PresentationController:
    def __init__(
        self,
        client: SearchClient,
        surface: PresentationSurface,
        settings: Settings | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._client = client
        self._surface = surface
        self._settings = settings or get_settings()
        self._schedule = scheduler or timer_scheduler
        self._logger = get_logger("controller")
        self._state: UiState = Idle()

    @property
    def state(self) -> UiState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._surface.submit_enabled

    def submit(self, raw_query: str | None = None) -> UiState:
        """Run one attempt to completion and return the final state."""

        state = self._state
        for state in self.iter_submit(raw_query):
            pass
        return state

    def iter_submit(self, raw_query: str | None = None) -> Iterator[UiState]:
        """Yield ``Loading`` and then the final state of one attempt.

        ``raw_query`` defaults to the surface's ``query_text``. Blank input
        yields the unchanged current state after notifying the user.
        """

        if raw_query is None:
            raw_query = self._surface.query_text
        try:
            request = SearchRequest.from_raw(raw_query)
        except EmptyQueryError:
            self._logger.info("controller.validation_failed")
            self._surface.notify(EMPTY_QUERY_NOTICE)
            yield self._state
            return

        bind_correlation_id(uuid4().hex)
        try:
            self._logger.info("controller.submit", query=request.query)
            self._enter_loading(request)
            yield self._state
            try:
                response = self._client.send_request(request)
                self._show_result(response)
            except SearchClientError as exc:
                self._show_error(describe_error(exc, self._client.endpoint), exc.kind)
            except Exception as exc:
                self._logger.exception("controller.unexpected_error")
                self._show_error(str(exc) or GENERIC_ERROR_MESSAGE, "error")
        finally:
            self._restore_submit()
            clear_correlation_id()
        yield self._state

    def handle_keydown(self, key: str, *, shift: bool = False, raw_query: str | None = None) -> UiState | None:
        """Enter submits; Shift+Enter is left to the input as a line break."""

        if key != "Enter" or shift:
            return None
        return self.submit(raw_query)

    def show_sample_result(self) -> UiState:
        """Render the built-in sample payload without calling the webhook."""

        self._surface.result_visible = True
        self._show_result(SearchResponse.model_validate(sample_payload()))
        self._restore_submit()
        return self._state

    def _enter_loading(self, request: SearchRequest) -> None:
        surface = self._surface
        surface.submit_enabled = False
        surface.submit_label = LOADING_LABEL
        surface.result_visible = True
        surface.loading_visible = True
        surface.result_content_visible = False
        surface.error_visible = False
        self._state = Loading(request)
        self._schedule(self._settings.scroll_delay_ms / 1000, surface.scroll_to_results)

    def _show_result(self, response: SearchResponse) -> None:
        surface = self._surface
        surface.loading_visible = False
        surface.result_content_visible = True
        surface.error_visible = False
        # Plain-text sink: the answer is never interpreted as markup.
        surface.answer_text = response.answer
        surface.metadata_html = render_metadata(
            response.metadata,
            timezone_name=self._settings.display_timezone,
            timestamp_format=self._settings.timestamp_format,
        )
        surface.sources_visible = response.has_sources
        surface.sources_html = render_sources(response.sources)
        self._state = Result(response)
        self._logger.info("controller.result", source_count=len(response.sources))

    def _show_error(self, message: str, kind: str) -> None:
        surface = self._surface
        surface.loading_visible = False
        surface.result_content_visible = False
        surface.error_visible = True
        surface.error_message = message
        self._state = Error(message=message, kind=kind)
        self._logger.info("controller.error", kind=kind)

    def _restore_submit(self) -> None:
        self._surface.submit_enabled = True
        self._surface.submit_label = SUBMIT_LABEL


__all__ = [
    "CONNECTIVITY_MESSAGE",
    "EMPTY_QUERY_NOTICE",
    "PresentationController",
    "PresentationSurface",
    "SearchClient",
    "ViewState",
    "describe_error",
    "timer_scheduler",
]
