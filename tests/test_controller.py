"""Tests for the presentation controller state machine."""

from __future__ import annotations

from typing import Callable

import pytest

from knowledge_search.config import Settings
from knowledge_search.controller import (
    EMPTY_QUERY_NOTICE,
    LOADING_LABEL,
    SUBMIT_LABEL,
    PresentationController,
    ViewState,
)
from knowledge_search.errors import DecodeError, HttpStatusError, RequestTimeoutError, TransportError
from knowledge_search.models import Error, Idle, Loading, Result, SearchRequest
from knowledge_search.schemas import FALLBACK_ANSWER, SearchResponse

ENDPOINT = "http://webhook.test/webhook/ai-search"


class StubClient:
    endpoint = ENDPOINT

    def __init__(self, payload: dict | None = None, error: Exception | None = None) -> None:
        self.payload = payload if payload is not None else {}
        self.error = error
        self.requests: list[SearchRequest] = []

    def send_request(self, request: SearchRequest) -> SearchResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return SearchResponse.model_validate(self.payload)


class RecordingScheduler:
    def __init__(self) -> None:
        self.calls: list[tuple[float, Callable[[], None]]] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> None:
        self.calls.append((delay, callback))


def make_controller(client: StubClient, view: ViewState | None = None, **settings_kwargs):
    view = view or ViewState()
    scheduler = RecordingScheduler()
    settings_kwargs.setdefault("display_timezone", "UTC")
    settings = Settings(environment="test", endpoint=ENDPOINT, **settings_kwargs)
    controller = PresentationController(client, view, settings=settings, scheduler=scheduler)
    return controller, view, scheduler


@pytest.mark.parametrize("raw", ["", "   ", "\n\t  \n", None])
def test_blank_query_makes_no_call_and_stays_idle(raw):
    client = StubClient({"answer": "never"})
    view = ViewState(query_text="" if raw is None else raw)
    controller, view, scheduler = make_controller(client, view)

    state = controller.submit(raw)

    assert state == Idle()
    assert client.requests == []
    assert view.notifications == [EMPTY_QUERY_NOTICE]
    assert view.result_visible is False
    assert view.submit_enabled is True
    assert scheduler.calls == []


def test_blank_query_leaves_previous_result_on_screen():
    client = StubClient({"answer": "first"})
    controller, view, _ = make_controller(client)
    controller.submit("first question")

    state = controller.submit("   ")

    assert isinstance(state, Result)
    assert view.answer_text == "first"
    assert len(client.requests) == 1


def test_sends_exactly_one_request_with_trimmed_query():
    client = StubClient({"answer": "ok"})
    controller, _, _ = make_controller(client)

    controller.submit("  hello there \n")

    assert [r.query for r in client.requests] == ["hello there"]


def test_query_read_from_surface_when_not_given():
    client = StubClient({"answer": "ok"})
    controller, view, _ = make_controller(client, ViewState(query_text="  from the box "))

    controller.submit()

    assert client.requests[0].query == "from the box"


def test_loading_state_is_painted_before_the_request():
    client = StubClient({"answer": "done"})
    controller, view, scheduler = make_controller(client, scroll_delay_ms=250)

    steps = controller.iter_submit("question")
    loading = next(steps)

    assert isinstance(loading, Loading)
    assert loading.request.query == "question"
    assert client.requests == []
    assert view.submit_enabled is False
    assert view.submit_label == LOADING_LABEL
    assert view.result_visible and view.loading_visible
    assert not view.result_content_visible and not view.error_visible
    assert [delay for delay, _ in scheduler.calls] == [0.25]
    assert view.scroll_requests == 0

    scheduler.calls[0][1]()
    assert view.scroll_requests == 1

    final = next(steps)
    assert isinstance(final, Result)
    with pytest.raises(StopIteration):
        next(steps)


def test_refund_policy_scenario():
    client = StubClient({"answer": "30 days", "sources": [{"name": "Policy Doc", "url": "https://x/policy"}]})
    controller, view, _ = make_controller(client)

    state = controller.submit("What is the refund policy?")

    assert isinstance(state, Result)
    assert client.requests[0].query == "What is the refund policy?"
    assert view.answer_text == "30 days"
    assert view.sources_visible
    assert view.sources_html.count("<a ") == 1
    assert 'href="https://x/policy"' in view.sources_html
    assert ">Policy Doc</span>" in view.sources_html
    assert view.submit_enabled and view.submit_label == SUBMIT_LABEL
    assert not view.loading_visible and view.result_content_visible and not view.error_visible


def test_answer_rendered_verbatim_without_escaping():
    client = StubClient({"answer": "<b>bold?</b> & more"})
    controller, view, _ = make_controller(client)

    controller.submit("q")

    assert view.answer_text == "<b>bold?</b> & more"


def test_message_and_fallback_answers():
    controller, view, _ = make_controller(StubClient({"message": "via message"}))
    controller.submit("q")
    assert view.answer_text == "via message"

    controller, view, _ = make_controller(StubClient({}))
    controller.submit("q")
    assert view.answer_text == FALLBACK_ANSWER


def test_sources_hidden_when_empty():
    controller, view, _ = make_controller(StubClient({"answer": "a", "sources": []}))
    controller.submit("q")
    assert view.sources_visible is False
    assert view.sources_html == ""


def test_source_labels_fall_back_to_reference_index():
    payload = {"answer": "a", "sources": [{"title": "Handbook", "link": "https://x/h"}, {}]}
    controller, view, _ = make_controller(StubClient(payload))
    controller.submit("q")
    assert ">Handbook</span>" in view.sources_html
    assert ">Reference 2</span>" in view.sources_html
    assert 'href="#"' in view.sources_html


def test_metadata_rendered_and_cleared():
    payload = {"answer": "a", "metadata": {"fileCount": 7, "timestamp": "2024-05-01T12:00:00Z", "processingTime": 2}}
    client = StubClient(payload)
    controller, view, _ = make_controller(client)

    controller.submit("q")
    assert "7 files referenced" in view.metadata_html
    assert "2024/05/01 12:00:00" in view.metadata_html
    assert "2.00s" in view.metadata_html

    client.payload = {"answer": "b"}
    controller.submit("q")
    assert view.metadata_html == ""


def test_rendering_does_not_mutate_payload():
    payload = {"answer": "a", "sources": [{"title": "T"}]}
    controller, _, _ = make_controller(StubClient(payload))
    controller.submit("q")
    assert payload == {"answer": "a", "sources": [{"title": "T"}]}


def test_timeout_reaches_error_state_with_duration():
    client = StubClient(error=RequestTimeoutError(30.0))
    controller, view, _ = make_controller(client)

    state = controller.submit("q")

    assert isinstance(state, Error)
    assert state.kind == "timeout"
    assert "30 seconds" in view.error_message
    assert view.error_visible and not view.loading_visible and not view.result_content_visible
    assert view.submit_enabled and view.submit_label == SUBMIT_LABEL


def test_http_500_reaches_error_state_with_status():
    controller, view, _ = make_controller(StubClient(error=HttpStatusError(500, "Internal Server Error")))

    state = controller.submit("q")

    assert isinstance(state, Error)
    assert "500" in state.message
    assert view.error_message == "HTTP error: 500 Internal Server Error"


def test_connectivity_failure_names_endpoint():
    controller, view, _ = make_controller(StubClient(error=TransportError("refused", is_connectivity=True)))

    controller.submit("q")

    assert view.error_message.startswith("Cannot reach the server.")
    assert ENDPOINT in view.error_message


def test_other_transport_and_decode_errors_keep_their_message():
    controller, view, _ = make_controller(StubClient(error=TransportError("protocol broke")))
    controller.submit("q")
    assert view.error_message == "protocol broke"

    controller, view, _ = make_controller(StubClient(error=DecodeError("The response body is not valid JSON")))
    state = controller.submit("q")
    assert state.kind == "decode"
    assert view.error_message == "The response body is not valid JSON"


def test_unexpected_exception_still_ends_in_error_and_restores_submit():
    controller, view, _ = make_controller(StubClient(error=KeyError()))

    state = controller.submit("q")

    assert isinstance(state, Error)
    assert view.error_visible
    assert view.submit_enabled is True


def test_abandoned_attempt_restores_submit():
    controller, view, _ = make_controller(StubClient({"answer": "a"}))
    steps = controller.iter_submit("q")
    next(steps)
    assert view.submit_enabled is False

    steps.close()

    assert view.submit_enabled is True


def test_enter_submits_and_shift_enter_does_not():
    client = StubClient({"answer": "a"})
    controller, _, _ = make_controller(client)

    assert controller.handle_keydown("Enter", shift=True, raw_query="q") is None
    assert controller.handle_keydown("a", raw_query="q") is None
    assert client.requests == []

    state = controller.handle_keydown("Enter", raw_query="q")
    assert isinstance(state, Result)
    assert len(client.requests) == 1


def test_show_sample_result_renders_without_network():
    client = StubClient()
    controller, view, _ = make_controller(client)

    state = controller.show_sample_result()

    assert isinstance(state, Result)
    assert client.requests == []
    assert view.result_visible and view.result_content_visible
    assert "3 files referenced" in view.metadata_html
    assert view.sources_html.count("<a ") == 2
    assert view.submit_enabled


@pytest.mark.parametrize(
    ("zone", "stamp"),
    [("America/New_York", "0001-01-01T00:00:00Z"), ("Asia/Tokyo", "9999-12-31T23:59:59Z")],
)
def test_out_of_range_timestamp_still_ends_in_result(zone, stamp):
    payload = {"answer": "a", "metadata": {"fileCount": 1, "timestamp": stamp}}
    controller, view, _ = make_controller(StubClient(payload), display_timezone=zone)

    state = controller.submit("q")

    assert isinstance(state, Result)
    assert view.answer_text == "a"
    assert "1 files referenced" in view.metadata_html
    assert stamp[:4] in view.metadata_html
    assert view.submit_enabled


def test_render_failure_ends_in_error_not_loading(monkeypatch):
    def broken_render(*args, **kwargs):
        raise RuntimeError("render broke")

    monkeypatch.setattr("knowledge_search.controller.render_sources", broken_render)
    controller, view, _ = make_controller(StubClient({"answer": "a", "sources": [{"name": "x"}]}))

    state = controller.submit("q")

    assert isinstance(state, Error)
    assert view.error_message == "render broke"
    assert not view.loading_visible
    assert view.submit_enabled
