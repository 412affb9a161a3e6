"""Gradio-based search page for Knowledge Search."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import gradio as gr

from knowledge_search.client import WebhookClient
from knowledge_search.config import Settings, get_settings
from knowledge_search.controller import SUBMIT_LABEL, PresentationController, SearchClient, ViewState

QUERY_PLACEHOLDER = "Enter your question\ne.g. how projects are run, contract templates, etc."
LOADING_TEXT = "🔍 Searching the knowledge base..."


@dataclass
class GradioViewState(ViewState):
    """View state whose notifications surface as Gradio toasts."""

    def notify(self, message: str) -> None:
        super().notify(message)
        gr.Warning(message)


def _browser_scrolls(delay_seconds: float, callback: Callable[[], None]) -> None:  # noqa: ARG001
    # Scrolling happens client-side through the js hook on the submit events.
    return None


def render_updates(view: ViewState) -> tuple:
    """Map the view state onto component updates, in ``build_interface`` output order."""

    return (
        gr.update(value=view.submit_label, interactive=view.submit_enabled),
        gr.update(visible=view.result_visible),
        gr.update(visible=view.loading_visible),
        gr.update(visible=view.result_content_visible),
        gr.update(value=view.answer_text),
        gr.update(value=view.metadata_html),
        gr.update(visible=view.sources_visible),
        gr.update(value=view.sources_html),
        gr.update(value=view.error_message, visible=view.error_visible),
    )


def create_submit_handler(client: SearchClient, settings: Settings):
    def handle_submit(query: str, view: ViewState | None):
        view = view or GradioViewState()
        controller = PresentationController(client, view, settings=settings, scheduler=_browser_scrolls)
        for _ in controller.iter_submit(query):
            yield (*render_updates(view), view)

    return handle_submit


def create_sample_handler(client: SearchClient, settings: Settings):
    def handle_sample(view: ViewState | None):
        view = view or GradioViewState()
        controller = PresentationController(client, view, settings=settings, scheduler=_browser_scrolls)
        controller.show_sample_result()
        return (*render_updates(view), view)

    return handle_sample


def _scroll_js(delay_ms: int) -> str:
    return (
        "() => { setTimeout(() => document.getElementById('result-panel')"
        f"?.scrollIntoView({{behavior: 'smooth'}}), {delay_ms}); }}"
    )


def build_interface(settings: Settings | None = None, client: SearchClient | None = None) -> gr.Blocks:
    settings = settings or get_settings()
    search_client = client or WebhookClient(settings=settings)
    handle_submit = create_submit_handler(search_client, settings)
    handle_sample = create_sample_handler(search_client, settings)

    with gr.Blocks(title="Knowledge Search") as demo:
        gr.Markdown("## Knowledge Search")
        view_state = gr.State(GradioViewState())
        # lines=1 with max_lines>1: Enter submits, Shift+Enter adds a line break.
        query_box = gr.Textbox(label="Question", placeholder=QUERY_PLACEHOLDER, lines=1, max_lines=8)
        with gr.Row():
            search_btn = gr.Button(SUBMIT_LABEL, variant="primary")
            sample_btn = gr.Button("Show sample result", visible=settings.environment == "dev")
        with gr.Column(visible=False, elem_id="result-panel") as result_panel:
            loading_md = gr.Markdown(LOADING_TEXT, visible=False)
            with gr.Column(visible=False) as result_content:
                answer_box = gr.Textbox(label="Answer", interactive=False, lines=4)
                metadata_html = gr.HTML()
                with gr.Column(visible=False) as sources_container:
                    gr.Markdown("### Sources")
                    sources_html = gr.HTML()
            error_box = gr.Textbox(label="Error", interactive=False, visible=False, lines=3)
        gr.Markdown(
            f"Webhook: `{settings.endpoint}`. Set `KNOWLEDGE_SEARCH_ENDPOINT` before launching to change it."
        )

        outputs = [
            search_btn,
            result_panel,
            loading_md,
            result_content,
            answer_box,
            metadata_html,
            sources_container,
            sources_html,
            error_box,
            view_state,
        ]
        scroll_js = _scroll_js(settings.scroll_delay_ms)
        for trigger in (search_btn.click, query_box.submit):
            trigger(fn=None, js=scroll_js)
            trigger(fn=handle_submit, inputs=[query_box, view_state], outputs=outputs)
        sample_btn.click(fn=handle_sample, inputs=view_state, outputs=outputs)

    return demo


def launch(*, settings: Settings | None = None, share: bool = False) -> None:
    """Launch the Gradio interface."""

    settings = settings or get_settings()
    demo = build_interface(settings=settings)
    demo.launch(server_name=settings.ui_host, server_port=settings.ui_port, share=share)


if __name__ == "__main__":
    launch()
