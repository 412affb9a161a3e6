"""Command-line entry points for Knowledge Search."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Sequence

from pydantic import ValidationError

from knowledge_search.client import WebhookClient
from knowledge_search.config import Settings, get_settings
from knowledge_search.controller import describe_error
from knowledge_search.errors import EmptyQueryError, SearchClientError
from knowledge_search.metrics.observability import configure_logging
from knowledge_search.rendering import format_timestamp
from knowledge_search.schemas import SearchResponse


def _settings_from_args(args: argparse.Namespace) -> Settings:
    override: dict[str, object] = {}
    if getattr(args, "endpoint", None):
        override["endpoint"] = args.endpoint
    if getattr(args, "timeout_ms", None) is not None:
        override["timeout_ms"] = args.timeout_ms
    if not override:
        return get_settings()
    return get_settings({**get_settings().model_dump(), **override})


def format_response(response: SearchResponse, settings: Settings) -> str:
    lines = [response.answer]
    metadata = response.metadata
    if metadata is not None and not metadata.is_empty:
        lines.append("")
        if metadata.file_count is not None:
            lines.append(f"Files referenced: {metadata.file_count}")
        if metadata.timestamp is not None:
            stamp = format_timestamp(metadata.timestamp, timezone_name=settings.display_timezone, fmt=settings.timestamp_format)
            lines.append(f"Answered at: {stamp}")
        if metadata.processing_time is not None:
            lines.append(f"Processing time: {metadata.processing_time:.2f}s")
    if response.sources:
        lines.append("")
        lines.append("Sources:")
        for index, source in enumerate(response.sources, start=1):
            lines.append(f"[{index}] {source.name} <{source.url}>")
    return "\n".join(lines)


def _run_ask(args: argparse.Namespace) -> int:
    settings = _settings_from_args(args)
    with WebhookClient(settings=settings) as client:
        try:
            response = client.send(args.question)
        except EmptyQueryError:
            print("Please enter a question.", file=sys.stderr)
            return 2
        except SearchClientError as exc:
            print(describe_error(exc, client.endpoint), file=sys.stderr)
            return 1
    if args.json:
        print(json.dumps(response.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False))
    else:
        print(format_response(response, settings))
    return 0


def _run_ui(args: argparse.Namespace) -> int:
    from knowledge_search.ui.app import launch

    launch(settings=_settings_from_args(args), share=args.share)
    return 0


def _run_mock_webhook(args: argparse.Namespace) -> int:
    import uvicorn

    from knowledge_search.webhook.app import create_app

    settings = get_settings()
    uvicorn.run(
        create_app(settings=settings),
        host=args.host or settings.mock_host,
        port=args.port or settings.mock_port,
    )
    return 0


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ask questions against a knowledge search webhook.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ask = subparsers.add_parser("ask", help="Send one question and print the answer")
    ask.add_argument("question", help="Question to send")
    ask.add_argument("--endpoint", type=str, default=None, help="Override the webhook URL")
    ask.add_argument("--timeout-ms", type=int, default=None, help="Override the request timeout in milliseconds")
    ask.add_argument("--json", action="store_true", help="Print the decoded response as JSON")
    ask.set_defaults(handler=_run_ask)

    ui = subparsers.add_parser("ui", help="Launch the Gradio search page")
    ui.add_argument("--endpoint", type=str, default=None, help="Override the webhook URL")
    ui.add_argument("--share", action="store_true", help="Create a public Gradio share link")
    ui.set_defaults(handler=_run_ui)

    mock = subparsers.add_parser("mock-webhook", help="Serve the mock webhook for local development")
    mock.add_argument("--host", type=str, default=None)
    mock.add_argument("--port", type=int, default=None)
    mock.set_defaults(handler=_run_mock_webhook)

    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        configure_logging(get_settings().log_level)
        return args.handler(args)
    except ValidationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    sys.exit(main())
