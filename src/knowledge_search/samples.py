"""Sample webhook payload used by the mock webhook and the UI preview."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def sample_payload(query: str | None = None) -> dict[str, Any]:
    answer = "This is a sample answer. The real webhook response is displayed here."
    if query:
        answer = f"Sample answer for: {query}"
    return {
        "answer": answer,
        "metadata": {
            "fileCount": 3,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "processingTime": 1.23,
        },
        "sources": [
            {"name": "Project workflow guide", "url": "https://example.com/guide"},
            {"name": "Contract template", "url": "https://example.com/template"},
        ],
    }
