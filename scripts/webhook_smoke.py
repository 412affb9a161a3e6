#!/usr/bin/env python3
from __future__ import annotations

import json
import os
import sys
from datetime import datetime, timezone
from urllib.error import URLError
from urllib.request import Request, urlopen


def main() -> int:
    endpoint = os.getenv("KNOWLEDGE_SEARCH_ENDPOINT", "http://localhost:5678/webhook/ai-search")
    body = json.dumps(
        {"query": "smoke test", "timestamp": datetime.now(timezone.utc).isoformat()}
    ).encode("utf-8")
    request = Request(endpoint, data=body, headers={"Content-Type": "application/json"}, method="POST")
    try:
        with urlopen(request, timeout=10) as r:
            payload = json.loads(r.read().decode("utf-8"))
    except (URLError, ValueError) as exc:
        print(f"Webhook smoke failed: {exc}", file=sys.stderr)
        return 1
    if not isinstance(payload, dict):
        print(f"Webhook smoke failed: expected a JSON object, got {type(payload).__name__}", file=sys.stderr)
        return 1
    print("answer:", payload.get("answer") or payload.get("message"))
    print("Webhook smoke passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
