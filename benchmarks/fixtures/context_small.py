from __future__ import annotations

from typing import Any


def build_small_context() -> dict[str, Any]:
    """Small context: a page title, a user and five tags."""
    return {
        "title": "Benchmark <page>",
        "user": {"name": "ada lovelace", "admin": True, "visits": 12},
        "tags": ["python", "templates", "mustache", "filters", "speed"],
    }


SMALL_CONTEXT = build_small_context()
