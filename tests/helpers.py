"""GitHub payload builders and test doubles."""

from __future__ import annotations

import json
from typing import Any

from ghrelay.errors import TransportError

DEFAULT_URL = "https://chat.example/hook/default"
BACKEND_URL = "https://chat.example/hook/backend"

FULL_SHA = "0123456789abcdef0123456789abcdef01234567"


def push_payload(
    ref: str = "refs/heads/main",
    commits: list[dict[str, Any]] | None = None,
    repo: str = "api",
) -> dict[str, Any]:
    """Build a minimal GitHub ``push`` payload."""
    if commits is None:
        commits = [
            {
                "id": FULL_SHA,
                "message": "Fix login redirect",
                "url": "https://github.com/acme/api/commit/0123456",
            }
        ]
    return {
        "ref": ref,
        "before": "0" * 40,
        "after": "1" * 40,
        "commits": commits,
        "repository": {"name": repo, "url": f"https://github.com/acme/{repo}"},
        "pusher": {"name": "octocat"},
    }


def pr_payload(
    action: str = "opened",
    *,
    merged: bool = False,
    base: str = "main",
    head: str = "feature/login",
    repo: str = "api",
) -> dict[str, Any]:
    """Build a minimal GitHub ``pull_request`` payload."""
    return {
        "action": action,
        "number": 42,
        "pull_request": {
            "title": "Add login page",
            "html_url": f"https://github.com/acme/{repo}/pull/42",
            "url": f"https://api.github.com/repos/acme/{repo}/pulls/42",
            "state": "closed" if action == "closed" else "open",
            "merged": merged,
            "base": {"ref": base, "sha": "b" * 40},
            "head": {"ref": head, "sha": "c" * 40},
        },
        "repository": {"name": repo},
    }


def as_bytes(payload: Any) -> bytes:
    return json.dumps(payload).encode()


class RecordingSender:
    """Sender double that remembers every call and can be told to fail."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[tuple[str, str]] = []

    async def notify(self, destination: str, text: str) -> None:
        self.calls.append((destination, text))
        if self.fail:
            raise TransportError("chat webhook error: 500 boom")
