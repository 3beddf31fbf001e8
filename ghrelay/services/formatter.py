"""Chat summaries for GitHub push and pull request events."""

from __future__ import annotations

from typing import Callable

from ghrelay.errors import UnsupportedAction
from ghrelay.schemas import PullRequestAction, PullRequestEvent, PushEvent

PUSH_HEADER = "[{repo}] new push to branch {branch} ({repo_url}):"
PUSH_COMMIT_LINE = "- {sha}: {message} ({url})"

PR_TEMPLATE = (
    "[{repo}] {label}: {title}\n"
    "{head} → {base}\n"
    "{link}"
)

PR_LABEL_OPENED = "new PR"
PR_LABEL_UPDATED = "PR updated"
PR_LABEL_MERGED = "PR merged"
PR_LABEL_CLOSED = "PR closed"


def format_push(event: PushEvent) -> str:
    """
    Header line plus one line per commit, in payload order.

    A push without commits (e.g. a branch created from an existing sha)
    yields the header alone.
    """
    lines = [
        PUSH_HEADER.format(
            repo=event.repository.name,
            branch=event.branch,
            repo_url=event.repository.url or event.repository.html_url,
        )
    ]
    for commit in event.commits:
        lines.append(
            PUSH_COMMIT_LINE.format(
                sha=commit.short_id,
                message=commit.message,
                url=commit.url,
            )
        )
    return "\n".join(lines)


def _closed_label(event: PullRequestEvent) -> str:
    return PR_LABEL_MERGED if event.merged else PR_LABEL_CLOSED


LABELS: dict[PullRequestAction, Callable[[PullRequestEvent], str]] = {
    PullRequestAction.OPENED: lambda _event: PR_LABEL_OPENED,
    PullRequestAction.SYNCHRONIZE: lambda _event: PR_LABEL_UPDATED,
    PullRequestAction.CLOSED: _closed_label,
}


def supports_action(event: PullRequestEvent) -> bool:
    return event.kind in LABELS


def format_pull_request(event: PullRequestEvent) -> str:
    labeler = LABELS.get(event.kind)
    if labeler is None:
        raise UnsupportedAction(f"no template for pull_request action {event.action!r}")
    pr = event.pull_request
    return PR_TEMPLATE.format(
        repo=event.repository.name,
        label=labeler(event),
        title=pr.title,
        head=pr.head_ref or "?",
        base=pr.base_ref,
        link=pr.link,
    )
