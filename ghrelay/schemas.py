"""Typed GitHub webhook payloads and relay outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from ghrelay.errors import ParseError

BRANCH_REF_PREFIX = "refs/heads/"
SHORT_SHA_LENGTH = 7


class Repository(BaseModel):
    """
    Minimal model for the ``repository`` object.
    Only fields used by this app are included.
    """

    name: str
    url: str = ""
    html_url: str = ""


class Commit(BaseModel):
    id: str
    message: str = ""
    url: str = ""

    @property
    def short_id(self) -> str:
        # Slicing never overruns, so ids shorter than 7 chars come back whole.
        return self.id[:SHORT_SHA_LENGTH]


class PushEvent(BaseModel):
    ref: str
    commits: list[Commit] = Field(default_factory=list)
    repository: Repository

    @field_validator("commits", mode="before")
    @classmethod
    def _null_commits(cls, value):
        return [] if value is None else value

    @property
    def branch(self) -> str:
        if self.ref.startswith(BRANCH_REF_PREFIX):
            return self.ref[len(BRANCH_REF_PREFIX):]
        return self.ref

    @property
    def is_branch(self) -> bool:
        return self.ref.startswith(BRANCH_REF_PREFIX)


class PullRequestAction(str, Enum):
    OPENED = "opened"
    SYNCHRONIZE = "synchronize"
    CLOSED = "closed"
    OTHER = "other"

    @classmethod
    def classify(cls, action: str) -> "PullRequestAction":
        try:
            return cls(action)
        except ValueError:
            return cls.OTHER


class BranchRef(BaseModel):
    ref: str
    sha: str = ""


class PullRequest(BaseModel):
    title: str = ""
    url: str = ""
    html_url: str = ""
    state: str = ""
    merged: Optional[bool] = False
    base: BranchRef
    head: Optional[BranchRef] = None

    @property
    def link(self) -> str:
        """Browser link, falling back to the API url."""
        return self.html_url or self.url

    @property
    def base_ref(self) -> str:
        return self.base.ref

    @property
    def head_ref(self) -> str:
        return self.head.ref if self.head else ""

    @property
    def head_sha(self) -> str:
        return self.head.sha if self.head else ""


class PullRequestEvent(BaseModel):
    action: str
    pull_request: PullRequest
    repository: Repository

    @property
    def kind(self) -> PullRequestAction:
        return PullRequestAction.classify(self.action)

    @property
    def merged(self) -> bool:
        return self.kind is PullRequestAction.CLOSED and bool(self.pull_request.merged)


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "payload"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def parse_push(raw: bytes) -> PushEvent:
    """Decode a ``push`` payload, raising :class:`ParseError` when it is unusable."""
    try:
        return PushEvent.model_validate_json(raw)
    except ValidationError as exc:
        raise ParseError(f"invalid push payload: {_describe(exc)}") from exc


def parse_pull_request(raw: bytes) -> PullRequestEvent:
    """Decode a ``pull_request`` payload, raising :class:`ParseError` when it is unusable."""
    try:
        return PullRequestEvent.model_validate_json(raw)
    except ValidationError as exc:
        raise ParseError(f"invalid pull_request payload: {_describe(exc)}") from exc


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    IGNORED = "ignored"
    ERROR = "error"


@dataclass(frozen=True)
class NotificationOutcome:
    """Terminal result of relaying one inbound event."""

    status: OutcomeStatus
    reason: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def success(cls) -> "NotificationOutcome":
        return cls(OutcomeStatus.SUCCESS)

    @classmethod
    def ignored(cls, reason: str) -> "NotificationOutcome":
        return cls(OutcomeStatus.IGNORED, reason=reason)

    @classmethod
    def failed(cls, cause: str) -> "NotificationOutcome":
        return cls(OutcomeStatus.ERROR, error=cause)

    def to_dict(self) -> dict[str, str]:
        body = {"status": self.status.value}
        if self.reason is not None:
            body["reason"] = self.reason
        if self.error is not None:
            body["error"] = self.error
        return body
