"""Parse → filter → format → route → send, one inbound event at a time."""

from __future__ import annotations

import logging
from typing import Awaitable, Mapping, Optional, Protocol

from ghrelay.destinations import ConfigProvider
from ghrelay.errors import ParseError, TransportError
from ghrelay.schemas import (
    NotificationOutcome,
    OutcomeStatus,
    parse_pull_request,
    parse_push,
)
from ghrelay.services.formatter import (
    format_pull_request,
    format_push,
    supports_action,
)

logger = logging.getLogger(__name__)

EVENT_PUSH = "push"
EVENT_PULL_REQUEST = "pull_request"

IGNORED_EVENT = "unsupported event type"
IGNORED_BRANCH = "branch filtered"
IGNORED_ACTION = "unsupported action"

DELIVERY_HEADER = "x-github-delivery"


class Sender(Protocol):
    def notify(self, destination: str, text: str) -> Awaitable[None]: ...


def _delivery_id(headers: Optional[Mapping[str, str]]) -> str:
    if not headers:
        return "-"
    for key, value in headers.items():
        if key.lower() == DELIVERY_HEADER:
            return value
    return "-"


class Dispatcher:
    """
    Relays GitHub ``push`` and ``pull_request`` events to chat destinations.

    The branch allow-list and the destination table are read from one config
    snapshot per event, so a concurrent reload never mixes two tables.
    """

    def __init__(self, provider: ConfigProvider, sender: Sender):
        self.provider = provider
        self.sender = sender

    async def handle(
        self,
        event_type: Optional[str],
        raw_payload: bytes,
        headers: Optional[Mapping[str, str]] = None,
    ) -> NotificationOutcome:
        event = (event_type or "").strip().lower()
        if event == EVENT_PUSH:
            outcome = await self._handle_push(raw_payload)
        elif event == EVENT_PULL_REQUEST:
            outcome = await self._handle_pull_request(raw_payload)
        else:
            outcome = NotificationOutcome.ignored(IGNORED_EVENT)

        delivery = _delivery_id(headers)
        if outcome.status is OutcomeStatus.ERROR:
            logger.warning("%s event %s failed: %s", event or "unknown", delivery, outcome.error)
        elif outcome.status is OutcomeStatus.IGNORED:
            logger.info("%s event %s ignored: %s", event or "unknown", delivery, outcome.reason)
        else:
            logger.info("%s event %s forwarded", event, delivery)
        return outcome

    async def _handle_push(self, raw_payload: bytes) -> NotificationOutcome:
        try:
            push = parse_push(raw_payload)
        except ParseError as exc:
            return NotificationOutcome.failed(str(exc))

        config = self.provider.current()
        if not push.is_branch or push.branch not in config.branches:
            return NotificationOutcome.ignored(IGNORED_BRANCH)

        text = format_push(push)
        return await self._send(config.resolve(push.repository.name), text)

    async def _handle_pull_request(self, raw_payload: bytes) -> NotificationOutcome:
        try:
            pr = parse_pull_request(raw_payload)
        except ParseError as exc:
            return NotificationOutcome.failed(str(exc))

        config = self.provider.current()
        if pr.pull_request.base_ref not in config.branches:
            return NotificationOutcome.ignored(IGNORED_BRANCH)
        if not supports_action(pr):
            return NotificationOutcome.ignored(IGNORED_ACTION)

        text = format_pull_request(pr)
        return await self._send(config.resolve(pr.repository.name), text)

    async def _send(self, destination: str, text: str) -> NotificationOutcome:
        try:
            await self.sender.notify(destination, text)
        except TransportError as exc:
            return NotificationOutcome.failed(str(exc))
        return NotificationOutcome.success()
