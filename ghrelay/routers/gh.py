"""Ruter GH?"""

from __future__ import annotations

from fastapi import APIRouter, Header, Request

from ghrelay.services.dispatcher import Dispatcher

router = APIRouter(prefix="/webhook", tags=["github"])


@router.post("/github")
async def github_webhook(
    request: Request,
    x_github_event: str | None = Header(None),
) -> dict[str, str]:
    """
    GitHub webhook endpoint.

    Always answers 200: the body's ``status`` is ``success``, ``ignored``
    (with ``reason``) or ``error`` (with ``error``). GitHub does not act on
    the status code, so failures are reported in the body only.
    """
    body = await request.body()
    dispatcher: Dispatcher = request.app.state.dispatcher
    outcome = await dispatcher.handle(x_github_event, body, request.headers)
    return outcome.to_dict()
