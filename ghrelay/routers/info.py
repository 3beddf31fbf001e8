"""Ruter Ingfo?"""

from __future__ import annotations

from textwrap import dedent

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from ghrelay import __version__
from ghrelay.config import Settings

router = APIRouter()


def render_help_text(settings: Settings) -> str:
    """HTTP help for the settings the running app was built with."""
    return dedent(
        f"""
    GitHub → Chat Relay (HTTP Help)

    Endpoints
    ---------
    - GET  /               : Health check
    - GET  /help           : This text
    - POST /webhook/github : GitHub webhook (push, pull_request)

    Config
    ------
    - CONFIG_PATH: {settings.config_path}
    - Push events are relayed for refs/heads/<branch>, PRs by target branch,
      for the branches listed in the config file (default: main, dev).
    """
    ).strip()


@router.get("/")
async def health(request: Request) -> dict:
    """Health check"""
    config = request.app.state.provider.current()
    return {"status": "ok", "version": __version__, "groups": len(config.groups)}


@router.get("/help", response_class=PlainTextResponse)
async def http_help(request: Request) -> str:
    return render_help_text(request.app.state.settings)
