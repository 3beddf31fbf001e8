"""Yet another chat webhook service"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ghrelay.errors import TransportError

logger = logging.getLogger(__name__)

HTTP_TIMEOUT_SECONDS = 5
RESPONSE_LOG_LIMIT = 500

JSONDict = dict[str, Any]


def _normalize_newlines(s: str) -> str:
    return (s or "").replace("\r\n", "\n").replace("\r", "\n")


def build_text_message(text: str) -> JSONDict:
    """Body of a plain-text custom bot message."""
    return {"msg_type": "text", "content": {"text": _normalize_newlines(text)}}


class Notifier:
    """
    Posts text messages to chat webhook URLs.

    The underlying ``httpx.AsyncClient`` is shared by every request; pass one
    in to control its lifetime (and transport, in tests).
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        timeout: float = HTTP_TIMEOUT_SECONDS,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def notify(self, destination: str, text: str) -> None:
        """
        Send ``text`` to ``destination``.

        Raises
        ------
        TransportError
            On network failure, timeout or a non-2xx response.
        """
        try:
            resp = await self._client.post(destination, json=build_text_message(text))
        except httpx.TimeoutException as exc:
            raise TransportError(f"chat webhook timed out: {exc}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(f"chat webhook request failed: {exc}") from exc

        body = resp.text[:RESPONSE_LOG_LIMIT]
        logger.info("Chat webhook responded %s: %s", resp.status_code, body)
        if not 200 <= resp.status_code < 300:
            raise TransportError(f"chat webhook error: {resp.status_code} {body}")
