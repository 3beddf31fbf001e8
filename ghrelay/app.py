"""the beautiful world start from here."""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from ghrelay import __version__
from ghrelay.config import Settings, settings as default_settings
from ghrelay.destinations import ConfigProvider
from ghrelay.errors import ConfigError
from ghrelay.routers import gh, info
from ghrelay.services.dispatcher import Dispatcher
from ghrelay.services.notifier import Notifier
from ghrelay.watcher import ConfigWatcher

logger = logging.getLogger(__name__)


def _install_reload_signal(
    loop: asyncio.AbstractEventLoop, provider: ConfigProvider
) -> bool:
    """
    Reload ``provider`` on SIGHUP.

    The reload runs as an event loop callback, never inside the interrupted
    frame, so it cannot wait on a lock held by the code it interrupted.
    Returns False where the platform has no SIGHUP.
    """
    if not hasattr(signal, "SIGHUP"):
        return False

    def _on_sighup() -> None:
        logger.info("SIGHUP received, reloading config")
        provider.reload()

    try:
        loop.add_signal_handler(signal.SIGHUP, _on_sighup)
    except (NotImplementedError, RuntimeError):
        return False
    return True


def create_app(
    settings: Optional[Settings] = None,
    *,
    provider: Optional[ConfigProvider] = None,
    notifier: Optional[Notifier] = None,
    reload_on_sighup: bool = False,
) -> FastAPI:
    """
    Build the relay application.

    ``provider`` and ``notifier`` are created on startup when not supplied.
    A config file that cannot be loaded aborts startup with ``ConfigError``.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cfg = provider or ConfigProvider.from_file(settings.config_path)

        owned: Optional[Notifier] = None
        sender = notifier
        if sender is None:
            owned = sender = Notifier(timeout=settings.notify_timeout_seconds)

        watcher: Optional[ConfigWatcher] = None
        if settings.watch_config and cfg.path is not None:
            watcher = ConfigWatcher(cfg)
            watcher.start()

        loop = asyncio.get_running_loop()
        sighup = reload_on_sighup and _install_reload_signal(loop, cfg)

        app.state.provider = cfg
        app.state.dispatcher = Dispatcher(cfg, sender)
        try:
            yield
        finally:
            if sighup:
                loop.remove_signal_handler(signal.SIGHUP)
            if watcher is not None:
                watcher.stop()
            if owned is not None:
                await owned.aclose()

    app = FastAPI(
        title="GitHub → Chat relay",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.include_router(info.router)
    app.include_router(gh.router)
    return app


app = create_app()


def main(settings: Optional[Settings] = None) -> None:
    """
    Load the config, then serve until interrupted.

    A port that cannot be bound is logged by uvicorn, which then exits with
    status 1 on its own.
    """
    settings = settings or default_settings
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        provider = ConfigProvider.from_file(settings.config_path)
    except ConfigError as exc:
        logger.error("Cannot load config: %s", exc)
        sys.exit(1)

    uvicorn.run(
        create_app(settings, provider=provider, reload_on_sighup=True),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )
