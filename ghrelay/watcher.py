"""Live reload of the destination config file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ghrelay.destinations import ConfigProvider

logger = logging.getLogger(__name__)


class _ConfigFileHandler(FileSystemEventHandler):
    """Reloads the provider whenever its file is written, created or moved into place."""

    def __init__(self, provider: ConfigProvider, target: Path):
        super().__init__()
        self._provider = provider
        self._target = target

    def _matches(self, event: FileSystemEvent) -> bool:
        if event.is_directory:
            return False
        paths = [event.src_path, getattr(event, "dest_path", None)]
        for raw in paths:
            if not raw:
                continue
            if isinstance(raw, bytes):
                raw = raw.decode()
            if Path(raw).resolve() == self._target:
                return True
        return False

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in {"modified", "created", "moved"}:
            return
        if self._matches(event):
            logger.debug("Config file event %s on %s", event.event_type, event.src_path)
            self._provider.reload()


class ConfigWatcher:
    """
    Watch the provider's config file with a watchdog observer.

    Editors often replace files instead of writing in place, so the parent
    directory is watched and events are filtered by path.
    """

    def __init__(self, provider: ConfigProvider):
        if provider.path is None:
            raise ValueError("provider has no file to watch")
        self._provider = provider
        self._target = provider.path.resolve()
        self._observer: Optional[Observer] = None

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        if self._observer is not None:
            return
        observer = Observer()
        observer.schedule(
            _ConfigFileHandler(self._provider, self._target),
            str(self._target.parent),
            recursive=False,
        )
        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.info("Watching %s for changes", self._target)

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        logger.info("Stopped watching %s", self._target)
