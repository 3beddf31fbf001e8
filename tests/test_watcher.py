"""Tests for config file live reload."""

from __future__ import annotations

import time
from pathlib import Path

import pytest
from watchdog.events import FileDeletedEvent, FileModifiedEvent, FileMovedEvent

from ghrelay.destinations import ConfigProvider, RelayConfig
from ghrelay.watcher import ConfigWatcher, _ConfigFileHandler


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text("default: https://chat.example/one\n", encoding="utf-8")
    return path


def _rewrite(path: Path, url: str) -> None:
    path.write_text(f"default: {url}\n", encoding="utf-8")


def test_handler_reloads_on_modify(config_file: Path) -> None:
    provider = ConfigProvider.from_file(config_file)
    handler = _ConfigFileHandler(provider, config_file.resolve())

    _rewrite(config_file, "https://chat.example/two")
    handler.on_any_event(FileModifiedEvent(str(config_file)))

    assert provider.current().default == "https://chat.example/two"


def test_handler_reloads_when_file_is_moved_into_place(config_file: Path) -> None:
    provider = ConfigProvider.from_file(config_file)
    handler = _ConfigFileHandler(provider, config_file.resolve())

    _rewrite(config_file, "https://chat.example/two")
    tmp = config_file.with_name("config.yaml.swp")
    handler.on_any_event(FileMovedEvent(str(tmp), str(config_file)))

    assert provider.current().default == "https://chat.example/two"


def test_handler_ignores_other_files_and_deletes(config_file: Path) -> None:
    provider = ConfigProvider.from_file(config_file)
    handler = _ConfigFileHandler(provider, config_file.resolve())
    _rewrite(config_file, "https://chat.example/two")

    handler.on_any_event(FileModifiedEvent(str(config_file.with_name("other.yaml"))))
    handler.on_any_event(FileDeletedEvent(str(config_file)))

    assert provider.current().default == "https://chat.example/one"


def test_watcher_requires_a_file() -> None:
    provider = ConfigProvider(RelayConfig(default="https://chat.example/x"))
    with pytest.raises(ValueError):
        ConfigWatcher(provider)


def test_watcher_picks_up_changes(config_file: Path) -> None:
    provider = ConfigProvider.from_file(config_file)
    watcher = ConfigWatcher(provider)
    watcher.start()
    try:
        assert watcher.running
        _rewrite(config_file, "https://chat.example/two")
        deadline = time.monotonic() + 5
        while time.monotonic() < deadline:
            if provider.current().default == "https://chat.example/two":
                break
            time.sleep(0.05)
    finally:
        watcher.stop()

    assert not watcher.running
    assert provider.current().default == "https://chat.example/two"
