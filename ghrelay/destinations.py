"""Repository → chat destination routing."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

import httpx
import yaml

from ghrelay.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_BRANCHES = frozenset({"main", "dev"})

# Older single-destination files only carried this key.
LEGACY_DEFAULT_KEY = "feishu"

WEBHOOK_SCHEMES = frozenset({"http", "https"})


@dataclass(frozen=True)
class DestinationGroup:
    """A named set of repositories sharing one chat destination."""

    name: str
    url: str
    repositories: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class RelayConfig:
    """
    Immutable snapshot of the routing table.

    A new snapshot is built for every reload; instances are never mutated, so
    concurrent readers can keep using an old one safely.
    """

    default: str
    groups: tuple[DestinationGroup, ...] = ()
    branches: frozenset[str] = DEFAULT_BRANCHES

    def resolve(self, repository_name: str) -> str:
        """Return the destination for ``repository_name``, falling back to the default."""
        for group in self.groups:
            if repository_name in group.repositories:
                return group.url
        return self.default


def _require_str(value: Any, what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{what} must be a non-empty string")
    return value.strip()


def _require_url(value: Any, what: str) -> str:
    """Non-empty absolute http(s) URL that httpx can send to."""
    text = _require_str(value, what)
    try:
        url = httpx.URL(text)
    except httpx.InvalidURL as exc:
        raise ConfigError(f"{what} is not a valid URL: {exc}") from exc
    if url.scheme not in WEBHOOK_SCHEMES or not url.host:
        raise ConfigError(f"{what} must be an http(s) URL with a host, got {text!r}")
    return text


def _str_list(value: Any, what: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (str, Mapping)) or not isinstance(value, Iterable):
        raise ConfigError(f"{what} must be a list")
    return [_require_str(item, f"{what} entry") for item in value]


def _parse_group(index: int, raw: Any) -> DestinationGroup:
    if not isinstance(raw, Mapping):
        raise ConfigError(f"groups[{index}] must be a mapping")
    name = str(raw.get("name") or f"group-{index}")
    url = _require_url(raw.get("url"), f"groups[{index}].url")
    repos = _str_list(raw.get("repositories"), f"groups[{index}].repositories")
    return DestinationGroup(name=name, url=url, repositories=frozenset(repos))


def parse_config(data: Any) -> RelayConfig:
    """Build a :class:`RelayConfig` from an already-decoded mapping."""
    if not isinstance(data, Mapping):
        raise ConfigError("configuration root must be a mapping")

    default = data.get("default") or data.get(LEGACY_DEFAULT_KEY)
    default = _require_url(default, "default")

    raw_groups = data.get("groups") or []
    if not isinstance(raw_groups, list):
        raise ConfigError("groups must be a list")
    groups = tuple(_parse_group(i, g) for i, g in enumerate(raw_groups))

    branches = DEFAULT_BRANCHES
    if data.get("branches") is not None:
        branches = frozenset(_str_list(data.get("branches"), "branches"))

    return RelayConfig(default=default, groups=groups, branches=branches)


def load_config(path: str | Path) -> RelayConfig:
    """Read and validate the YAML configuration file at ``path``."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"cannot read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    return parse_config(data or {})


class ConfigProvider:
    """
    Holds the current :class:`RelayConfig` and swaps it atomically on reload.

    ``current()`` always returns a complete snapshot, either the one loaded
    before a reload started or the new one.
    """

    def __init__(self, config: RelayConfig, path: Optional[str | Path] = None):
        self._config = config
        self._path = Path(path) if path is not None else None
        self._lock = threading.Lock()

    @classmethod
    def from_file(cls, path: str | Path) -> "ConfigProvider":
        config = load_config(path)
        logger.info(
            "Loaded destination config from %s (%d groups)", path, len(config.groups)
        )
        return cls(config, path)

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def current(self) -> RelayConfig:
        with self._lock:
            return self._config

    def resolve(self, repository_name: str) -> str:
        return self.current().resolve(repository_name)

    def replace(self, config: RelayConfig) -> None:
        with self._lock:
            self._config = config

    def reload(self) -> bool:
        """
        Reload the configuration file.

        Returns True when a new snapshot was installed. A broken file is
        logged and the previous snapshot stays in effect.
        """
        if self._path is None:
            return False
        try:
            config = load_config(self._path)
        except ConfigError as exc:
            logger.error("Config reload failed, keeping previous config: %s", exc)
            return False
        self.replace(config)
        logger.info(
            "Reloaded destination config from %s (%d groups)",
            self._path,
            len(config.groups),
        )
        return True
