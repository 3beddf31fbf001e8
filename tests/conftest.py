"""Shared fixtures."""

from __future__ import annotations

import pytest

from ghrelay.destinations import ConfigProvider, DestinationGroup, RelayConfig
from helpers import BACKEND_URL, DEFAULT_URL, RecordingSender


@pytest.fixture
def relay_config() -> RelayConfig:
    return RelayConfig(
        default=DEFAULT_URL,
        groups=(
            DestinationGroup(
                name="backend",
                url=BACKEND_URL,
                repositories=frozenset({"api", "worker"}),
            ),
        ),
    )


@pytest.fixture
def provider(relay_config: RelayConfig) -> ConfigProvider:
    return ConfigProvider(relay_config)


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()
