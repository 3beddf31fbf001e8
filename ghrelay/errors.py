"""Relay errors."""

from __future__ import annotations


class RelayError(Exception):
    """Base class for every error raised by the relay."""


class ParseError(RelayError):
    """Raised when an inbound payload is malformed or incomplete."""


class TransportError(RelayError):
    """Raised when the outbound chat webhook call fails."""


class ConfigError(RelayError):
    """Raised when the destination configuration cannot be loaded."""


class UnsupportedAction(RelayError):
    """Raised when a pull request action has no message template."""
