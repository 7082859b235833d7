"""
Exception types raised by the hand control package.
"""


class HandControlError(Exception):
    """Base class for all hand control errors."""


class ConfigError(HandControlError):
    """Raised when a configuration document or override is invalid."""
