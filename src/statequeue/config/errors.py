"""Errors raised while resolving store and HTTP configuration."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when a configuration value cannot be used.

    ``setting`` names the offending key or environment variable when known.
    """

    def __init__(self, message: str, *, setting: str | None = None) -> None:
        super().__init__(message)
        self.setting = setting


class MissingConfigurationError(ConfigurationError):
    """Raised when a required environment variable is unset or blank."""

    def __init__(self, setting: str) -> None:
        super().__init__(f"Missing configuration for: {setting}", setting=setting)
