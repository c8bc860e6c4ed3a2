from __future__ import annotations

from .logging import PACKAGE_LOGGER, configure_logging

__all__ = ["PACKAGE_LOGGER", "configure_logging"]
