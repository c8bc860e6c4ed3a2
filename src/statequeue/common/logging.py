"""Logging setup for applications and test sessions using statequeue."""

from __future__ import annotations

import logging
from typing import Final

PACKAGE_LOGGER: Final[str] = "statequeue"


def configure_logging(
    *, level: int = logging.INFO, store_level: int | None = None, force: bool = False
) -> None:
    """Install a stderr handler on the root logger.

    The store only ever logs through ``getLogger(__name__)`` or an injected
    logger. ``store_level`` sets the ``statequeue`` logger on its own, so
    ``logging.DEBUG`` shows aborted-transaction races and compaction without
    debug output from every other library.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        force=force,
    )
    if store_level is not None:
        logging.getLogger(PACKAGE_LOGGER).setLevel(store_level)
