"""Logging helpers for resource set diagnostics."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from resource_toolkit.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [root=%(root_path)s] %(message)s"


class ResourceContextFilter(logging.Filter):
    """Attach the resource root path to log records when missing."""

    def __init__(self, root_path: str = "-") -> None:
        super().__init__()
        self.root_path = root_path

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject root_path into the log record."""
        if not hasattr(record, "root_path"):
            record.root_path = self.root_path
        return True


def install_resource_log_filter(
    targets: Iterable[logging.Filterer] | None = None, root_path: str = "-"
) -> None:
    """Install resource context filters for structured logging.

    Args:
        targets: Optional loggers or handlers to attach the filter to. Defaults to the
            handlers of the ``resource_toolkit`` package logger.
        root_path: Value stamped on records that do not carry one.
    """
    filterers = (
        list(targets) if targets is not None else logging.getLogger("resource_toolkit").handlers
    )
    for filterer in filterers:
        if any(isinstance(flt, ResourceContextFilter) for flt in filterer.filters):
            continue
        filterer.addFilter(ResourceContextFilter(root_path))


def configure_logging(settings: Settings) -> logging.Logger:
    """Configure the package logger from settings and return it."""
    logger = logging.getLogger("resource_toolkit")
    logger.setLevel(settings.log_level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    install_resource_log_filter(root_path=settings.root_path or "-")
    return logger
