"""Tool-scoped logging helpers.

Records carry a ``tool`` attribute so a single stream can be filtered per
tool. Output goes to stderr; stdout belongs to the stdio protocol channel.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [tool=%(tool)s] %(name)s: %(message)s"

logger = logging.getLogger(__name__)


class ToolFilter(logging.Filter):
    """Ensure every log record has a tool attribute."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "tool"):
            record.tool = "-"
        return True


def configure_logging(level: str | int = logging.INFO) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    tool_filter = ToolFilter()
    for handler in root_logger.handlers:
        if not any(isinstance(existing, ToolFilter) for existing in handler.filters):
            handler.addFilter(tool_filter)


def log_tool(tool: str, message: str, *args: object) -> None:
    logger.info(message, *args, extra={"tool": tool})


__all__ = ["LOG_FORMAT", "ToolFilter", "configure_logging", "log_tool"]
