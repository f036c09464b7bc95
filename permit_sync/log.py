"""Logger construction for the sync service.

Loggers are built from an explicit ``LogConfig`` and handed to whoever needs
them; nothing in the package configures the root logger.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Any

LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

# LogRecord extras rendered as key=value tags
TAG_FIELDS = ("permit_id", "pipeline", "error", "errors")


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable formatter with color-coded levels.

    Colors are auto-disabled when the stream is not a TTY.
    """

    COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, *args, use_colors: bool | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._use_colors = sys.stderr.isatty() if use_colors is None else use_colors

    def _format_level_name(self, record: logging.LogRecord) -> str:
        if not self._use_colors:
            return record.levelname
        color = self.COLORS.get(record.levelno, "")
        if not color:
            return record.levelname
        return f"{color}{record.levelname}{self.RESET}"

    @staticmethod
    def _build_tags(record: logging.LogRecord) -> list[str]:
        tags = []
        for field in TAG_FIELDS:
            value: Any = getattr(record, field, None)
            if value is None or value == []:
                continue
            tags.append(f"{field}={value}")
        return tags

    def format(self, record: logging.LogRecord) -> str:
        prefix = " - ".join(
            [
                datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
                self._format_level_name(record),
                record.name,
            ]
        )
        line = f"{prefix} - {record.getMessage()}"
        tags = self._build_tags(record)
        if tags:
            line = f"{line} [{' '.join(tags)}]"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


@dataclass(frozen=True)
class LogConfig:
    level: str = "info"

    def __post_init__(self):
        if self.level not in LEVELS:
            raise ValueError(f"Unknown log level: {self.level!r}")

    @property
    def levelno(self) -> int:
        return LEVELS[self.level]

    def build_logger(self, name: str = "permit_sync", stream=None) -> logging.Logger:
        """Return ``name`` configured at this level with a single console handler.

        Calling again for the same name replaces the previous handler rather than
        stacking a second one.
        """
        logger = logging.getLogger(name)
        logger.setLevel(self.levelno)
        logger.propagate = False

        for h in list(logger.handlers):
            logger.removeHandler(h)

        stream = stream or sys.stderr
        handler = logging.StreamHandler(stream)
        handler.setFormatter(ConsoleFormatter(use_colors=stream.isatty()))
        logger.addHandler(handler)
        return logger
