"""Logging helpers: JSON-lines diagnostics and the human build log.

Two channels:
- `get_logger()` emits structured JSON lines on stderr for internal diagnostics.
- `BuildLog` prints the platform-style build transcript (`-----> topic`,
  indented detail lines) through a rich console.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from rich.console import Console

INDENT = " " * 7


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def get_logger(name: str = "node_buildpack") -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
        logger.setLevel(os.environ.get("NODE_BUILDPACK_LOG_LEVEL", "WARNING").upper())
    return logger


class BuildLog:
    """Build transcript printer.

    Markup and highlighting are disabled so npm output and user-provided
    strings are printed verbatim.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(highlight=False, soft_wrap=True)

    def _emit(self, text: str) -> None:
        self.console.print(text, markup=False, highlight=False)

    def topic(self, msg: str) -> None:
        self._emit(f"-----> {msg}")

    def info(self, msg: str) -> None:
        self._emit(f"{INDENT}{msg}")

    def lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.info(line.rstrip("\n"))

    def protip(self, msg: str) -> None:
        self._emit(f"-----> PRO TIP: {msg}")

    def dump(self, path: Path) -> None:
        if not path.exists():
            return
        self.topic(f"Contents of {path.name}")
        self.lines(path.read_text(encoding="utf-8", errors="replace").splitlines())
