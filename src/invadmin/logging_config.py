from __future__ import annotations

import json
import logging
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

_EVENT = re.compile(r"([a-z][a-z0-9_]*)(?:\s+|$)")
_FIELD = re.compile(r"(?:^|\s)([a-z][a-z0-9_]*)=")


def split_event(message: str) -> tuple[str | None, dict[str, str]]:
    """
    Break an ``event key=value ...`` line into its parts.

    Values run until the next ``key=`` so they may contain spaces.
    Messages that do not follow the pattern give ``(None, {})``.
    """
    m = _EVENT.match(message)
    if not m:
        return None, {}
    rest = message[m.end():]
    keys = list(_FIELD.finditer(rest))
    if rest and (not keys or keys[0].start() != 0):
        return None, {}

    fields = {}
    for i, k in enumerate(keys):
        end = keys[i + 1].start() if i + 1 < len(keys) else len(rest)
        fields[k.group(1)] = rest[k.end():end].strip()
    return m.group(1), fields


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        payload = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
        }
        event, fields = split_event(message)
        if event:
            payload["event"] = event
            payload["fields"] = fields
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _handler(path: Path, level: int) -> RotatingFileHandler:
    fh = RotatingFileHandler(path, maxBytes=2_000_000, backupCount=5, encoding="utf-8")
    fh.setFormatter(JsonFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
    fh.setLevel(level)
    return fh


def setup_logging(logs_dir: Path, level: int = logging.INFO) -> None:
    """Root logs to app.log/errors.log; API traffic and stock writes also get their own files."""
    logs_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level)
    if root.handlers:
        return

    root.addHandler(_handler(logs_dir / "app.log", logging.INFO))
    root.addHandler(_handler(logs_dir / "errors.log", logging.ERROR))

    for name, filename in (("invadmin.api", "api.log"), ("invadmin.stocks", "stocks.log")):
        logger = logging.getLogger(name)
        logger.addHandler(_handler(logs_dir / filename, level))
        logger.setLevel(level)
