"""Structured event logger for maze generation and the API.

Each call prints one line: either ``key=value`` pairs or, in JSON mode, one
JSON object. Loggers are cheap and cached by name; ``bind()`` returns a
child that stamps the same context (seed, size, ...) on every event.

Usage:
    from dragonmaze.logging_utils import get_logger
    log = get_logger("dragonmaze.maze").bind(seed=42, size=11)
    log.info(event="maze_generated", attempts=1)

Values that are None are dropped; text values have spaces replaced by
underscores so lines split cleanly on whitespace. ``level``, ``ts`` and
``logger`` are filled in automatically.

Environment (read on every call, so tests can flip them):
    DRAGONMAZE_LOG_LEVEL  debug | info | warn | error (default info)
    DRAGONMAZE_LOG_JSON   1/true/yes/on for JSON lines
"""

from __future__ import annotations

import json
import os
import sys
import time

LEVEL_ENV = "DRAGONMAZE_LOG_LEVEL"
JSON_ENV = "DRAGONMAZE_LOG_JSON"
LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}


def threshold() -> int:
    return LEVELS.get(os.getenv(LEVEL_ENV, "info").lower(), LEVELS["info"])


def json_mode() -> bool:
    return os.getenv(JSON_ENV, "0").lower() in ("1", "true", "yes", "on")


def _text_value(v) -> str:
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, (int, float)):
        return str(v)
    if isinstance(v, tuple):
        return ",".join(str(x) for x in v)
    return str(v).replace(" ", "_")


def format_event(level: str, fields: dict) -> str:
    ts = int(time.time())
    rec = {k: v for k, v in fields.items() if v is not None}
    if json_mode():
        rec["level"] = level
        rec["ts"] = ts
        return json.dumps(rec, separators=(",", ":"), default=str)
    head = [f"level={level}", f"ts={ts}"]
    return " ".join(head + [f"{k}={_text_value(v)}" for k, v in rec.items()])


class EventLogger:
    def __init__(self, name: str, context: dict | None = None):
        self.name = name
        self.context = dict(context or {})

    def bind(self, **fields) -> "EventLogger":
        merged = dict(self.context)
        merged.update(fields)
        return EventLogger(self.name, merged)

    def enabled(self, level: str) -> bool:
        return LEVELS[level] >= threshold()

    def emit(self, level: str, **fields):
        if not self.enabled(level):
            return
        record = {"logger": self.name}
        record.update(self.context)
        record.update(fields)
        stream = sys.stderr if level == "error" else sys.stdout
        print(format_event(level, record), file=stream)

    def debug(self, **fields):
        self.emit("debug", **fields)

    def info(self, **fields):
        self.emit("info", **fields)

    def warn(self, **fields):
        self.emit("warn", **fields)

    def error(self, **fields):
        self.emit("error", **fields)


_LOGGERS: dict = {}


def get_logger(name: str) -> EventLogger:
    if name not in _LOGGERS:
        _LOGGERS[name] = EventLogger(name)
    return _LOGGERS[name]


log = get_logger("dragonmaze")
