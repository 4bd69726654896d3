"""
JSONL logging bootstrap for the CLI.
Installs a single JSONL sink on the root logger early in startup.
"""

import json
import logging
import os
import re
from datetime import UTC
from datetime import datetime
from pathlib import Path

DEFAULT_PATH = os.environ.get("MODMAP_LOG_PATH", "./.modmap/modmap.log.jsonl")
DEFAULT_LEVEL = os.environ.get("MODMAP_LOG_LEVEL", "INFO").upper()

# Messages are tagged "[autoload:<stage>] ..."
_STAGE_TAG = re.compile(r"^\[autoload:([\w-]+)\]\s*")

# LogRecord attributes that are not user extras
_RECORD_FIELDS = frozenset(
    {
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "name",
    }
)


class JsonlHandler(logging.Handler):
    def __init__(self, path: str | Path):
        super().__init__()
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def format_record(self, record: logging.LogRecord) -> dict:
        payload = {
            "ts": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "lvl": record.levelname,
            "schema": {"name": "modmap.log", "ver": "1.0.0"},
            "logger": record.name,
            "message": record.getMessage(),
        }
        match = _STAGE_TAG.match(payload["message"])
        if match:
            payload["stage"] = match.group(1)
            payload["message"] = payload["message"][match.end() :]
        for key, value in record.__dict__.items():
            if key not in _RECORD_FIELDS:
                payload.setdefault(key, value)
        return payload

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = json.dumps(self.format_record(record), ensure_ascii=False, default=str)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception:
            self.handleError(record)


def init_json_logging(path: str | Path | None = None, level: str | None = None) -> JsonlHandler:
    path = path or DEFAULT_PATH
    level = (level or DEFAULT_LEVEL).upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    # One sink per process
    for handler in list(root.handlers):
        if isinstance(handler, JsonlHandler):
            root.removeHandler(handler)
            handler.close()
    handler = JsonlHandler(path)
    root.addHandler(handler)
    return handler
