import json
import logging
import time
from typing import Any

_FORMAT = "%(message)s"


def get_logger(name: str, level: str = None) -> logging.Logger:
    """Named JSON-line logger under the ``autogql`` namespace."""
    root = logging.getLogger("autogql")
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    if level:
        root.setLevel(level)
    if name == "autogql" or name.startswith("autogql."):
        return logging.getLogger(name)
    return logging.getLogger(f"autogql.{name}")


def log_event(logger: logging.Logger, event: str, level: int = logging.INFO, **fields: Any) -> None:
    if not logger.isEnabledFor(level):
        return
    record = {"ts": time.time(), "event": event}
    record.update(fields)
    logger.log(level, json.dumps(record, default=str))
