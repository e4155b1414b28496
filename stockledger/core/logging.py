import json
import logging
from datetime import datetime, timezone
from typing import Optional

from stockledger.config import get_settings

# Passed through ``extra=`` by the snapshot job, the scheduler and the catalog routes.
CONTEXT_FIELDS = ("job_name", "run_date", "snapshot_date", "status_code")

_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with any context fields found on the record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        entry.update(
            (name, str(getattr(record, name)))
            for name in CONTEXT_FIELDS
            if getattr(record, name, None) is not None
        )
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=True)


def _build_handler(json_lines: bool) -> logging.Handler:
    handler = logging.StreamHandler()
    if json_lines:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(fmt=_PLAIN_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    return handler


def setup_logging(level: Optional[str] = None, json_lines: Optional[bool] = None) -> None:
    """Install a single root handler; arguments override LOG_LEVEL and LOG_JSON."""
    settings = get_settings()
    level_name = (level or settings.LOG_LEVEL).upper()
    if json_lines is None:
        json_lines = settings.LOG_JSON

    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name, logging.INFO))
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(_build_handler(json_lines))
