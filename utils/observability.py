import json
import logging
from datetime import datetime, timezone
from typing import Iterable

EXTRA_FIELDS = ("user_id", "post_id", "path", "reason", "error_code")

# Marks the handler setup_logging owns, so a second app startup swaps it instead of stacking
APP_HANDLER_ATTR = "_blog_app_handler"


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json", filters: Iterable[logging.Filter] = ()):
    """Install the app's log handler on the root logger, replacing one from an earlier startup."""
    for existing in list(logging.root.handlers):
        if getattr(existing, APP_HANDLER_ATTR, False):
            logging.root.removeHandler(existing)

    handler = logging.StreamHandler()
    setattr(handler, APP_HANDLER_ATTR, True)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    for log_filter in filters:
        handler.addFilter(log_filter)
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
