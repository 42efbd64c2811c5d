"""Structured Logging: one JSON object per log line, tagged with pipeline execution fields.

Invariants:
    - Every line carries timestamp, level, logger and message
    - Pipeline execution tags (pipeline, pre_check, post_effect, procedure, error_code,
      user_id, path) are copied from `extra=` only when set, so a single request can
      be followed from its pre-checks through its procedure to each post-effect
    - LOG_FORMAT=text switches to a one-line human format for local runs and tests

Design Decisions:
    - stdlib logging.Formatter subclass; every module logs through
      logging.getLogger(__name__) and never configures handlers itself
    - setup_logging runs once, from the FastAPI lifespan
"""

import logging
import json
from datetime import datetime, timezone

EXTRA_KEYS = (
    "pipeline", "pre_check", "post_effect", "procedure",
    "error_code", "user_id", "path",
)


class JSONFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(pipeline_tags(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def pipeline_tags(record: logging.LogRecord) -> dict:
    """The pipeline execution tags present on a record."""
    return {
        key: record.__dict__[key]
        for key in EXTRA_KEYS
        if record.__dict__.get(key) is not None
    }


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
