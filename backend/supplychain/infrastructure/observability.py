"""Structured Logging — JSON log lines keyed by transaction for ledger audits.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Transaction fields (tx_id, operation, product_id) and error_code/path
      surfaced when present, so one invocation can be traced across modules
    - setup_logging is idempotent: a second call replaces, never duplicates, its handler
    - SQLAlchemy engine logging stays at WARNING unless database_echo is set

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - setup_logging called once on startup via lifespan
"""

import logging
import json
from datetime import datetime, timezone

_TRACE_FIELDS = ("tx_id", "operation", "product_id", "error_code", "path")
_HANDLER_NAME = "supplychain"


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log.update({
            key: record.__dict__[key]
            for key in _TRACE_FIELDS
            if record.__dict__.get(key) is not None
        })
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json", echo_sql: bool = False):
    """Install the ledger's root handler."""
    for existing in list(logging.root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logging.root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [%(tx_id)s]: %(message)s",
            defaults={"tx_id": "-"},
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if echo_sql else logging.WARNING,
    )
