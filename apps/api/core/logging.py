"""
Logging for the ride service.

Every event is one line on stdout: a JSON object in production (or with
LOG_FORMAT=json), readable text otherwise. Call sites attach context with
``extra={"extra_fields": {...}}``. Both formats carry that context, so a
single ride can be followed from the HTTP request down to the store.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Request

from core.config import settings

SERVICE_NAME = "ride-dashboard-api"

QUIET_LOGGERS = {
    "sqlalchemy.engine": "WARNING",
    "alembic": "INFO",
    "uvicorn.access": "WARNING",  # replaced by the request log line in main
}


def context_of(record: logging.LogRecord) -> Dict[str, Any]:
    return dict(getattr(record, "extra_fields", None) or {})


class JSONFormatter(logging.Formatter):
    """One JSON object per record, context keys at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "where": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        entry.update(context_of(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Plain text with the context appended as sorted key=value pairs."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)-7s %(name)s: %(message)s")

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        context = context_of(record)
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        return f"{line} [{pairs}]"


def request_fields(request: Request, **extra: Any) -> Dict[str, Any]:
    """
    Log context for an HTTP request.

    ride_id is taken from the matched route path and user_id from the query
    string, so listing, metrics and single-ride calls are all attributable.
    """
    fields: Dict[str, Any] = {"method": request.method, "path": request.url.path}
    ride_id = request.path_params.get("ride_id")
    if ride_id is not None:
        fields["ride_id"] = ride_id
    user_id = request.query_params.get("user_id")
    if user_id:
        fields["user_id"] = user_id
    fields.update(extra)
    return fields


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> logging.Logger:
    """
    Send everything to stdout through a single root handler.

    level and fmt default to LOG_LEVEL and LOG_FORMAT; production always
    logs JSON unless fmt is given explicitly.
    """
    level_no = logging.getLevelName((level or settings.LOG_LEVEL).upper())
    if not isinstance(level_no, int):
        level_no = logging.INFO
    fmt = fmt or ("json" if settings.ENVIRONMENT == "production" else settings.LOG_FORMAT)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level_no)
    for name, quiet in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet)
    return root

