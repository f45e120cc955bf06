import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import g, has_app_context, has_request_context, request

# Request attributes stamped onto every record and emitted as JSON keys
CONTEXT_FIELDS = ("request_id", "path", "method", "remote_addr")


def _current_request() -> Dict[str, Optional[str]]:
    fields: Dict[str, Optional[str]] = dict.fromkeys(CONTEXT_FIELDS)
    if has_app_context():
        fields["request_id"] = g.get("request_id")
    if has_request_context():
        fields["path"] = request.path
        fields["method"] = request.method
        fields["remote_addr"] = request.headers.get("X-Forwarded-For", request.remote_addr)
    return fields


class RequestContextFilter(logging.Filter):
    """Stamp the active request, if any, onto log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name, value in _current_request().items():
            setattr(record, name, value)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update({name: getattr(record, name, None) for name in CONTEXT_FIELDS})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_structured_logging(app) -> None:
    """Add the JSON stdout handler to the root logger unless one is present."""
    root = logging.getLogger()
    if any(isinstance(h.formatter, JsonFormatter) for h in root.handlers):
        return

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(JsonFormatter())
    stream_handler.addFilter(RequestContextFilter())
    root.addHandler(stream_handler)
    app.logger.debug("JSON stdout logging attached")
