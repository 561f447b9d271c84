"""
JSON logging with request context.

Every line carries the request id, method and path of the request being
served (when there is one). Keys that usually hold secrets are redacted
from the `extra` fields.
"""

import json
import logging
import os
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Optional

from context import get_context_dict

# LogRecord attributes that are not user-supplied `extra` fields.
_RESERVED_KEYS = {
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
    "created", "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "message", "taskName",
}

SENSITIVE_KEYS = {
    "password",
    "password_hash",
    "passwordhash",
    "secret",
    "jwt_secret",
    "token",
    "access_token",
    "accesstoken",
    "authorization",
}

REDACTED = "***"


def redact(value: Any, key: Optional[str] = None) -> Any:
    if key and key.lower() in SENSITIVE_KEYS:
        return REDACTED
    if isinstance(value, dict):
        return {str(k): redact(v, str(k)) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [redact(v) for v in value]
    return value


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "pid": os.getpid(),
        }
        payload.update(get_context_dict())

        for k, v in record.__dict__.items():
            if k in _RESERVED_KEYS:
                continue
            payload[k] = redact(v, k)

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            payload["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "stacktrace": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logger(name: str = "shop-api") -> logging.Logger:
    log = logging.getLogger(name)

    level = "INFO"
    use_json = True
    try:
        from config import get_settings

        settings = get_settings()
        level = (settings.log_level or "INFO").upper()
        use_json = settings.log_json
    except Exception:  # settings errors surface at app startup, not here
        pass

    log.setLevel(getattr(logging, level, logging.INFO))

    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            JSONFormatter() if use_json else logging.Formatter("%(levelname)s %(message)s")
        )
        log.addHandler(handler)

    return log


logger = setup_logger()
