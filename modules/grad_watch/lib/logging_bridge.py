from __future__ import annotations

import copy
import logging
from typing import Any

from service import logging_utils as _backend

# Keys that should be redacted from structured logs
_REDACT_KEYS = {
    "password",
    "token",
    "apikey",
    "api_key",
    "secret",
    "authorization",
    "auth",
    "bearer",
    "cookie",
}


def _redact_record(record: dict[str, Any]) -> dict[str, Any]:
    """
    Shallow-copy record and redact obvious secret-like fields at top level.
    The backend performs its own deep redaction before writing.
    """
    redacted = copy.copy(record)
    for k in list(redacted.keys()):
        lk = str(k).lower()
        if lk in _REDACT_KEYS or lk.endswith("_secret"):
            redacted[k] = "***REDACTED***"
    return redacted


def activity(record: dict[str, Any]) -> None:
    """
    Write an activity record to the JSON-lines activity log.
    Falls back to stdlib logging if the log file cannot be written.
    """
    payload = _redact_record(record)
    try:
        _backend.write_activity_log(payload)
    except OSError:
        logging.getLogger("grad_watch.activity").info(payload)


def error(record: dict[str, Any]) -> None:
    """
    Write an error record to the JSON-lines error log.
    Falls back to stdlib logging if the log file cannot be written.
    """
    payload = _redact_record(record)
    try:
        _backend.write_error_log(payload)
    except OSError:
        logging.getLogger("grad_watch.error").error(payload)
