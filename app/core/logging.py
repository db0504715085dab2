import json
import logging
import sys
from datetime import datetime, timezone

_BASE_LOG_KEYS = set(logging.makeLogRecord({}).__dict__.keys())
_QUIET_LOGGERS = ("httpx", "httpcore", "chromadb", "posthog", "uvicorn.access")


def _safe_json_value(value):
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (list, tuple)):
        return [_safe_json_value(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _safe_json_value(item) for key, item in value.items()}
    return str(value)


def format_record(record: logging.LogRecord) -> str:
    payload = {
        "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    for key, value in record.__dict__.items():
        if key in _BASE_LOG_KEYS or key in {"message", "asctime"}:
            continue
        payload[key] = _safe_json_value(value)
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    return json.dumps(payload, ensure_ascii=True)


class JsonLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        return format_record(record)


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonLogFormatter())

    root.handlers.clear()
    root.addHandler(handler)

    # dependency chatter drowns out search and trend events otherwise
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
