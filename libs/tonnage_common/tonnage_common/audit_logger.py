import json
import logging
import sys
from datetime import UTC, datetime


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.now(UTC).replace(tzinfo=None).isoformat() + "Z",
            "level": record.levelname.lower(),
            "service": getattr(record, "service", None),
            "message": record.getMessage(),
            "logger": record.name,
        }
        for field in ("request_id", "endpoint", "calculation_id", "status_code", "duration_ms"):
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(
            {k: v for k, v in payload.items() if v is not None},
            ensure_ascii=False,
            default=str,
        )


def setup_logging(service: str, level: str = "INFO") -> logging.LoggerAdapter:
    """Route the root logger to stdout as JSON lines and return a service-bound adapter."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level.upper())

    return get_service_logger(service)


def get_service_logger(service: str) -> logging.LoggerAdapter:
    base_logger = logging.getLogger(service)

    class BoundAdapter(logging.LoggerAdapter):
        def process(self, msg, kwargs):
            kwargs.setdefault("extra", {}).update(self.extra)
            return msg, kwargs

    return BoundAdapter(base_logger, {"service": service})
