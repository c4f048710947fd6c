import logging
import json
import sys
import uuid
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging"""
    
    STANDARD_ATTRS = {
        'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
        'module', 'exc_info', 'exc_text', 'stack_info', 'lineno', 'funcName',
        'created', 'msecs', 'relativeCreated', 'thread', 'threadName',
        'processName', 'process', 'message', 'taskName', 'trace_id'
    }

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "service": self.service_name,
            "message": record.getMessage(),
            "logger": record.name,
        }

        # Run correlation id, set per pipeline/submitter run
        if hasattr(record, "trace_id"):
            log_data["trace_id"] = record.trace_id
        
        # Include any other extra fields passed via extra={...}
        for key, value in record.__dict__.items():
            if key not in self.STANDARD_ATTRS and not key.startswith('_'):
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)

def get_logger(name: str, service_name: str = "video-ingest") -> logging.Logger:
    """Get a configured JSON logger"""
    logger = logging.getLogger(name)
    
    # Avoid duplicate handlers
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = JsonFormatter(service_name)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
        logger.propagate = False
        
    return logger

def generate_trace_id() -> str:
    """Generate a unique correlation ID for one pipeline or submitter run"""
    return str(uuid.uuid4())


class RunLogger(logging.LoggerAdapter):
    """Logger bound to one pipeline or submitter run; adds its fields to every line"""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def bind_run(logger: logging.Logger, trace_id: Optional[str] = None, **fields: Any) -> RunLogger:
    """Bind a trace_id (generated if not given) and extra fields to a logger"""
    return RunLogger(logger, {"trace_id": trace_id or generate_trace_id(), **fields})
