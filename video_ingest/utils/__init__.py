"""Utility modules"""

from .config import Config, load_config
from .logger import get_logger, generate_trace_id, bind_run
from .normalizer import normalize_date, normalize_duration, normalize_url, format_seconds
from .retry import RetryPolicy, TerminalError

__all__ = [
    "Config",
    "load_config",
    "get_logger",
    "generate_trace_id",
    "bind_run",
    "normalize_date",
    "normalize_duration",
    "normalize_url",
    "format_seconds",
    "RetryPolicy",
    "TerminalError",
]
