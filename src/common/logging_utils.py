"""Logging helpers shared by every module.

Provides a single place to configure the root logger, build structured
``extra`` payloads, and keep credentials out of log records.
"""
from __future__ import annotations

import logging
import os
import re
import time
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from constants import Constants

_SENSITIVE_KEYS = ("token", "password", "passwd", "secret", "key", "auth", "signature")
_REDACTED = "[REDACTED]"
_configured = False


def configure_logging(level: Optional[str] = None) -> None:
    """Install a root handler once, honoring GAVRESOLVE_LOG_LEVEL."""
    global _configured  # pylint: disable=global-statement
    level_name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)
    root = logging.getLogger()
    if not _configured:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        root.addHandler(handler)
        _configured = True
    root.setLevel(level_value)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records would be emitted by ``logger``."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for structured log records.

    None values are dropped so log processors only see populated fields.
    """
    return {k: v for k, v in fields.items() if v is not None}


def redact(text: Optional[str]) -> str:
    """Mask anything that looks like ``key=value`` for a sensitive key."""
    if not text:
        return ""
    pattern = re.compile(
        r"(?i)\b(" + "|".join(_SENSITIVE_KEYS) + r")(\s*[=:]\s*)([^\s&,;]+)"
    )
    return pattern.sub(lambda m: f"{m.group(1)}{m.group(2)}{_REDACTED}", text)


def safe_url(url: Optional[str]) -> str:
    """Strip user info and sensitive query values from a URL."""
    if not url:
        return ""
    try:
        parts = urlsplit(url)
    except ValueError:
        return redact(url)
    netloc = parts.netloc.rsplit("@", 1)[-1]
    query = parts.query
    if query:
        pairs = [
            (k, _REDACTED if any(s in k.lower() for s in _SENSITIVE_KEYS) else v)
            for k, v in parse_qsl(query, keep_blank_values=True)
        ]
        query = urlencode(pairs)
    return urlunsplit((parts.scheme, netloc, parts.path, query, parts.fragment))


class Timer:
    """Context manager measuring wall-clock duration in milliseconds."""

    def __init__(self):
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, *exc: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
