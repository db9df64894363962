from __future__ import annotations

import json
import logging
import sys
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from socialauth.core.config import settings

# Query parameters that carry credentials and must never reach logs or error messages
SENSITIVE_PARAMS = frozenset(
    {"oauth2_access_token", "access_token", "client_secret", "code", "refresh_token"}
)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - formatting logic
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key.startswith("_") or key in payload:
                continue
            payload.setdefault("extra", {})[key] = value
        return json.dumps(payload, default=str)


def init_logging(level: int | None = None) -> None:
    if logging.getLogger().handlers:
        return
    effective_level = level or getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    if settings.LOG_FORMAT.lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
        handler.setFormatter(logging.Formatter(fmt))
    root = logging.getLogger()
    root.setLevel(effective_level)
    root.addHandler(handler)


def mask_secret(value: str | None, visible: int = 4) -> str:
    """Return a printable stand-in for a token: its first few chars plus ``***``."""
    if not value:
        return "<none>"
    if len(value) <= visible * 2:
        return "***"
    return f"{value[:visible]}***"


def redact_url(url: str) -> str:
    """Strip credential values from a URL's query string.

    ``https://api.example.com/x?oauth2_access_token=abc&count=5`` becomes
    ``https://api.example.com/x?oauth2_access_token=***&count=5``.
    """
    parts = urlsplit(url)
    if not parts.query:
        return url
    query = [
        (key, "***" if key in SENSITIVE_PARAMS else value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
    ]
    return urlunsplit(parts._replace(query=urlencode(query, safe="*:(),~")))
