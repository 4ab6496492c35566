from __future__ import annotations

import json
import logging
import os
import threading
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from ibancheck.utils.log_context import get_context_fields

_ROOT_CONFIGURED = False
_ROOT_CONFIG_LOCK = threading.Lock()
_FALSY = {"0", "false", "no", "off"}


class ContextFilter(logging.Filter):
    """Adds the current log context (batch_id, source) to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        fields = get_context_fields()
        record.batch_id = fields.get("batch_id") or "-"
        record.source = fields.get("source") or "-"
        record.context = fields
        return True


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record, for machine reading of the log."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "funcName": record.funcName,
            "line": record.lineno,
            "process": record.process,
            "threadName": record.threadName,
            "event_name": getattr(record, "event_name", None),
            "context": getattr(record, "context", None) or get_context_fields(),
        }

        extra_obj = getattr(record, "extra_payload", None)
        if extra_obj:
            payload["extra"] = extra_obj

        if record.exc_info:
            payload["exception"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(payload, ensure_ascii=False, default=str)


def _env_flag(name: str, default: str = "1") -> bool:
    return str(os.environ.get(name, default)).strip().lower() not in _FALSY


def _resolve_level(level: str | int | None) -> int:
    raw = level if level is not None else os.environ.get("IBANCHECK_LOG_LEVEL", "WARNING")
    if isinstance(raw, int):
        return raw
    value = logging.getLevelName(str(raw).strip().upper())
    return value if isinstance(value, int) else logging.WARNING


def setup_logging(
    log_dir: Optional[Path] = None,
    name: str = "ibancheck",
    level: str | int | None = None,
) -> logging.Logger:
    """
    Configures the root logger once per process:
      - text lines on stderr
      - <log_dir>/ibancheck.jsonl (JSON lines) when log_dir is given

    Level comes from `level` or IBANCHECK_LOG_LEVEL (default WARNING).
    IBANCHECK_LOG_DETAIL=0 prunes large values from structured events.
    """
    global _ROOT_CONFIGURED

    resolved = _resolve_level(level)
    logger = logging.getLogger(name)

    with _ROOT_CONFIG_LOCK:
        if not _ROOT_CONFIGURED:
            root = logging.getLogger()
            root.setLevel(resolved)

            fmt = logging.Formatter(
                "%(asctime)s.%(msecs)03d %(levelname)s "
                "batch=%(batch_id)s source=%(source)s "
                "[%(name)s:%(funcName)s:%(lineno)d] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
            context_filter = ContextFilter()

            ch = logging.StreamHandler()
            ch.setLevel(resolved)
            ch.setFormatter(fmt)
            ch.addFilter(context_filter)
            root.addHandler(ch)

            if log_dir is not None:
                log_dir = Path(log_dir)
                log_dir.mkdir(parents=True, exist_ok=True)
                fh_json = logging.FileHandler(log_dir / "ibancheck.jsonl", encoding="utf-8")
                fh_json.setLevel(logging.DEBUG)
                fh_json.setFormatter(JsonLineFormatter())
                fh_json.addFilter(context_filter)
                root.addHandler(fh_json)
                # file handler takes everything, console keeps the requested level
                root.setLevel(min(resolved, logging.DEBUG))

            setattr(root, "_ibancheck_log_detail", _env_flag("IBANCHECK_LOG_DETAIL"))
            _ROOT_CONFIGURED = True

    logger.propagate = True
    logger.debug("Logging initialized: log_dir=%s level=%s", log_dir, logging.getLevelName(resolved))
    return logger


def log_event(logger: logging.Logger, event_name: str, message: str, **extra: Any) -> None:
    """
    Structured log helper:
    - sets event_name and extra_payload on the record
    - appends a readable key=value suffix to the text message
    """
    extra_payload: Dict[str, Any] = extra or {}
    detail_enabled = bool(getattr(logging.getLogger(), "_ibancheck_log_detail", True))

    if not detail_enabled:
        extra_payload = {k: v for k, v in extra_payload.items() if len(repr(v)) <= 400}

    suffix = ""
    if extra_payload:
        suffix = " | " + " ".join(f"{k}={extra_payload[k]!r}" for k in sorted(extra_payload))
    logger.info(
        "%s%s",
        message,
        suffix,
        extra={
            "event_name": event_name,
            "extra_payload": extra_payload,
        },
    )
