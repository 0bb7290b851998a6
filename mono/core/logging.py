from __future__ import annotations

import json
import logging
import logging.config
from pathlib import Path

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RESERVED = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """JSON formatter that keeps ``extra=`` fields as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED or key.startswith("_"):
                continue
            payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = record.stack_info
        return json.dumps(payload, ensure_ascii=False, default=str)


_configured = False


def configure_logging(settings=None, *, force: bool = False) -> None:
    """Configure application logging once per process."""

    global _configured
    if _configured and not force:
        return

    if settings is None:
        from mono.core.settings import get_settings

        settings = get_settings()

    log_level = getattr(settings, "log_level", "INFO") or "INFO"
    log_json = bool(getattr(settings, "log_json", False))
    log_file = getattr(settings, "log_file", "") or ""

    formatters = {
        "standard": {
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        },
        "json": {
            "()": "mono.core.logging.JsonFormatter",
        },
    }
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": log_level,
            "formatter": "json" if log_json else "standard",
        },
    }
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": log_level,
            "formatter": "json",
            "filename": log_file,
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 5,
            "encoding": "utf-8",
        }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": formatters,
            "handlers": handlers,
            "root": {
                "level": log_level,
                "handlers": list(handlers),
            },
        }
    )
    logging.captureWarnings(True)
    _configured = True


def log_settings(settings, logger: logging.Logger | None = None) -> None:
    """Emit the loaded configuration as one structured startup line."""

    (logger or logging.getLogger("mono.config")).info(
        "initialized config",
        extra={
            "version": settings.version,
            "host": settings.host,
            "port": settings.port,
            "log_level": settings.log_level,
            "log_json": settings.log_json,
            "start_date": settings.start_date.isoformat(),
            "end_date": settings.end_date.isoformat(),
        },
    )


__all__ = ["JsonFormatter", "configure_logging", "log_settings"]
