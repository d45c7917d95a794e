"""
chainguard - Structured Logging Configuration

Checkpoint code logs through ``logging.getLogger(__name__)`` with
``extra={"event": "checkpoints.<what>", ...}``. This module renders those
records as one JSON object per line, so mismatches and registry loads can be
picked out by ``event`` in a log pipeline.

Usage:
    from chainguard.core.logging_config import configure_logging

    configure_logging()  # CHAINGUARD_LOG_LEVEL / CHAINGUARD_LOG_FILE

    setup_logging(log_file="/var/log/chainguard/checkpoints.json", level="DEBUG")
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Any, Dict, Optional

from pythonjsonlogger.json import JsonFormatter

from chainguard.core.config import Config

ROOT_LOGGER = "chainguard"

CONSOLE_HANDLER_NAME = "chainguard.console"
FILE_HANDLER_NAME = "chainguard.file"

DEFAULT_EVENT = "log"


class CheckpointJsonFormatter(JsonFormatter):
    """
    JSON formatter for checkpoint events.

    Every record carries ``timestamp``, ``level``, ``logger``, ``event`` and
    ``component`` (the part of ``event`` before the first dot), plus the
    service and environment it came from. ``extra`` fields stay top-level.
    """

    def __init__(self, environment: str = "production", service_name: str = ROOT_LOGGER):
        super().__init__(fmt="%(message)s")
        self.environment = environment
        self.service_name = service_name

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.fromtimestamp(record.created, timezone.utc).isoformat()
        log_record["level"] = record.levelname.lower()
        log_record["logger"] = record.name

        event = str(log_record.get("event") or DEFAULT_EVENT)
        log_record["event"] = event
        log_record["component"] = event.split(".", 1)[0]

        log_record["service"] = self.service_name
        log_record["environment"] = self.environment
        log_record["location"] = f"{record.module}:{record.lineno}"


def _drop_handler(logger: logging.Logger, handler_name: str) -> None:
    for handler in list(logger.handlers):
        if handler.get_name() == handler_name:
            logger.removeHandler(handler)
            handler.close()


def setup_logging(
    name: str = ROOT_LOGGER,
    log_file: Optional[str] = None,
    level: Optional[str] = None,
    environment: str = "production",
    enable_console: bool = True,
    stream: Optional[IO[str]] = None,
    max_bytes: int = 50 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """
    Attach JSON handlers to ``name``.

    Only handlers installed here are replaced on a repeated call; handlers
    added by the host application are left alone. Records still propagate.

    Args:
        name: Logger to configure; ``chainguard.*`` module loggers propagate to
            the default
        log_file: Rotating JSON log file, or empty for none
            (default: ``Config.LOG_FILE``)
        level: Level name (default: ``Config.LOG_LEVEL``)
        environment: Deployment name written into every record
        enable_console: Also write JSON lines to ``stream``
        stream: Console stream (default: stdout)
        max_bytes: Size at which the log file rotates
        backup_count: Rotated files to keep

    Returns:
        The configured logger
    """
    level = (level or Config.LOG_LEVEL).upper()
    log_file = Config.LOG_FILE if log_file is None else log_file

    logger = logging.getLogger(name)
    logger.setLevel(level)

    _drop_handler(logger, CONSOLE_HANDLER_NAME)
    _drop_handler(logger, FILE_HANDLER_NAME)

    formatter = CheckpointJsonFormatter(
        environment=environment,
        service_name=name.split(".")[0],
    )

    if enable_console:
        console_handler = logging.StreamHandler(stream or sys.stdout)
        console_handler.set_name(CONSOLE_HANDLER_NAME)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        try:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
        except OSError as e:
            logger.warning(
                "Could not open log file %s: %s",
                log_file,
                e,
                extra={"event": "logging.file_handler_failed", "path": log_file},
            )
        else:
            file_handler.set_name(FILE_HANDLER_NAME)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def configure_logging(config: Any = Config, environment: str = "production") -> logging.Logger:
    """
    Apply ``LOG_LEVEL`` and ``LOG_FILE`` from ``config`` to the package logger.

    Nothing is written to the console; the JSON file handler is only added
    when ``LOG_FILE`` is set.
    """
    return setup_logging(
        name=ROOT_LOGGER,
        log_file=getattr(config, "LOG_FILE", "") or "",
        level=getattr(config, "LOG_LEVEL", None) or "INFO",
        environment=environment,
        enable_console=False,
    )


__all__ = ["CheckpointJsonFormatter", "configure_logging", "setup_logging"]
