"""
Logging configuration for the Omics Valid system.

Log records always go to stderr (and optionally a rotating file): stdout
carries the validation report and nothing else. Records can be rendered as
JSON or as a single human-readable line, and carry process metrics taken with
psutil.
"""

import logging
import logging.handlers
import json
import sys
import time
from datetime import datetime
from typing import Any, Dict, Optional
from pathlib import Path
import psutil

from .config import LoggingConfig


def _iso(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created).isoformat()


class PerformanceFilter(logging.Filter):
    """Attach process metrics (CPU, resident memory, uptime) to every record."""

    def __init__(self):
        super().__init__()
        self.process = psutil.Process()
        self.start_time = time.time()

    def filter(self, record):
        record.iso_timestamp = _iso(record)
        record.uptime_seconds = time.time() - self.start_time
        try:
            record.cpu_percent = self.process.cpu_percent()
            record.memory_mb = self.process.memory_info().rss / 1024 / 1024
        except psutil.Error:
            # Metrics are best effort, the record itself must still be emitted
            pass
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with caller-supplied extras grouped under ``extra``."""

    # Attributes every LogRecord has, plus the ones PerformanceFilter adds
    STANDARD_ATTRIBUTES = frozenset([
        'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
        'filename', 'module', 'exc_info', 'exc_text', 'stack_info',
        'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
        'thread', 'threadName', 'processName', 'process', 'message',
        'taskName', 'iso_timestamp', 'uptime_seconds', 'cpu_percent', 'memory_mb'
    ])

    def __init__(self, include_performance=True):
        super().__init__()
        self.include_performance = include_performance

    def format(self, record):
        entry: Dict[str, Any] = {
            "timestamp": _iso(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value for key, value in record.__dict__.items()
            if key not in self.STANDARD_ATTRIBUTES
        }
        if extra:
            entry["extra"] = extra

        if self.include_performance and hasattr(record, 'memory_mb'):
            entry["performance"] = {
                "cpu_percent": record.cpu_percent,
                "memory_mb": record.memory_mb,
                "uptime_seconds": getattr(record, 'uptime_seconds', 0.0),
                "process_id": record.process,
            }

        return json.dumps(entry, default=str)


class ContextualFormatter(logging.Formatter):
    """Human-readable one-line formatter, optionally suffixed with CPU and memory."""

    def __init__(self, include_performance=True):
        fmt = "%(iso_timestamp)s [%(levelname)s] %(name)s:%(funcName)s:%(lineno)d - %(message)s"
        if include_performance:
            fmt += " [CPU: %(cpu_percent).1f%% MEM: %(memory_mb).1fMB]"
        super().__init__(fmt)
        self.include_performance = include_performance

    def format(self, record):
        # Records may reach this formatter without passing PerformanceFilter
        if not hasattr(record, 'iso_timestamp'):
            record.iso_timestamp = _iso(record)
        if not hasattr(record, 'cpu_percent'):
            record.cpu_percent = 0.0
        if not hasattr(record, 'memory_mb'):
            record.memory_mb = 0.0
        return super().format(record)


def _build_formatter(config: LoggingConfig) -> logging.Formatter:
    if config.format.lower() == 'json' and config.structured:
        return JSONFormatter(include_performance=True)
    return ContextualFormatter(include_performance=config.level.upper() == "DEBUG")


def setup_logging(config: LoggingConfig) -> None:
    """
    Configure the root logger for a command line run.

    Installs a stderr handler and, when ``config.log_file`` is set, a
    size-rotated file handler. Existing root handlers are replaced.

    Args:
        config: Logging configuration object
    """
    level = getattr(logging, config.level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    perf_filter = PerformanceFilter()
    handlers = [logging.StreamHandler(sys.stderr)]

    if config.log_file:
        Path(config.log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            filename=config.log_file,
            maxBytes=config.max_file_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
            encoding='utf-8'
        ))

    for handler in handlers:
        handler.setLevel(level)
        handler.addFilter(perf_filter)
        handler.setFormatter(_build_formatter(config))
        root_logger.addHandler(handler)

    logging.getLogger(__name__).debug(
        "Logging system initialized",
        extra={
            "log_level": config.level,
            "log_format": config.format,
            "file_logging": bool(config.log_file)
        }
    )


def _with_duration(extra_data: Dict[str, Any], duration: Optional[float]) -> Dict[str, Any]:
    if duration is not None:
        extra_data["duration_seconds"] = duration
        extra_data["duration_ms"] = duration * 1000
    return extra_data


def log_model_loaded(logger: logging.Logger, model_path: str, identifier_count: int,
                     duration: Optional[float] = None):
    """
    Log a successfully loaded metabolite model.

    Args:
        logger: Logger instance
        model_path: Path of the model file
        identifier_count: Number of identifiers the model exposes
        duration: Loading duration in seconds
    """
    extra_data = _with_duration({
        "model_path": model_path,
        "identifier_count": identifier_count,
    }, duration)
    logger.info(f"Model loaded from {model_path} with {identifier_count} identifiers", extra=extra_data)


def log_validation_summary(logger: logging.Logger, omics_format: str, lines_processed: int,
                           report_count: int, error_count: int, duration: Optional[float] = None):
    """
    Log the outcome of a validation run.

    A clean run is logged at INFO, a run with reports at WARNING.

    Args:
        logger: Logger instance
        omics_format: Format selector of the run
        lines_processed: Number of data lines fed through the rule sets
        report_count: Number of lines with at least one violation
        error_count: Total number of violations
        duration: Run duration in seconds
    """
    extra_data = _with_duration({
        "omics_format": omics_format,
        "lines_processed": lines_processed,
        "report_count": report_count,
        "error_count": error_count,
    }, duration)

    message = f"Validation of {omics_format} finished: {lines_processed} lines"
    if report_count:
        message += f", {report_count} invalid ({error_count} errors)"

    logger.log(logging.INFO if report_count == 0 else logging.WARNING, message, extra=extra_data)
