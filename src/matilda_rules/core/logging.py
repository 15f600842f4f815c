"""Centralized logging setup for Matilda Rules.

All modules log through one queue so the rule engine never blocks on file I/O.
"""

import atexit
import logging
import os
import sys
import threading
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from queue import SimpleQueue

_LISTENER_LOCK = threading.Lock()
_LOG_QUEUE: SimpleQueue | None = None
_LOG_LISTENER: QueueListener | None = None

_DEFAULT_MAX_BYTES = 10 * 1024 * 1024
_DEFAULT_BACKUP_COUNT = 5


def _is_truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes"}


def _is_falsy(value: str | None) -> bool:
    return (value or "").strip().lower() in {"0", "false", "no"}


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, str(default)))
    except ValueError:
        return default


def _stop_listener() -> None:
    global _LOG_LISTENER
    if _LOG_LISTENER is not None:
        _LOG_LISTENER.stop()
        _LOG_LISTENER = None


def _resolve_logs_dir() -> Path | None:
    env_dir = os.environ.get("MATILDA_LOG_DIR") or os.environ.get("MATILDA_RULES_LOG_DIR")
    if env_dir:
        logs_dir = Path(env_dir)
    else:
        logs_dir = Path.home() / ".matilda" / "logs"

    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        return None
    return logs_dir


def _build_file_handler(formatter: logging.Formatter, log_level: int) -> logging.Handler | None:
    logs_dir = _resolve_logs_dir()
    if logs_dir is None:
        return None

    log_path = logs_dir / os.environ.get("MATILDA_RULES_LOG_FILE", "matilda-rules.log")
    try:
        handler = RotatingFileHandler(
            log_path,
            maxBytes=_env_int("MATILDA_LOG_MAX_BYTES", _DEFAULT_MAX_BYTES),
            backupCount=_env_int("MATILDA_LOG_BACKUP_COUNT", _DEFAULT_BACKUP_COUNT),
        )
    except OSError:
        return None
    handler.setLevel(log_level)
    handler.setFormatter(formatter)
    return handler


def _ensure_listener(log_level: int, include_console: bool, include_file: bool) -> QueueListener | None:
    global _LOG_QUEUE, _LOG_LISTENER
    with _LISTENER_LOCK:
        if _LOG_LISTENER is not None and _LOG_QUEUE is not None:
            return _LOG_LISTENER

        handlers: list[logging.Handler] = []
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )

        if include_file:
            file_handler = _build_file_handler(formatter, log_level)
            if file_handler is not None:
                handlers.append(file_handler)

        if include_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(log_level)
            console_handler.setFormatter(formatter)
            handlers.append(console_handler)

        if not handlers:
            return None

        _LOG_QUEUE = SimpleQueue()
        _LOG_LISTENER = QueueListener(_LOG_QUEUE, *handlers, respect_handler_level=True)
        _LOG_LISTENER.start()
        atexit.register(_stop_listener)
        return _LOG_LISTENER


def setup_logging(
    module_name: str,
    log_level: str = "INFO",
    include_console: bool | None = None,
    include_file: bool | None = None,
) -> logging.Logger:
    """Setup standardized logging for Matilda Rules modules.

    Args:
        module_name: Name of the module (usually __name__)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        include_console: Whether to log to stderr. If None, uses
            MATILDA_RULES_CONSOLE_LOGS ("1"/"true"/"yes" enables).
        include_file: Whether to log to the rotating file. If None, the file
            sink is on unless MATILDA_RULES_FILE_LOGS is "0"/"false"/"no".

    Returns:
        Configured logger instance

    """
    logger = logging.getLogger(module_name)

    # Avoid duplicate handlers if already configured
    if logger.handlers:
        return logger

    level = getattr(logging, log_level.upper(), logging.INFO)
    logger.setLevel(level)
    if include_console is None:
        include_console = _is_truthy(os.environ.get("MATILDA_RULES_CONSOLE_LOGS"))
    if include_file is None:
        include_file = not _is_falsy(os.environ.get("MATILDA_RULES_FILE_LOGS"))

    # Prevent propagation to root logger to avoid duplicate console output
    logger.propagate = False

    listener = _ensure_listener(level, include_console, include_file)
    if listener is None or _LOG_QUEUE is None:
        logger.addHandler(logging.NullHandler())
        return logger

    queue_handler = QueueHandler(_LOG_QUEUE)
    queue_handler.setLevel(level)
    logger.addHandler(queue_handler)

    return logger


def get_logger(module_name: str) -> logging.Logger:
    """Get a logger for a module with default settings."""
    return setup_logging(module_name)


__all__ = ["setup_logging", "get_logger"]
