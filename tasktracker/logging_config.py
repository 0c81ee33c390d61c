"""Console and rotating-file logging for the task tracker."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path


_LOG_FORMAT = "%(asctime)s %(levelname)-5s %(name)s %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# file name -> (minimum level or None for the application level, days kept)
_LOG_FILES: dict[str, tuple[int | None, int]] = {
    "tasktracker.log": (None, 30),
    "tasktracker_errors.log": (logging.ERROR, 90),
}

_APP_LOGGERS = (
    "tasktracker",
    "tasktracker.users",
    "tasktracker.tasks",
    "tasktracker.notifications",
    "tasktracker.sweep",
    "tasktracker.system",
)

_logging_configured = False


def _daily_file(path: Path, level: int, keep_days: int) -> logging.Handler:
    handler = logging.handlers.TimedRotatingFileHandler(
        filename=str(path),
        when="midnight",
        backupCount=keep_days,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_logging(log_dir: Path | None = None, debug: bool = False) -> None:
    """Send application logs to the console and to daily rotated files.

    Only the first call has an effect; later calls return immediately.

    Args:
        log_dir: Where log files go. Defaults to `logs/` in the project root.
        debug: Log at DEBUG instead of INFO.
    """
    global _logging_configured

    if _logging_configured:
        return

    log_dir = log_dir or Path(__file__).resolve().parent.parent / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    level = logging.DEBUG if debug else logging.INFO

    console = logging.StreamHandler()
    console.setLevel(level)
    handlers: list[logging.Handler] = [console]
    for file_name, (min_level, keep_days) in _LOG_FILES.items():
        handlers.append(_daily_file(log_dir / file_name, min_level or level, keep_days))

    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT)
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in _APP_LOGGERS:
        logging.getLogger(name).setLevel(level)
    logging.getLogger("uvicorn").setLevel(level)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    _logging_configured = True
    logging.getLogger("tasktracker.system").info(
        f"Logging configured: level={logging.getLevelName(level)}, log_dir={log_dir}"
    )
