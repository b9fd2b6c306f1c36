from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from core.config import BACKEND_DIR


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# Third-party loggers held at a floor regardless of the app level.
_QUIET_LOGGERS = {
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
}
_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def resolve_level(environment: str | None, override: str | None = None) -> int:
    """Pick the log level: an explicit ``LOG_LEVEL`` wins, else INFO in production and DEBUG elsewhere."""

    if override:
        level = logging.getLevelName(override.strip().upper())
        if isinstance(level, int):
            return level
        raise ValueError(f"Unknown log level: {override!r}")
    env = (environment or "development").lower().strip()
    return logging.INFO if env == "production" else logging.DEBUG


def rotating_file_handler(log_dir: Path, formatter: logging.Formatter, level: int) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_dir / "app.log",
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(*, environment: str, level: str | None = None, log_dir: str | Path | None = None) -> None:
    """Configure root logging for the API and the operator scripts.

    Console output always; production also writes ``<log_dir>/app.log``
    (default ``backend/logs``). Does nothing if the root logger already has
    handlers, so the API and scripts can both call it.
    """

    root = logging.getLogger()
    if root.handlers:
        return

    resolved = resolve_level(environment, level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.setLevel(resolved)
    console.setFormatter(formatter)
    handlers: list[logging.Handler] = [console]

    if (environment or "").lower().strip() == "production":
        target = Path(log_dir) if log_dir else Path(BACKEND_DIR) / "logs"
        handlers.append(rotating_file_handler(target, formatter, resolved))

    logging.basicConfig(level=resolved, handlers=handlers)

    for name in _UVICORN_LOGGERS:
        logging.getLogger(name).setLevel(resolved)
    for name, floor in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(max(floor, resolved))
