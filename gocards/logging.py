"""Logging setup shared by the gocards pipeline stages."""

from __future__ import annotations

import logging
from pathlib import Path

_ROOT = "gocards"

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class _StageFormatter(logging.Formatter):
    """Prefix console records with the pipeline stage that emitted them."""

    def format(self, record: logging.LogRecord) -> str:
        stage = record.name[len(_ROOT) + 1 :] if record.name.startswith(f"{_ROOT}.") else ""
        label = f"{_ROOT}/{stage}" if stage else _ROOT
        return f"{label}: {record.levelname.lower()}: {record.getMessage()}"


def get_logger(stage: str | None = None) -> logging.Logger:
    """Return the logger of a pipeline stage (``parser``, ``writer``...)."""
    return logging.getLogger(f"{_ROOT}.{stage}" if stage else _ROOT)


def console_level(level: str | None = None, verbose: bool = False) -> int:
    """Resolve the console threshold; ``verbose`` always wins."""
    if verbose:
        return logging.DEBUG
    if level is None:
        return logging.WARNING
    try:
        return LOG_LEVELS[level.lower()]
    except KeyError:
        raise ValueError(f"unknown log level {level!r}") from None


def configure_logging(
    *,
    level: str | None = None,
    verbose: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Route gocards records to stderr and, when given, to ``log_file``.

    The console shows records at ``level`` or above (``warning`` by default,
    ``debug`` with ``verbose``). The log file always receives everything.
    """
    threshold = console_level(level, verbose)
    logger = logging.getLogger(_ROOT)
    logger.setLevel(logging.DEBUG if log_file is not None else threshold)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(threshold)
    console.setFormatter(_StageFormatter())
    logger.addHandler(console)

    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(logging.DEBUG)
        sink.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
        logger.addHandler(sink)

    return logger


__all__ = ["LOG_LEVELS", "configure_logging", "console_level", "get_logger"]
