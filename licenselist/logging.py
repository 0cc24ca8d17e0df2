"""Logging helpers shared by the licenselist pipeline, CLI and service."""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path
from typing import Iterable

_ROOT_LOGGER = "licenselist"

_CONSOLE_FORMAT = "[licenselist] %(levelname)s %(message)s"
# Verbose runs tag each record with the component that emitted it.
_VERBOSE_FORMAT = "[licenselist] %(levelname)s %(component)s: %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class _ComponentFilter(logging.Filter):
    """Expose ``licenselist.<component>`` as ``%(component)s``."""

    def filter(self, record: logging.LogRecord) -> bool:
        prefix = f"{_ROOT_LOGGER}."
        record.component = (
            record.name[len(prefix) :] if record.name.startswith(prefix) else record.name
        )
        return True


def get_logger(component: str | None = None) -> logging.Logger:
    """Return the logger for one pipeline component (``licenselist.<component>``)."""
    return logging.getLogger(f"{_ROOT_LOGGER}.{component}" if component else _ROOT_LOGGER)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route licenselist records to stderr and, optionally, to ``log_file``.

    Repeated calls replace the previously installed handlers.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_ROOT_LOGGER)
    logger.setLevel(logging.DEBUG if log_file is not None else level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.addFilter(_ComponentFilter())
    console.setFormatter(logging.Formatter(_VERBOSE_FORMAT if verbose else _CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(logging.DEBUG)
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(sink)

    return logger


def summarize_diagnostics(logger: logging.Logger, diagnostics: Iterable[Warning]) -> int:
    """Log one line per diagnostic category and return the total count."""
    counts = Counter(type(item).__name__ for item in diagnostics)
    for category, count in sorted(counts.items()):
        logger.info("%d %s diagnostic(s) recorded during this run", count, category)
    return sum(counts.values())


__all__ = ["configure_logging", "get_logger", "summarize_diagnostics"]
