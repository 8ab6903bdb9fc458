"""structlog setup for cvtailor.

Every entry carries the app name and version. Code that runs on behalf of a
tailoring run or an interview session binds ``run_id``/``stage`` or
``session_id`` with :func:`log_context`, so agent and invocation-layer events
emitted deeper in the call stack can be tied back to it.
"""

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

import structlog
from structlog.types import EventDict, Processor

from .. import __version__


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["app"] = "cvtailor"
    event_dict["version"] = __version__
    return event_dict


def _renderers(log_format: str) -> list[Processor]:
    if log_format == "console":
        return [structlog.processors.ExceptionPrettyPrinter(), structlog.dev.ConsoleRenderer(colors=True)]
    return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: str | Path | None = None,
) -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_format: "json" or "console"
        log_file: Optional file that receives a copy of every entry
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_app_context,
            *_renderers(log_format),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # stdout is reserved for CLI output
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logging.getLogger().addHandler(handler)


@contextmanager
def log_context(**values: Any) -> Iterator[None]:
    """Bind ``values`` to every entry logged inside the block, awaited calls included."""
    with structlog.contextvars.bound_contextvars(**values):
        yield


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    return structlog.get_logger(name)


setup_logging()
