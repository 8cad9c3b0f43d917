"""Logging utilities for spamtree.

spamtree logs through loguru and is silent until `enable_logging()` is called.
Tree construction is reported at the custom TREE_BUILD level, one record per
finished tree, and its stderr line ends in a short shape summary such as
``depth=2 leaves=3 examples=4``. Leaf splits are reported at DEBUG and
accuracy results at INFO.

Note:
    The first `enable_logging()` call removes loguru's default stderr handler
    (ID 0) so that spamtree records are not printed twice. If handler 0 is
    already gone the removal is skipped.
"""

from __future__ import annotations

import contextlib
import sys
import threading
import warnings
from collections.abc import Callable
from typing import TYPE_CHECKING, Final, Literal

from loguru import logger

if TYPE_CHECKING:
    from types import TracebackType

    from loguru import Record

PACKAGE_NAME: Final[str] = __name__.split(".")[0]

# Between INFO (20) and WARNING (30)
TREE_BUILD_LEVEL: Final[str] = "TREE_BUILD"
TREE_BUILD_LEVEL_NUMBER: Final[int] = 25

_DETAILS_KEY: Final[str] = "spamtree_details"
_DEFAULT_HANDLER_ID: Final[int] = 0

type LogLevel = Literal[
    "TRACE",
    "DEBUG",
    "INFO",
    "TREE_BUILD",
    "WARNING",
    "ERROR",
    "CRITICAL",
]

type LogFormat = Literal["short", "full"]

_LOCATION_FORMATS: Final[dict[str, str]] = {
    "short": "<cyan>{function}</cyan>",
    "full": "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>",
}

_handler_ids: set[int] = set()
_handler_lock = threading.Lock()


def _register_tree_build_level() -> int:
    """Make sure the TREE_BUILD level exists and return its numeric value.

    loguru cannot renumber an existing level, so a TREE_BUILD level registered
    elsewhere with another number is kept and a UserWarning is emitted.

    Returns:
        int: Numeric value TREE_BUILD records are logged at.
    """
    try:
        existing_no = logger.level(TREE_BUILD_LEVEL).no
    except ValueError:
        return logger.level(TREE_BUILD_LEVEL, no=TREE_BUILD_LEVEL_NUMBER, icon="🌳").no

    if existing_no != TREE_BUILD_LEVEL_NUMBER:
        warnings.warn(
            f"TREE_BUILD level already registered with numeric value {existing_no},"
            f" expected {TREE_BUILD_LEVEL_NUMBER}",
            stacklevel=2,
        )
    return existing_no


_register_tree_build_level()


def render_details(record: Record) -> str:
    """Render a record's structured extras as the tail of its log line.

    TREE_BUILD records get a tree summary (``depth=.. leaves=.. examples=..``);
    every other record lists its extras as ``key=value`` pairs.

    Args:
        record (Record): The loguru record being formatted.

    Returns:
        str: Text appended after the message; empty when there are no extras.

    Examples:
        >>> record = {"level": logger.level("TREE_BUILD"), "extra": {"depth": 2, "leaf_count": 3}}
        >>> render_details(record)  # doctest: +SKIP
        'depth=2 leaves=3'
    """
    extra = {key: value for key, value in record["extra"].items() if key != _DETAILS_KEY}
    if record["level"].name == TREE_BUILD_LEVEL:
        parts = [f"depth={extra.get('depth', '?')}", f"leaves={extra.get('leaf_count', '?')}"]
        if "examples" in extra:
            parts.append(f"examples={extra['examples']}")
        return " ".join(parts)
    return " ".join(f"{key}={value!r}" for key, value in extra.items())


def _build_formatter(log_format: LogFormat) -> Callable[[Record], str]:
    # Record text reaches the line only through extra, never through the template.
    template = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <10}</level> | "  # noqa: RUF027 - loguru format string
        + _LOCATION_FORMATS[log_format]
        + " - <level>{message}</level> {extra[" + _DETAILS_KEY + "]}\n{exception}"
    )

    def formatter(record: Record) -> str:
        record["extra"][_DETAILS_KEY] = render_details(record)
        return template

    return formatter


def _is_spamtree_record(record: Record) -> bool:
    name = record["name"]
    return name is not None and name.startswith(PACKAGE_NAME)


def active_handler_count() -> int:
    """Return how many handlers added by `enable_logging` are still active."""
    with _handler_lock:
        return len(_handler_ids)


class LoggingHandle:
    """Owns one stderr handler added by `enable_logging`.

    When the last handle is disabled, spamtree logging is switched off again.

    Examples:
        >>> with enable_logging(level="DEBUG"):  # doctest: +SKIP
        ...     Classifier.from_training_data(vectors, labels)
    """

    def __init__(self, handler_id: int) -> None:
        """Wrap a handler ID returned by logger.add().

        Args:
            handler_id (int): The loguru handler ID.
        """
        self.handler_id: int | None = handler_id

    def disable(self) -> None:
        """Remove this handle's handler. A second call does nothing."""
        with _handler_lock:
            if self.handler_id is None:
                return
            _handler_ids.discard(self.handler_id)
            with contextlib.suppress(ValueError):
                logger.remove(self.handler_id)
            self.handler_id = None
            if not _handler_ids:
                logger.disable(PACKAGE_NAME)

    def __enter__(self) -> LoggingHandle:
        """Return this handle for use in a with block."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Disable the handler on leaving the with block."""
        self.disable()


def enable_logging(
    *,
    level: LogLevel = TREE_BUILD_LEVEL,
    log_format: LogFormat = "short",
) -> LoggingHandle:
    """Print spamtree log records to stderr.

    Each call adds its own handler and returns the handle that removes it.

    Args:
        level (LogLevel): Minimum level to print. The default "TREE_BUILD"
            prints one summary line per constructed tree; "DEBUG" adds a line
            per leaf split.
        log_format (LogFormat): "short" names only the function; "full" shows
            module:function:line.

    Returns:
        LoggingHandle: Handle that removes the handler again.
    """
    with _handler_lock:
        if not _handler_ids:
            with contextlib.suppress(ValueError):
                logger.remove(_DEFAULT_HANDLER_ID)
        handler_id = logger.add(
            sys.stderr,
            level=level,
            filter=_is_spamtree_record,
            format=_build_formatter(log_format),
        )
        _handler_ids.add(handler_id)
        logger.enable(PACKAGE_NAME)

    return LoggingHandle(handler_id)
