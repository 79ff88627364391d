"""Logging setup for the analytics engine.

Every module logs through ``get_logger(__name__)``; all loggers hang off
the ``ledger_analytics`` package logger, which setup_logging configures
once per process. Report builds and exports are wrapped in LogContext so
the log shows what was requested and how long it took.
"""

import logging
import sys
import time
from pathlib import Path

PACKAGE_LOGGER = "ledger_analytics"

DEFAULT_LOG_FILE = "ledger_analytics.log"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Context keys whose values never reach the log
MASKED_KEYS = frozenset({"password", "token", "secret", "api_key", "email", "phone"})


def format_context(context: dict[str, object]) -> str:
    """Render context as ``key=value`` pairs, masking MASKED_KEYS."""
    return ", ".join(
        f"{key}={'***' if key.lower() in MASKED_KEYS else value}"
        for key, value in context.items()
    )


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    console_output: bool = True,
) -> logging.Logger:
    """Configure the package logger.

    Calling it again replaces the handlers from the previous call, so the
    CLI can reconfigure once settings have been read.

    Args:
        level: Log level name; unknown names fall back to INFO.
        log_file: Log file path (default: DEFAULT_LOG_FILE in the working directory).
        console_output: Also log to stderr. Stdout is reserved for exports.

    Returns:
        The package logger.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(numeric_level)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [
        logging.FileHandler(Path(log_file or DEFAULT_LOG_FILE), encoding="utf-8")
    ]
    if console_output:
        handlers.append(logging.StreamHandler(sys.stderr))

    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, placed under the package logger.

    Args:
        name: Module name (typically __name__).
    """
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")


class LogContext:
    """Logs the start, duration and failure of an operation.

    Exceptions are logged and re-raised unchanged.
    """

    def __init__(self, logger: logging.Logger, operation: str, **context: object):
        """Initialize log context.

        Args:
            logger: Logger to write to.
            operation: Operation name, e.g. "build_report".
            **context: Request details to include in the start message.
        """
        self.logger = logger
        self.operation = operation
        self.context = context
        self._started = 0.0

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._started) * 1000

    def __enter__(self) -> "LogContext":
        self._started = time.perf_counter()
        self.logger.debug(f"Starting {self.operation}: {format_context(self.context)}")
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> bool:
        if exc_type is not None:
            self.logger.error(
                f"{self.operation} failed after {self.elapsed_ms:.1f} ms: "
                f"{exc_type.__name__}: {exc_val}",
                exc_info=True,
            )
        else:
            self.logger.debug(f"Finished {self.operation} in {self.elapsed_ms:.1f} ms")
        return False
