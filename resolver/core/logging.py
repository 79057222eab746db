"""
Logging for the resolver.

Two layers: the ``resolver`` logger, rendered with rich when a console is
attached, and the per-call ``ExecutionLog`` whose text every entry point
hands back to its caller. Warnings and errors are also reported through
catchery so the host sees them with their context.
"""

import logging
from datetime import datetime
from typing import Any

from catchery import log_error, log_warning
from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: int = logging.INFO) -> None:
    """
    Routes the ``resolver`` logger to a rich console handler.

    Only the demonstration script calls this; a host embedding the resolver
    keeps its own logging configuration.

    Args:
        level (int): Minimum level shown on the console.

    """
    handler = RichHandler(
        console=Console(width=120, force_terminal=True, force_jupyter=False),
        show_time=True,
        show_level=True,
        show_path=False,
        # Battle messages may contain brackets.
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s - %(message)s", datefmt="[%X]"))
    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=[handler])


def get_logger(name: str) -> logging.Logger:
    """Returns a child of the ``resolver`` logger, or the root one for an empty name."""
    return logging.getLogger(f"resolver.{name}" if name else "resolver")


logger = get_logger("")


def _with_context(message: str, context: dict[str, Any] | None) -> str:
    if not context:
        return message
    pairs = " ".join(f"{key}={value}" for key, value in context.items())
    return f"{message} [{pairs}]"


def log_debug(message: str, context: dict[str, Any] | None = None) -> None:
    """Traces a message on the ``resolver`` logger when no execution log is at hand."""
    logger.debug(_with_context(message, context))


class ExecutionLog:
    """
    Collects the timestamped log lines of a single resolution call.

    The collected text is returned to the host as the execution log side
    output. Every line is also forwarded to the ``resolver`` logger, and
    warnings and errors are reported through catchery with their context.

    Attributes:
        prefix (str):
            Tag prepended to every line (e.g. ``SKILL_PROC``).
        lines (list[str]):
            The formatted lines collected so far.

    """

    def __init__(self, prefix: str) -> None:
        self.prefix: str = prefix
        self.lines: list[str] = []

    def _append(self, message: str) -> str:
        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        line = f"[{timestamp}] {self.prefix}: {message}"
        self.lines.append(line)
        return line

    def info(self, message: str) -> None:
        """Record an informational line."""
        self._append(message)
        logger.info(f"{self.prefix}: {message}")

    def debug(self, message: str) -> None:
        """Record a trace line that only matters when debugging a call."""
        self._append(message)
        logger.debug(f"{self.prefix}: {message}")

    def warning(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Record a warning line and report it with its context."""
        self._append(f"WARN: {_with_context(message, context)}")
        log_warning(f"{self.prefix}: {message}", context or {})

    def error(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Record an error line and report it with its context."""
        self._append(f"ERROR: {_with_context(message, context)}")
        log_error(f"{self.prefix}: {message}", context or {})

    @property
    def text(self) -> str:
        """The collected log as a single newline-terminated string."""
        return "".join(f"{line}\n" for line in self.lines)

    def __len__(self) -> int:
        return len(self.lines)
