"""
Centralized error handling for the resolver.

Every entry point turns failures into a well-formed battle document instead of
raising: input errors are reported through the returned document's state tag
and message, and through the execution log.
"""

import json
import traceback
from contextlib import contextmanager
from typing import Any, Iterator

from pydantic import ValidationError

from core.constants import BattleStateTag
from core.logging import ExecutionLog, logger


class ResolverError(Exception):
    """Base class for every failure a resolution call reports to its caller."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message: str = message
        self.context: dict[str, Any] = context or {}


class InputError(ResolverError):
    """A missing or malformed document, or an id that does not resolve."""


class InsufficientResourceError(ResolverError):
    """The team or the actor cannot pay the cost of a command."""


class InvalidActionError(ResolverError):
    """The command is well-formed but cannot be performed in this state."""


def parse_json_input(value: Any, name: str) -> Any:
    """
    Decodes a JSON string input, passing already decoded values through.

    Args:
        value (Any): The raw input (JSON string, dict or list).
        name (str): Human-readable parameter name for error messages.

    Returns:
        Any: The decoded value.

    Raises:
        InputError: If the value is empty or not valid JSON.

    """
    if isinstance(value, (dict, list)):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InputError(f"Input '{name}' is empty.")
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise InputError(f"Input '{name}' is not valid JSON: {e.msg}.") from e


def require_non_empty_string(value: Any, name: str) -> str:
    """
    Validates that a scalar input is a non-empty string.

    Args:
        value (Any): The value to validate.
        name (str): Human-readable parameter name for error messages.

    Returns:
        str: The validated string.

    Raises:
        InputError: If the value is not a non-empty string.

    """
    if not isinstance(value, str) or not value.strip():
        raise InputError(f"Input '{name}' is empty.")
    return value


def describe_error(error: Exception) -> str:
    """
    Produces the one-line description of an error shown to the player.

    Args:
        error (Exception): The error raised inside a resolution call.

    Returns:
        str: The description.

    """
    if isinstance(error, ResolverError):
        return error.message
    if isinstance(error, ValidationError):
        first = error.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        return f"Malformed document at '{location}': {first['msg']}"
    return f"{type(error).__name__}: {error}"


class ErrorCapture:
    """Holds the error a resolution boundary stopped, if any."""

    def __init__(self) -> None:
        self.error: Exception | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@contextmanager
def resolution_boundary() -> Iterator[ErrorCapture]:
    """
    Stops any error raised while resolving a call.

    The body of an entry point runs inside this boundary; when it raises,
    the error is stored on the yielded capture so that the entry point can
    turn it into an error document with ``build_error_document``, which
    also logs it.

    Yields:
        ErrorCapture: Holds the stopped error after the block exits.

    """
    capture = ErrorCapture()
    try:
        yield capture
    except Exception as e:
        capture.error = e


def build_error_document(
    raw_document: Any,
    label: str,
    error: Exception,
    log: ExecutionLog,
) -> dict[str, Any]:
    """
    Builds the document returned when a resolution call fails.

    The input document is returned untouched apart from its state tag and
    message, so a failed call never leaves a half-applied action behind.

    Args:
        raw_document (Any):
            The decoded input document, or None if it could not be decoded.
        label (str):
            Human-readable name of the failing step (e.g. ``"Skill"``).
        error (Exception):
            The error raised inside the call.
        log (ExecutionLog):
            The execution log of the call.

    Returns:
        dict[str, Any]:
            The error document.

    """
    message = describe_error(error)
    context = error.context if isinstance(error, ResolverError) else {}
    if isinstance(error, (ResolverError, ValidationError)):
        log.error(message, context)
    else:
        log.error(f"Unexpected failure: {message}")
        logger.critical(
            "".join(traceback.format_exception(type(error), error, error.__traceback__))
        )

    document = dict(raw_document) if isinstance(raw_document, dict) else {}
    document["battleState"] = BattleStateTag.ERROR.value
    document["battleMessage"] = f"{label} Error: {message}"
    return document
