"""Fatal error kinds raised by the queue tools, the decoder and the menus.

Inner components raise QworkError; only the CLI decides to exit.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Why a session cannot continue."""

    TOOL_NOT_FOUND = "tool_not_found"
    TOOL_EXECUTION_FAILED = "tool_execution_failed"
    DECODE_ERROR = "decode_error"
    EMPTY_INPUT = "empty_input"


class QworkError(Exception):
    """Raised when the queue view or a queue operation cannot be trusted."""

    def __init__(self, kind: ErrorKind, message: str, *, output: str = "") -> None:
        super().__init__(message)
        self.kind = kind
        self.output = output
