"""Synchronous wrapper around the Postfix queue tools.

Tool paths are resolved once, up front, and injected into the client so that
the session never looks anything up on PATH itself.

Usage::

    client = PostfixClient(resolve_tools())
    raw = client.list_queue()
    result = client.run_action(QueueAction.HOLD, "4BC2D1A3F")
"""

import logging
import shutil
import subprocess

from qwork.config import POSTCAT_COMMAND, POSTQUEUE_COMMAND, POSTSUPER_COMMAND
from qwork.errors import ErrorKind, QworkError
from qwork.schemas.queue import ActionResult, QueueAction, ToolPaths

logger = logging.getLogger(__name__)

LIST_FLAG = "-j"  # one JSON object per queued message

# action -> (tool attribute on ToolPaths, flag)
ACTION_COMMANDS: dict[QueueAction, tuple[str, str]] = {
    QueueAction.READ: ("postcat", "-q"),
    QueueAction.HOLD: ("postsuper", "-h"),
    QueueAction.UNHOLD: ("postsuper", "-H"),
    QueueAction.REQUEUE: ("postsuper", "-r"),
    QueueAction.DELETE: ("postsuper", "-d"),
}


def _which(command: str) -> str:
    path = shutil.which(command)
    if path is None:
        raise QworkError(ErrorKind.TOOL_NOT_FOUND, f"{command}: executable not found in PATH")
    logger.debug("Resolved %s -> %s", command, path)
    return path


def resolve_tools(
    postqueue: str = POSTQUEUE_COMMAND,
    postsuper: str = POSTSUPER_COMMAND,
    postcat: str = POSTCAT_COMMAND,
) -> ToolPaths:
    """Locate the three queue tools.

    Raises:
        QworkError: TOOL_NOT_FOUND for the first tool that cannot be located.
    """
    return ToolPaths(
        postqueue=_which(postqueue),
        postsuper=_which(postsuper),
        postcat=_which(postcat),
    )


def build_action_command(tools: ToolPaths, action: QueueAction, queue_id: str) -> list[str]:
    """Return the argv that performs ``action`` on one queued message.

    Raises:
        ValueError: For QUIT, which is handled by the session, not a tool.
    """
    if action not in ACTION_COMMANDS:
        raise ValueError(f"Action {action.value} does not map to a queue tool")
    tool, flag = ACTION_COMMANDS[action]
    return [getattr(tools, tool), flag, queue_id]


class PostfixClient:
    """Runs the queue tools and turns their failures into QworkError."""

    def __init__(self, tools: ToolPaths) -> None:
        self._tools = tools

    def list_queue(self) -> str:
        """Run ``postqueue -j`` and return its standard output.

        Raises:
            QworkError: TOOL_NOT_FOUND / TOOL_EXECUTION_FAILED if the tool cannot
                run or exits non-zero, DECODE_ERROR if the output is not UTF-8.
        """
        command = [self._tools.postqueue, LIST_FLAG]
        logger.debug("Running %s", command)
        try:
            result = subprocess.run(command, capture_output=True, check=True)
        except FileNotFoundError as exc:
            raise QworkError(ErrorKind.TOOL_NOT_FOUND, f"{command[0]}: {exc.strerror}") from exc
        except OSError as exc:
            raise QworkError(
                ErrorKind.TOOL_EXECUTION_FAILED, f"{command[0]}: {exc.strerror}"
            ) from exc
        except subprocess.CalledProcessError as exc:
            stderr = exc.stderr.decode("utf-8", errors="replace").strip()
            raise QworkError(
                ErrorKind.TOOL_EXECUTION_FAILED,
                f"{command[0]} exited with status {exc.returncode}",
                output=stderr,
            ) from exc

        try:
            return result.stdout.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise QworkError(
                ErrorKind.DECODE_ERROR, f"{command[0]} output is not valid UTF-8: {exc}"
            ) from exc

    def run_action(self, action: QueueAction, queue_id: str) -> ActionResult:
        """Run one queue operation, capturing stdout and stderr together.

        Raises:
            QworkError: TOOL_NOT_FOUND / TOOL_EXECUTION_FAILED if the tool cannot
                run or exits non-zero.
        """
        command = build_action_command(self._tools, action, queue_id)
        logger.info("Dispatching %s on %s: %s", action.value, queue_id, command)
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=True,
            )
        except FileNotFoundError as exc:
            raise QworkError(ErrorKind.TOOL_NOT_FOUND, f"{command[0]}: {exc.strerror}") from exc
        except OSError as exc:
            raise QworkError(
                ErrorKind.TOOL_EXECUTION_FAILED, f"{command[0]}: {exc.strerror}"
            ) from exc
        except subprocess.CalledProcessError as exc:
            output = exc.output or ""
            raise QworkError(
                ErrorKind.TOOL_EXECUTION_FAILED,
                f"{action.value} {queue_id} failed with status {exc.returncode}",
                output=output,
            ) from exc

        return ActionResult(
            action=action,
            queue_id=queue_id,
            command=command,
            output=result.stdout or "",
        )
