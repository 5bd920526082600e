"""Tests for the Postfix queue tool wrapper."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from qwork.errors import ErrorKind, QworkError
from qwork.integrations.postfix import (
    ACTION_COMMANDS,
    PostfixClient,
    build_action_command,
    resolve_tools,
)
from qwork.schemas.queue import QueueAction, ToolPaths

TOOLS = ToolPaths(
    postqueue="/usr/sbin/postqueue",
    postsuper="/usr/sbin/postsuper",
    postcat="/usr/sbin/postcat",
)


def _completed(stdout, returncode=0):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=b"")


# ------------------------------------------------------------------
# resolve_tools
# ------------------------------------------------------------------


def test_resolve_tools_uses_path_lookup():
    with patch("qwork.integrations.postfix.shutil.which", side_effect=lambda c: f"/opt/bin/{c}"):
        paths = resolve_tools("postqueue", "postsuper", "postcat")
    assert paths == ToolPaths(
        postqueue="/opt/bin/postqueue",
        postsuper="/opt/bin/postsuper",
        postcat="/opt/bin/postcat",
    )


def test_resolve_tools_missing_tool():
    def which(command):
        return None if command == "postcat" else f"/usr/sbin/{command}"

    with patch("qwork.integrations.postfix.shutil.which", side_effect=which):
        with pytest.raises(QworkError, match="postcat") as excinfo:
            resolve_tools("postqueue", "postsuper", "postcat")
    assert excinfo.value.kind == ErrorKind.TOOL_NOT_FOUND


# ------------------------------------------------------------------
# build_action_command
# ------------------------------------------------------------------


@pytest.mark.parametrize(
    "action,expected",
    [
        (QueueAction.READ, ["/usr/sbin/postcat", "-q", "ABC123"]),
        (QueueAction.HOLD, ["/usr/sbin/postsuper", "-h", "ABC123"]),
        (QueueAction.UNHOLD, ["/usr/sbin/postsuper", "-H", "ABC123"]),
        (QueueAction.REQUEUE, ["/usr/sbin/postsuper", "-r", "ABC123"]),
        (QueueAction.DELETE, ["/usr/sbin/postsuper", "-d", "ABC123"]),
    ],
)
def test_action_commands(action, expected):
    assert build_action_command(TOOLS, action, "ABC123") == expected


def test_quit_has_no_command():
    assert QueueAction.QUIT not in ACTION_COMMANDS
    with pytest.raises(ValueError):
        build_action_command(TOOLS, QueueAction.QUIT, "ABC123")


# ------------------------------------------------------------------
# list_queue
# ------------------------------------------------------------------


class TestListQueue:
    def test_runs_postqueue_json(self):
        with patch("qwork.integrations.postfix.subprocess.run", return_value=_completed(b'{"a": 1}\n')) as run:
            raw = PostfixClient(TOOLS).list_queue()
        assert raw == '{"a": 1}\n'
        run.assert_called_once_with(["/usr/sbin/postqueue", "-j"], capture_output=True, check=True)

    def test_nonzero_exit_is_execution_failure(self):
        error = subprocess.CalledProcessError(69, ["postqueue", "-j"], output=b"", stderr=b"mail system is down")
        with patch("qwork.integrations.postfix.subprocess.run", side_effect=error):
            with pytest.raises(QworkError, match="status 69") as excinfo:
                PostfixClient(TOOLS).list_queue()
        assert excinfo.value.kind == ErrorKind.TOOL_EXECUTION_FAILED
        assert excinfo.value.output == "mail system is down"
        assert "mail system is down" not in str(excinfo.value)

    def test_missing_binary(self):
        with patch(
            "qwork.integrations.postfix.subprocess.run",
            side_effect=FileNotFoundError(2, "No such file or directory"),
        ):
            with pytest.raises(QworkError) as excinfo:
                PostfixClient(TOOLS).list_queue()
        assert excinfo.value.kind == ErrorKind.TOOL_NOT_FOUND

    def test_permission_denied(self):
        with patch(
            "qwork.integrations.postfix.subprocess.run",
            side_effect=PermissionError(13, "Permission denied"),
        ):
            with pytest.raises(QworkError) as excinfo:
                PostfixClient(TOOLS).list_queue()
        assert excinfo.value.kind == ErrorKind.TOOL_EXECUTION_FAILED

    def test_non_utf8_output_is_decode_error(self):
        with patch("qwork.integrations.postfix.subprocess.run", return_value=_completed(b"\xff\xfe")):
            with pytest.raises(QworkError) as excinfo:
                PostfixClient(TOOLS).list_queue()
        assert excinfo.value.kind == ErrorKind.DECODE_ERROR


# ------------------------------------------------------------------
# run_action
# ------------------------------------------------------------------


class TestRunAction:
    def test_captures_combined_output(self):
        with patch(
            "qwork.integrations.postfix.subprocess.run",
            return_value=_completed("postsuper: ABC123: placed on hold\n"),
        ) as run:
            result = PostfixClient(TOOLS).run_action(QueueAction.HOLD, "ABC123")

        assert result.action == QueueAction.HOLD
        assert result.queue_id == "ABC123"
        assert result.command == ["/usr/sbin/postsuper", "-h", "ABC123"]
        assert result.output == "postsuper: ABC123: placed on hold\n"

        args, kwargs = run.call_args
        assert args[0] == ["/usr/sbin/postsuper", "-h", "ABC123"]
        assert kwargs["stdout"] == subprocess.PIPE
        assert kwargs["stderr"] == subprocess.STDOUT
        assert kwargs["check"] is True

    def test_failure_carries_output(self):
        error = subprocess.CalledProcessError(
            1, ["postsuper", "-d", "ABC123"], output="postsuper: fatal: must be run as root\n"
        )
        with patch("qwork.integrations.postfix.subprocess.run", side_effect=error):
            with pytest.raises(QworkError) as excinfo:
                PostfixClient(TOOLS).run_action(QueueAction.DELETE, "ABC123")
        assert excinfo.value.kind == ErrorKind.TOOL_EXECUTION_FAILED
        assert "must be run as root" in excinfo.value.output

    def test_missing_binary(self):
        with patch(
            "qwork.integrations.postfix.subprocess.run",
            side_effect=FileNotFoundError(2, "No such file or directory"),
        ):
            with pytest.raises(QworkError) as excinfo:
                PostfixClient(TOOLS).run_action(QueueAction.READ, "ABC123")
        assert excinfo.value.kind == ErrorKind.TOOL_NOT_FOUND

    def test_quit_is_not_dispatchable(self):
        run = MagicMock()
        with patch("qwork.integrations.postfix.subprocess.run", run):
            with pytest.raises(ValueError):
                PostfixClient(TOOLS).run_action(QueueAction.QUIT, "ABC123")
        run.assert_not_called()
