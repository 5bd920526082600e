"""The interactive read-decide-act loop.

One pass:
  fetch snapshot -> select message -> show delay reasons -> select action
  -> dispatch -> show output

Every pass starts from a fresh snapshot because the previous action may
have changed the live queue.
"""

import logging

import click

from qwork.config import REASON_INDENT, REASON_WRAP_WIDTH
from qwork.integrations.postfix import PostfixClient
from qwork.queue.menu import LineReader, read_line, select_item, select_message
from qwork.queue.snapshot import fetch_snapshot
from qwork.schemas.queue import ACTIONS, Message, QueueAction

logger = logging.getLogger(__name__)

ACTION_PROMPT = "Select action:"


def format_reason(reason: str, *, width: int = REASON_WRAP_WIDTH, indent: int = REASON_INDENT) -> str:
    """Wrap and indent a delay reason for display."""
    pad = " " * indent
    return click.wrap_text(reason, width=width, initial_indent=pad, subsequent_indent=pad)


class Session:
    """Drives one operator session against the live queue.

    Usage::

        session = Session(PostfixClient(resolve_tools()))
        session.run()

    QworkError propagates out of run(); the caller decides how to exit.
    """

    def __init__(
        self,
        client: PostfixClient,
        *,
        read_line: LineReader = read_line,
        wrap_width: int = REASON_WRAP_WIDTH,
        reason_indent: int = REASON_INDENT,
    ) -> None:
        self._client = client
        self._read_line = read_line
        self._wrap_width = wrap_width
        self._reason_indent = reason_indent

    def run(self) -> None:
        """Loop until the operator cancels or quits."""
        while self.run_once():
            pass
        logger.debug("Session ended by operator")

    def run_once(self) -> bool:
        """Run one pass. Returns False when the session should end."""
        messages = fetch_snapshot(self._client)

        message = select_message(messages, self._read_line)
        if message is None:
            return False

        self.show_reasons(message)

        index = select_item(ACTION_PROMPT, [a.value for a in ACTIONS], self._read_line)
        if index is None:
            # Unusable action choice: drop this pass and refetch.
            click.echo("\n")
            return True

        action = ACTIONS[index]
        if action == QueueAction.QUIT:
            return False

        result = self._client.run_action(action, message.queue_id)
        click.echo(result.output)
        return True

    def show_reasons(self, message: Message) -> None:
        for recipient in message.recipients:
            click.echo(f"{recipient.address}:")
            click.echo(
                format_reason(
                    recipient.delay_reason,
                    width=self._wrap_width,
                    indent=self._reason_indent,
                )
                + "\n"
            )
