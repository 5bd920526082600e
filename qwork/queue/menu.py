"""Numbered selection menus read from a line-oriented terminal.

Two variants share the same input parsing but fail differently:

* select_message re-renders the whole list on malformed input and keeps
  asking until it gets a message or 0 (cancel).
* select_item asks once and hands anything unusable back to the caller as
  None, leaving it to decide what a bad answer means.
"""

import logging
import sys
from collections.abc import Callable, Sequence

import click

from qwork.errors import ErrorKind, QworkError
from qwork.schemas.queue import Message, format_arrival_time

logger = logging.getLogger(__name__)

LineReader = Callable[[], str | None]

CANCEL = 0


def read_line() -> str | None:
    """Read one line from stdin, or None at end of input."""
    line = sys.stdin.readline()
    return line if line else None


def parse_choice(answer: str | None) -> int | None:
    """Parse an operator answer as an unsigned base-10 integer."""
    if answer is None:
        return None
    answer = answer.strip()
    if not answer.isascii() or not answer.isdigit():
        return None
    return int(answer)


def render_message_row(ordinal: int, message: Message) -> str:
    return (
        f"{ordinal:4d}  {message.queue_id}{message.queue_glyph}  "
        f"{message.primary_address}  {format_arrival_time(message.arrival_time)}"
    )


def render_message_rows(messages: Sequence[Message]) -> list[str]:
    return [render_message_row(i, m) for i, m in enumerate(messages, 1)]


def select_message(
    messages: Sequence[Message], read_line: LineReader = read_line
) -> Message | None:
    """Let the operator pick one message.

    Returns:
        The chosen message, or None if the operator entered 0.

    Raises:
        QworkError: EMPTY_INPUT if there is nothing to choose from.
    """
    if not messages:
        raise QworkError(ErrorKind.EMPTY_INPUT, "There are no messages to choose from.")

    count = len(messages)
    while True:
        for row in render_message_rows(messages):
            click.echo(row)

        while True:
            click.echo(
                f"Select a message by entering a number from 1 to {count}. Enter 0 to cancel."
            )
            choice = parse_choice(read_line())
            if choice is None:
                logger.debug("Unreadable message choice, redrawing menu")
                break
            if choice == CANCEL:
                return None
            if choice <= count:
                return messages[choice - 1]


def select_item(prompt: str, items: Sequence[str], read_line: LineReader = read_line) -> int | None:
    """Ask once for one of ``items``.

    Returns:
        The zero-based index chosen, or None for anything outside 1..N.

    Raises:
        QworkError: EMPTY_INPUT if ``items`` is empty.
    """
    if not items:
        raise QworkError(ErrorKind.EMPTY_INPUT, "There are no items to choose from.")

    for i, item in enumerate(items, 1):
        click.echo(f"{i:3d}\t{item}")
    click.echo(f"{prompt} ", nl=False)

    choice = parse_choice(read_line())
    if choice is None or choice == CANCEL or choice > len(items):
        return None
    return choice - 1
