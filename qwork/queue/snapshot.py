"""Decode ``postqueue -j`` output into an ordered MessageSet.

One JSON object per line. A single bad line invalidates the whole snapshot:
acting on a partial view of the queue is worse than not acting at all.
"""

import logging

from pydantic import ValidationError

from qwork.errors import ErrorKind, QworkError
from qwork.integrations.postfix import PostfixClient
from qwork.schemas.queue import Message, MessageSet

logger = logging.getLogger(__name__)


def decode_snapshot(raw: str) -> MessageSet:
    """Decode a line-delimited JSON queue listing.

    Surrounding whitespace is trimmed and blank lines are skipped. Messages
    keep the order of the input lines.

    Raises:
        QworkError: DECODE_ERROR naming the first line that failed.
    """
    messages: list[Message] = []
    for lineno, line in enumerate(raw.strip().split("\n"), 1):
        line = line.strip()
        if not line:
            continue
        try:
            messages.append(Message.model_validate_json(line))
        except ValidationError as exc:
            raise QworkError(
                ErrorKind.DECODE_ERROR,
                f"Malformed queue record on line {lineno}: {exc}",
            ) from exc

    logger.debug("Decoded %d queued message(s)", len(messages))
    return tuple(messages)


def encode_snapshot(messages: MessageSet) -> str:
    """Re-encode messages in the line-delimited form accepted by decode_snapshot."""
    return "\n".join(m.model_dump_json() for m in messages)


def fetch_snapshot(client: PostfixClient) -> MessageSet:
    """Take a fresh snapshot of the live queue."""
    return decode_snapshot(client.list_queue())
