"""Schemas for the Postfix queue snapshot and the operator actions.

Covers the full lifecycle:
  postqueue -j record -> Message -> menu row -> QueueAction -> ActionResult
"""

import re
from datetime import UTC, datetime, timedelta
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
NULL_TIME_TOKEN = "null"

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class QueueName(StrEnum):
    """Known Postfix sub-queues. Snapshots may contain others (e.g. corrupt)."""

    ACTIVE = "active"
    DEFERRED = "deferred"
    HOLD = "hold"


QUEUE_GLYPHS: dict[str, str] = {
    QueueName.DEFERRED: " ",
    QueueName.ACTIVE: "*",
    QueueName.HOLD: "!",
}


class QueueAction(StrEnum):
    """Operator actions offered for a selected message, in menu order."""

    READ = "Read"
    HOLD = "Hold"
    UNHOLD = "Unhold"
    REQUEUE = "Requeue"
    DELETE = "Delete"
    QUIT = "Quit"


ACTIONS: tuple[QueueAction, ...] = tuple(QueueAction)


def decode_arrival_time(value: object) -> datetime | None:
    """Decode an arrival time as written by ``postqueue -j``.

    ``None`` and the string ``"null"`` mean unset. Integers, bare or quoted,
    are seconds since the Unix epoch in UTC.

    Raises:
        ValueError: If the value is neither unset nor a base-10 integer.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"invalid arrival time: {value!r}")
    if isinstance(value, int):
        seconds = value
    elif isinstance(value, str):
        if value == NULL_TIME_TOKEN:
            return None
        if not _INTEGER_RE.fullmatch(value):
            raise ValueError(f"invalid arrival time: {value!r}")
        seconds = int(value)
    else:
        raise ValueError(f"invalid arrival time: {value!r}")

    try:
        return EPOCH + timedelta(seconds=seconds)
    except OverflowError as exc:
        raise ValueError(f"arrival time out of range: {value!r}") from exc


def encode_arrival_time(value: datetime | None) -> str:
    """Inverse of :func:`decode_arrival_time` for the quoted-string form."""
    if value is None:
        return NULL_TIME_TOKEN
    return str((value - EPOCH) // timedelta(seconds=1))


def format_arrival_time(value: datetime | None) -> str:
    """Human-readable arrival time for menu rows."""
    if value is None:
        return "(unknown)"
    return value.astimezone(UTC).strftime("%Y-%m-%d %H:%M:%S UTC")


# --- Snapshot records ---


class Recipient(BaseModel):
    """One delivery target of a queued message."""

    model_config = ConfigDict(frozen=True)

    address: str
    delay_reason: str = ""

    @field_validator("delay_reason", mode="before")
    @classmethod
    def _null_reason(cls, v: object) -> object:
        return "" if v is None else v


class Message(BaseModel):
    """One entry of a ``postqueue -j`` snapshot.

    Unknown keys are ignored. A message without recipients cannot be shown
    in the menu, so it is rejected here rather than at render time.
    """

    model_config = ConfigDict(frozen=True)

    queue_name: str = ""
    queue_id: str = Field(min_length=1)
    arrival_time: datetime | None = None
    message_size: int = Field(default=0, ge=0)
    sender: str = ""
    recipients: list[Recipient] = Field(min_length=1)

    @field_validator("queue_name", "sender", mode="before")
    @classmethod
    def _null_string(cls, v: object) -> object:
        return "" if v is None else v

    @field_validator("message_size", mode="before")
    @classmethod
    def _null_size(cls, v: object) -> object:
        return 0 if v is None else v

    @field_validator("arrival_time", mode="before")
    @classmethod
    def _decode_arrival_time(cls, v: object) -> datetime | None:
        if isinstance(v, datetime):
            return v
        return decode_arrival_time(v)

    @field_serializer("arrival_time")
    def _encode_arrival_time(self, v: datetime | None) -> str:
        return encode_arrival_time(v)

    @property
    def queue_glyph(self) -> str:
        """Single-character marker for the sub-queue, or the raw name."""
        return QUEUE_GLYPHS.get(self.queue_name, self.queue_name)

    @property
    def primary_address(self) -> str:
        return self.recipients[0].address


# Snapshot order, never re-sorted.
MessageSet = tuple[Message, ...]


# --- Tools and dispatch ---


class ToolPaths(BaseModel):
    """Resolved locations of the Postfix queue tools."""

    postqueue: str
    postsuper: str
    postcat: str


class ActionResult(BaseModel):
    """Outcome of one successfully dispatched queue operation."""

    action: QueueAction
    queue_id: str
    command: list[str]
    output: str = Field(default="", description="Combined stdout and stderr")
