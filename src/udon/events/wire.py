# src/udon/events/wire.py

"""Boundary records for events.

Handles are resolved here and nowhere else: a record carries raw bytes, so it
stays valid after the arena is released. Content bytes are passed through
untouched (no decoding, no unescaping).
"""

import dataclasses
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from udon.arena import ChunkArena, ChunkSlice

from .base import Span
from .events import SCALAR_TYPES, Error, Event


class SpanRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    start: int
    end: int


class EventRecord(BaseModel):
    """`{type, <kind fields>, span}` shape of one event.

    Kind-specific fields are stored as extra attributes, so
    `model_dump()` yields a flat mapping.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    type: str
    span: SpanRecord


def to_record(event: Event, arena: ChunkArena) -> EventRecord:
    """Resolve every handle of `event` against `arena`.

    Raises:
        LookupError: If a handle no longer resolves (released or foreign arena).
    """
    fields: dict[str, Any] = {}
    for f in dataclasses.fields(event):
        if f.name == "span":
            continue
        fields[f.name] = _convert(getattr(event, f.name), arena)
    if isinstance(event, Error):
        fields["message"] = event.message
    return EventRecord(
        type=event.kind.value,
        span=SpanRecord(start=event.span.start, end=event.span.end),
        **fields,
    )


def to_records(events: list[Event], arena: ChunkArena) -> list[dict[str, Any]]:
    return [to_record(event, arena).model_dump() for event in events]


def _convert(value: Any, arena: ChunkArena) -> Any:
    if isinstance(value, ChunkSlice):
        resolved = arena.resolve_bytes(value)
        if resolved is None:
            raise LookupError(f"slice {value} does not resolve in arena {arena.id}")
        return resolved
    if isinstance(value, SCALAR_TYPES):
        return to_record(value, arena)  # type: ignore[arg-type]
    if isinstance(value, tuple):
        return [_convert(item, arena) for item in value]
    if isinstance(value, Span):
        return SpanRecord(start=value.start, end=value.end)
    if isinstance(value, Enum):
        return value.value
    return value
