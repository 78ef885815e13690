# src/udon/parser/config.py

from dataclasses import dataclass


@dataclass(frozen=True)
class ParserConfig:
    """Configuration for the streaming parser.

    Immutable. Explicit. No magic defaults from environment.
    """

    capacity_hint: int = 64  # Advisory initial event-queue sizing
    emit_warnings: bool = True
