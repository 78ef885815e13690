# src/udon/events/errors.py

from enum import Enum


class ErrorCode(str, Enum):
    """Fault reported by the single terminal Error event."""

    # Syntax
    UNEXPECTED_EOF = "unexpected_eof"
    UNEXPECTED_CHAR = "unexpected_char"

    # Unterminated constructs
    UNCLOSED = "unclosed"
    UNCLOSED_STRING_VALUE = "unclosed_string_value"
    UNCLOSED_ARRAY = "unclosed_array"
    UNCLOSED_FREEFORM = "unclosed_freeform"
    UNCLOSED_TEXT = "unclosed_text"
    UNCLOSED_INTERPOLATION = "unclosed_interpolation"

    # Policy
    NO_TABS = "no_tabs"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.UNEXPECTED_EOF: "Unexpected end of input",
    ErrorCode.UNEXPECTED_CHAR: "Unexpected character",
    ErrorCode.UNCLOSED: "Unclosed construct",
    ErrorCode.UNCLOSED_STRING_VALUE: "Unclosed quoted string value",
    ErrorCode.UNCLOSED_ARRAY: "Unclosed array",
    ErrorCode.UNCLOSED_FREEFORM: "Unclosed freeform block",
    ErrorCode.UNCLOSED_TEXT: "Unclosed text inside embedded element",
    ErrorCode.UNCLOSED_INTERPOLATION: "Unclosed interpolation",
    ErrorCode.NO_TABS: "Tabs are not allowed in indentation",
}
