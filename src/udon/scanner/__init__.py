from .scanner import Mode, Scanner
from .tokens import Header, Token, TokenKind

__all__ = [
    "Scanner",
    "Mode",
    "Token",
    "TokenKind",
    "Header",
]
