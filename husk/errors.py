"""Error types raised by the husk pipeline stages."""
from __future__ import annotations
from enum import Enum, auto
from typing import Optional

from .tokens import TokenType


class LexErrorKind(Enum):
    UNEXPECTED_CHARACTER = auto()
    UNEXPECTED_EOF = auto()


class ParseErrorKind(Enum):
    EXPECTED_TOKEN = auto()
    EXPECTED_EXPRESSION = auto()
    UNEXPECTED_EOF = auto()
    MISSING_MAIN_FUNCTION = auto()
    TOP_LEVEL_NOT_ALLOWED = auto()


class LowerErrorKind(Enum):
    DUPLICATE_BINDING = auto()
    UNDEFINED_VARIABLE = auto()
    UNSUPPORTED_OPERATOR = auto()
    DUPLICATE_FUNCTION = auto()
    LITERAL_OUT_OF_RANGE = auto()


class HuskError(Exception):
    """Base error with optional source location.

    `rendered` holds the ErrorReporter output when the raising stage had the
    source text at hand; otherwise it is the bare message.
    """

    def __init__(self, kind: Enum, message: str, line: Optional[int] = None,
                 column: Optional[int] = None, rendered: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.line = line
        self.column = column
        self.rendered = rendered if rendered is not None else message

    @property
    def location(self) -> str:
        if self.line is None:
            return ""
        return f"{self.line}:{self.column}"


class LexError(HuskError):
    kind: LexErrorKind


class ParseError(HuskError):
    kind: ParseErrorKind

    def __init__(self, kind: ParseErrorKind, message: str, line: Optional[int] = None,
                 column: Optional[int] = None, rendered: Optional[str] = None,
                 expected: Optional[TokenType] = None):
        super().__init__(kind, message, line, column, rendered)
        self.expected = expected


class LowerError(HuskError):
    kind: LowerErrorKind

    def __init__(self, kind: LowerErrorKind, message: str, line: Optional[int] = None,
                 column: Optional[int] = None, rendered: Optional[str] = None,
                 name: Optional[str] = None):
        super().__init__(kind, message, line, column, rendered)
        # offending variable/function/operator
        self.name = name
