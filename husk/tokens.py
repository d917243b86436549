from enum import Enum, auto
from dataclasses import dataclass
from typing import Optional

class TokenType(Enum):
    # Single-character tokens
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    LEFT_BRACE = auto()
    RIGHT_BRACE = auto()
    SEMICOLON = auto()
    EQUAL = auto()
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()

    # Literals
    INT_LIT = auto()
    IDENTIFIER = auto()

    # Keywords
    LET = auto()
    PRINT = auto()
    FN = auto()
    RETURN = auto()

    EOF = auto()

KEYWORDS = {
    "return": TokenType.RETURN,
    "print": TokenType.PRINT,
    "let": TokenType.LET,
    "fn": TokenType.FN,
}

SINGLE_CHARS = {
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "=": TokenType.EQUAL,
    ";": TokenType.SEMICOLON,
}

BINARY_OPERATORS = frozenset({
    TokenType.PLUS,
    TokenType.MINUS,
    TokenType.STAR,
    TokenType.SLASH,
})

# Used in "Expected X, got Y" messages
_DESCRIPTIONS = {
    TokenType.INT_LIT: "integer literal",
    TokenType.IDENTIFIER: "identifier",
    TokenType.EOF: "end of input",
}


def describe(type_: TokenType) -> str:
    if type_ in _DESCRIPTIONS:
        return _DESCRIPTIONS[type_]
    for text, kw in KEYWORDS.items():
        if kw is type_:
            return f"'{text}'"
    for text, ch in SINGLE_CHARS.items():
        if ch is type_:
            return f"'{text}'"
    return "unknown token"


@dataclass(frozen=True)
class Token:
    type: TokenType
    text: Optional[str]
    line: int
    col: int

    def __repr__(self) -> str:
        txt = f" '{self.text}'" if self.text is not None else ""
        return f"{self.type.name}{txt} (@{self.line}:{self.col})"
