"""
Token recognizers tried by the lexer at each source position.

The set of recognizer kinds is closed: every Recognizer record names its kind
and the lexer dispatches through _MATCHERS/_CONSUMERS. A LexerConfig is an
ordered, immutable tuple of recognizers; the first one whose matcher accepts
the current position gets to consume a token. Keywords have to come before
the identifier recognizer, otherwise `let` would lex as an identifier.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Dict, Optional, Tuple

from .tokens import TokenType, KEYWORDS, SINGLE_CHARS


class RecognizerKind(Enum):
    KEYWORD = auto()
    SINGLE_CHAR = auto()
    INT_LIT = auto()
    IDENTIFIER = auto()


@dataclass(frozen=True)
class Recognizer:
    kind: RecognizerKind
    token_type: TokenType
    text: str = ""  # keyword spelling or the single character

    @property
    def has_value(self) -> bool:
        # Only literals and identifiers keep their text on the token
        return self.kind in (RecognizerKind.INT_LIT, RecognizerKind.IDENTIFIER)

    @property
    def description(self) -> str:
        if self.kind is RecognizerKind.KEYWORD:
            return f"{self.text} keyword"
        if self.kind is RecognizerKind.SINGLE_CHAR:
            return f"{self.text} operator"
        if self.kind is RecognizerKind.INT_LIT:
            return "Integer literal"
        return "Identifier"

    def matches(self, source: str, index: int) -> bool:
        return _MATCHERS[self.kind](self, source, index)

    def consume(self, source: str, index: int) -> Optional[str]:
        """Return the lexeme starting at index, or None to let the next recognizer try."""
        return _CONSUMERS[self.kind](self, source, index)


def _is_ascii_alpha(ch: str) -> bool:
    return ch.isascii() and ch.isalpha()


def _is_ascii_alnum(ch: str) -> bool:
    return ch.isascii() and ch.isalnum()


def _is_ascii_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _keyword_matches(rec: Recognizer, source: str, index: int) -> bool:
    end = index + len(rec.text)
    if not source.startswith(rec.text, index):
        return False
    # `lettuce` is an identifier, not `let` + `tuce`
    return end >= len(source) or not _is_ascii_alnum(source[end])


def _keyword_consume(rec: Recognizer, source: str, index: int) -> Optional[str]:
    if not _keyword_matches(rec, source, index):
        return None
    return rec.text


def _char_matches(rec: Recognizer, source: str, index: int) -> bool:
    return index < len(source) and source[index] == rec.text


def _char_consume(rec: Recognizer, source: str, index: int) -> Optional[str]:
    return rec.text if _char_matches(rec, source, index) else None


def _scan(source: str, index: int, first: Callable[[str], bool], rest: Callable[[str], bool]) -> Optional[str]:
    if index >= len(source) or not first(source[index]):
        return None
    end = index + 1
    while end < len(source) and rest(source[end]):
        end += 1
    return source[index:end]


def _int_matches(rec: Recognizer, source: str, index: int) -> bool:
    return index < len(source) and _is_ascii_digit(source[index])


def _int_consume(rec: Recognizer, source: str, index: int) -> Optional[str]:
    return _scan(source, index, _is_ascii_digit, _is_ascii_digit)


def _ident_matches(rec: Recognizer, source: str, index: int) -> bool:
    return index < len(source) and _is_ascii_alpha(source[index])


def _ident_consume(rec: Recognizer, source: str, index: int) -> Optional[str]:
    return _scan(source, index, _is_ascii_alpha, _is_ascii_alnum)


_MATCHERS: Dict[RecognizerKind, Callable[[Recognizer, str, int], bool]] = {
    RecognizerKind.KEYWORD: _keyword_matches,
    RecognizerKind.SINGLE_CHAR: _char_matches,
    RecognizerKind.INT_LIT: _int_matches,
    RecognizerKind.IDENTIFIER: _ident_matches,
}

_CONSUMERS: Dict[RecognizerKind, Callable[[Recognizer, str, int], Optional[str]]] = {
    RecognizerKind.KEYWORD: _keyword_consume,
    RecognizerKind.SINGLE_CHAR: _char_consume,
    RecognizerKind.INT_LIT: _int_consume,
    RecognizerKind.IDENTIFIER: _ident_consume,
}


@dataclass(frozen=True)
class LexerConfig:
    recognizers: Tuple[Recognizer, ...]

    @classmethod
    def default(cls) -> LexerConfig:
        recs = []
        for text, type_ in KEYWORDS.items():
            recs.append(Recognizer(RecognizerKind.KEYWORD, type_, text))
        for ch, type_ in SINGLE_CHARS.items():
            recs.append(Recognizer(RecognizerKind.SINGLE_CHAR, type_, ch))
        # Catch-all recognizers go last
        recs.append(Recognizer(RecognizerKind.INT_LIT, TokenType.INT_LIT))
        recs.append(Recognizer(RecognizerKind.IDENTIFIER, TokenType.IDENTIFIER))
        return cls(tuple(recs))


DEFAULT_CONFIG = LexerConfig.default()
