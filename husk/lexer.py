import logging
from typing import List
from .tokens import Token, TokenType
from .recognizers import LexerConfig, DEFAULT_CONFIG
from .diagnostics import ErrorReporter
from .errors import LexError, LexErrorKind

logger = logging.getLogger(__name__)

class Lexer:
    def __init__(self, source: str, filename: str = "", config: LexerConfig = DEFAULT_CONFIG, color: bool = True):
        self.source = source
        self.config = config
        self.reporter = ErrorReporter(source, filename, color)
        self.tokens: List[Token] = []
        self.current = 0
        self.line = 1
        self.col = 1

    def tokenize(self) -> List[Token]:
        self.tokens = []
        self.current = 0
        self.line = 1
        self.col = 1
        while not self._is_at_end():
            if self._skip_whitespace():
                continue
            self.tokens.append(self._next_token())
        self.tokens.append(Token(TokenType.EOF, None, self.line, self.col))
        logger.debug("lexed %d tokens over %d lines", len(self.tokens), self.line)
        return self.tokens

    def _is_at_end(self) -> bool:
        return self.current >= len(self.source)

    def _advance(self) -> str:
        if self._is_at_end():
            raise self._error(LexErrorKind.UNEXPECTED_EOF, "Unexpected end of input")
        ch = self.source[self.current]
        self.current += 1
        if ch == '\n':
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _skip_whitespace(self) -> bool:
        if not self.source[self.current].isspace():
            return False
        self._advance()
        return True

    def _next_token(self) -> Token:
        line, col = self.line, self.col
        for rec in self.config.recognizers:
            if not rec.matches(self.source, self.current):
                continue
            lexeme = rec.consume(self.source, self.current)
            if lexeme is None:
                # Recognizer backed out; the next one gets a chance
                continue
            for _ in lexeme:
                self._advance()
            logger.debug("%d:%d %s", line, col, rec.description)
            return Token(rec.token_type, lexeme if rec.has_value else None, line, col)
        ch = self.source[self.current]
        raise self._error(LexErrorKind.UNEXPECTED_CHARACTER, f"Unexpected character '{ch}'")

    def _error(self, kind: LexErrorKind, message: str) -> LexError:
        rendered = self.reporter.format_error(message, self.line, self.col)
        return LexError(kind, message, self.line, self.col, rendered)


def tokenize(source: str, filename: str = "", config: LexerConfig = DEFAULT_CONFIG, color: bool = True) -> List[Token]:
    return Lexer(source, filename, config, color).tokenize()
