import logging
from typing import List, Optional
from .tokens import Token, TokenType, BINARY_OPERATORS, describe
from .diagnostics import ErrorReporter
from .errors import ParseError, ParseErrorKind
from . import ast as A

logger = logging.getLogger(__name__)

class Parser:
    def __init__(self, tokens: List[Token], source: str = "", filename: str = "", color: bool = True):
        self.tokens = tokens
        self.reporter = ErrorReporter(source, filename, color)
        self.current = 0
        if not tokens or tokens[-1].type != TokenType.EOF:
            raise ValueError("token list must end with an EOF token")

    def parse(self) -> A.Program:
        funcs: List[A.Function] = []
        while not self._is_at_end():
            if not self._match(TokenType.FN):
                tok = self._peek()
                raise self._error(ParseErrorKind.TOP_LEVEL_NOT_ALLOWED,
                                  "Expected function definition (top-level statements not allowed)", tok)
            funcs.append(self.parse_function())
        program = A.Program(tuple(funcs))
        if program.function("main") is None:
            raise self._error(ParseErrorKind.MISSING_MAIN_FUNCTION, "Program must have a 'main' function")
        logger.debug("parsed %d function(s)", len(funcs))
        return program

    # Helpers
    def _match(self, *types: TokenType) -> bool:
        for t in types:
            if self._check(t):
                self._advance()
                return True
        return False

    def _consume(self, type_: TokenType, context: str) -> Token:
        if self._check(type_):
            return self._advance()
        tok = self._peek()
        if tok.type == TokenType.EOF:
            raise self._error(ParseErrorKind.UNEXPECTED_EOF, f"Expected {context} at end of input", tok, type_)
        raise self._error(ParseErrorKind.EXPECTED_TOKEN,
                          f"Expected {context}, got {describe(tok.type)}", tok, type_)

    def _check(self, type_: TokenType) -> bool:
        if self._is_at_end():
            return False
        return self._peek().type == type_

    def _advance(self) -> Token:
        if not self._is_at_end():
            self.current += 1
        return self._previous()

    def _is_at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _peek(self) -> Token:
        return self.tokens[self.current]

    def _previous(self) -> Token:
        return self.tokens[self.current - 1]

    def _error(self, kind: ParseErrorKind, message: str, tok: Optional[Token] = None,
               expected: Optional[TokenType] = None) -> ParseError:
        if tok is None:
            return ParseError(kind, message, rendered=self.reporter.format_error(message), expected=expected)
        rendered = self.reporter.format_error(message, tok.line, tok.col)
        return ParseError(kind, message, tok.line, tok.col, rendered, expected)

    # Grammar
    def parse_function(self) -> A.Function:
        # 'fn' has already been consumed by parse()
        name_tok = self._consume(TokenType.IDENTIFIER, "function name after 'fn'")
        self._consume(TokenType.LEFT_PAREN, "'('")
        self._consume(TokenType.RIGHT_PAREN, "')' (parameters not yet supported)")
        self._consume(TokenType.LEFT_BRACE, "'{' to start function body")
        body: List[A.Stmt] = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            body.append(self.parse_statement())
        self._consume(TokenType.RIGHT_BRACE, "'}' to end function body")
        return A.Function(name_tok, tuple(body))

    def parse_statement(self) -> A.Stmt:
        if self._match(TokenType.LET):
            ident = self._consume(TokenType.IDENTIFIER, "identifier after 'let'")
            self._consume(TokenType.EQUAL, "'=' after identifier")
            expr = self.parse_expr()
            self._consume(TokenType.SEMICOLON, "semicolon after let")
            return A.Let(ident, expr)
        if self._match(TokenType.PRINT):
            self._consume(TokenType.LEFT_PAREN, "'('")
            expr = self.parse_expr()
            self._consume(TokenType.RIGHT_PAREN, "')'")
            self._consume(TokenType.SEMICOLON, "semicolon after print")
            return A.Print(expr)
        if self._match(TokenType.RETURN):
            expr = self.parse_expr()
            self._consume(TokenType.SEMICOLON, "semicolon after return")
            return A.Return(expr)
        expr = self.parse_expr()
        self._consume(TokenType.SEMICOLON, "semicolon after expression")
        return A.ExprStmt(expr)

    def parse_expr(self) -> A.Expr:
        primary = self.parse_primary()
        if primary is None:
            tok = self._peek()
            if tok.type == TokenType.EOF:
                raise self._error(ParseErrorKind.UNEXPECTED_EOF, "Expected expression at end of input", tok)
            raise self._error(ParseErrorKind.EXPECTED_EXPRESSION, "Expected expression", tok)
        if self._peek().type in BINARY_OPERATORS:
            op = self._advance()
            # The right operand is a whole expression, so operators nest to the right
            rhs = self.parse_expr()
            return A.BinaryExpr(primary, op, rhs)
        return primary

    def parse_primary(self) -> Optional[A.PrimaryExpr]:
        if self._match(TokenType.INT_LIT):
            return A.PrimaryExpr(int_lit=self._previous())
        if self._match(TokenType.IDENTIFIER):
            return A.PrimaryExpr(ident=self._previous())
        return None


def parse(tokens: List[Token], source: str = "", filename: str = "", color: bool = True) -> A.Program:
    return Parser(tokens, source, filename, color).parse()
