"""
AST to IR lowering.

One pass over the program, one visit per node. Every function gets a fresh
scope (variable name -> slot) and a single entry block. A function without a
`return` statement ends with an implicit `ret 0`.
"""
from __future__ import annotations
import logging
from typing import Dict, Optional, Set
from . import ast as A
from .tokens import Token, TokenType
from .diagnostics import ErrorReporter
from .errors import LowerError, LowerErrorKind
from .ir import (
    OpCode, Instr, Const, Temp, Slot, Global, Value,
    BasicBlock, IRFunction, Module, ExternDecl, StringConstant,
    I32_MAX,
)

logger = logging.getLogger(__name__)

MODULE_NAME = "Husk"
PRINTF = "printf"
PRINT_FORMAT = ".fmt"

_ARITH = {
    TokenType.PLUS: (OpCode.ADD, "addtmp"),
    TokenType.MINUS: (OpCode.SUB, "subtmp"),
    TokenType.STAR: (OpCode.MUL, "multmp"),
    # Division by zero is not guarded here; see DESIGN.md
    TokenType.SLASH: (OpCode.SDIV, "divtmp"),
}


class Lowerer:
    def __init__(self, reporter: Optional[ErrorReporter] = None):
        self.reporter = reporter
        self.module = Module(MODULE_NAME)
        self._fn: Optional[IRFunction] = None
        self._scope: Dict[str, Slot] = {}
        self._temp_counts: Dict[str, int] = {}
        self._temp_names: Set[str] = set()
        self._dropped = 0

    def lower(self, program: A.Program) -> Module:
        self.module = Module(MODULE_NAME)
        seen: Dict[str, Token] = {}
        for fn in program.functions:
            if fn.name_text in seen:
                raise self._error(LowerErrorKind.DUPLICATE_FUNCTION,
                                  f"Function '{fn.name_text}' is already defined", fn.name, fn.name_text)
            seen[fn.name_text] = fn.name
        for fn in program.functions:
            self.module.functions.append(self._lower_fn(fn))
        if self.module.extern(PRINTF) is not None and PRINTF in seen:
            # print calls the C printf; a user function cannot take its symbol
            raise self._error(LowerErrorKind.DUPLICATE_FUNCTION,
                              f"Function '{PRINTF}' clashes with the printf used by print", seen[PRINTF], PRINTF)
        return self.module

    def _lower_fn(self, fn: A.Function) -> IRFunction:
        irf = IRFunction(fn.name_text, BasicBlock("entry"))
        self._fn = irf
        self._scope = irf.slots
        self._temp_counts = {}
        self._temp_names = set()
        self._dropped = 0
        try:
            for st in fn.body:
                self._lower_stmt(st)
        except LowerError as e:
            # Prefix the function name, keep the position of the inner error
            message = f"In function '{irf.name}': {e.message}"
            raise LowerError(e.kind, message, e.line, e.column, self._render(message, e.line, e.column), e.name) from None
        if not any(isinstance(st, A.Return) for st in fn.body):
            logger.debug("fn %s: no return statement, adding implicit 'ret 0'", irf.name)
            self._emit(Instr(OpCode.RET, a=Const(0)))
        if self._dropped:
            logger.debug("fn %s: dropped %d instruction(s) after return", irf.name, self._dropped)
        logger.debug("fn %s: %d slot(s), %d instruction(s)", irf.name, len(irf.slots), len(irf.instrs))
        return irf

    # Statements
    def _lower_stmt(self, st: A.Stmt):
        if isinstance(st, A.Let):
            name = st.ident.text or ""
            if name in self._scope:
                raise self._error(LowerErrorKind.DUPLICATE_BINDING,
                                  f"Variable '{name}' is already declared in this scope", st.ident, name)
            slot = Slot(name, len(self._scope))
            # The name is not visible inside its own initializer
            value = self._lower_expr(st.expr)
            self._scope[name] = slot
            self._emit(Instr(OpCode.STORE, a=value, b=slot))
        elif isinstance(st, A.Print):
            value = self._lower_expr(st.expr)
            self._emit_print(value)
        elif isinstance(st, A.Return):
            value = self._lower_expr(st.expr)
            self._emit(Instr(OpCode.RET, a=value))
        elif isinstance(st, A.ExprStmt):
            self._lower_expr(st.expr)
        else:
            raise RuntimeError(f"unhandled statement {type(st).__name__}")

    def _emit_print(self, value: Value):
        if self.module.extern(PRINTF) is None:
            self.module.externs.append(ExternDecl(PRINTF, ("ptr",), "i32", variadic=True))
        if self.module.string(PRINT_FORMAT) is None:
            self.module.strings.append(StringConstant(PRINT_FORMAT, "%d\n"))
        dest = self._temp("calltmp")
        self._emit(Instr(OpCode.CALL, dest=dest, a=Global(PRINTF), args=(Global(PRINT_FORMAT), value)))

    # Expressions
    def _lower_expr(self, e: A.Expr) -> Value:
        if isinstance(e, A.PrimaryExpr):
            return self._lower_primary(e)
        if isinstance(e, A.BinaryExpr):
            lhs = self._lower_primary(e.lhs)
            rhs = self._lower_expr(e.rhs)
            if e.op.type not in _ARITH:
                raise self._error(LowerErrorKind.UNSUPPORTED_OPERATOR,
                                  f"Unsupported binary operator '{e.op.type.name}'", e.op, e.op.type.name)
            op, hint = _ARITH[e.op.type]
            dest = self._temp(hint)
            self._emit(Instr(op, dest=dest, a=lhs, b=rhs))
            return dest
        raise RuntimeError(f"unhandled expression {type(e).__name__}")

    def _lower_primary(self, p: A.PrimaryExpr) -> Value:
        if p.int_lit is not None:
            text = p.int_lit.text or "0"
            # Digit count first: int() refuses very long strings
            if len(text.lstrip("0")) > len(str(I32_MAX)) or int(text) > I32_MAX:
                shown = text if len(text) <= 20 else f"{text[:10]}...{text[-4:]}"
                raise self._error(LowerErrorKind.LITERAL_OUT_OF_RANGE,
                                  f"Integer literal {shown} does not fit in 32 bits", p.int_lit, text)
            return Const(int(text))
        tok = p.token
        name = tok.text or ""
        slot = self._scope.get(name)
        if slot is None:
            raise self._error(LowerErrorKind.UNDEFINED_VARIABLE, f"Undefined variable: {name}", tok, name)
        dest = self._temp(name)
        self._emit(Instr(OpCode.LOAD, dest=dest, a=slot))
        return dest

    # Helpers
    def _emit(self, instr: Instr):
        assert self._fn is not None
        if self._fn.entry.terminated:
            self._dropped += 1
            return
        self._fn.entry.instrs.append(instr)

    def _temp(self, hint: str) -> Temp:
        n = self._temp_counts.get(hint, 0)
        name = hint if n == 0 else f"{hint}{n}"
        while name in self._temp_names:
            n += 1
            name = f"{hint}{n}"
        self._temp_counts[hint] = n + 1
        self._temp_names.add(name)
        return Temp(name)

    def _render(self, message: str, line: Optional[int], column: Optional[int]) -> str:
        if self.reporter is None:
            return message
        return self.reporter.format_error(message, line, column)

    def _error(self, kind: LowerErrorKind, message: str, tok: Token, name: str) -> LowerError:
        return LowerError(kind, message, tok.line, tok.col, self._render(message, tok.line, tok.col), name)


def lower(program: A.Program, reporter: Optional[ErrorReporter] = None) -> Module:
    return Lowerer(reporter).lower(program)
