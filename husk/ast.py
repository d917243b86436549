from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union
from .tokens import Token

# Expressions
@dataclass(frozen=True)
class PrimaryExpr:
    # exactly one of these is set
    int_lit: Optional[Token] = None
    ident: Optional[Token] = None

    @property
    def token(self) -> Token:
        tok = self.int_lit if self.int_lit is not None else self.ident
        assert tok is not None, "empty primary expression"
        return tok

@dataclass(frozen=True)
class BinaryExpr:
    lhs: PrimaryExpr
    op: Token
    rhs: Expr  # right-recursive: a+b+c is a+(b+c)

Expr = Union[PrimaryExpr, BinaryExpr]

# Statements
@dataclass(frozen=True)
class Let:
    ident: Token
    expr: Expr

@dataclass(frozen=True)
class Print:
    expr: Expr

@dataclass(frozen=True)
class ExprStmt:
    expr: Expr

@dataclass(frozen=True)
class Return:
    expr: Expr

Stmt = Union[Let, Print, ExprStmt, Return]

@dataclass(frozen=True)
class Function:
    name: Token
    body: Tuple[Stmt, ...]

    @property
    def name_text(self) -> str:
        return self.name.text or ""

@dataclass(frozen=True)
class Program:
    functions: Tuple[Function, ...]

    def function(self, name: str) -> Optional[Function]:
        for fn in self.functions:
            if fn.name_text == name:
                return fn
        return None


_OP_TEXT = {"PLUS": "+", "MINUS": "-", "STAR": "*", "SLASH": "/"}


def dump_expr(e: Expr) -> str:
    if isinstance(e, PrimaryExpr):
        return e.token.text or ""
    return f"({dump_expr(e.lhs)} {_OP_TEXT.get(e.op.type.name, '?')} {dump_expr(e.rhs)})"


def dump(program: Program) -> str:
    """Render the tree as indented text, parenthesising every binary node."""
    lines: List[str] = []
    for fn in program.functions:
        lines.append(f"fn {fn.name_text}")
        for st in fn.body:
            if isinstance(st, Let):
                lines.append(f"  let {st.ident.text} = {dump_expr(st.expr)}")
            elif isinstance(st, Print):
                lines.append(f"  print {dump_expr(st.expr)}")
            elif isinstance(st, Return):
                lines.append(f"  return {dump_expr(st.expr)}")
            else:
                lines.append(f"  expr {dump_expr(st.expr)}")
    return "\n".join(lines)
