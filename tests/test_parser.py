import pytest

from husk import ast as A
from husk.errors import ParseError, ParseErrorKind
from husk.lexer import tokenize
from husk.parser import Parser
from husk.tokens import TokenType as T

from conftest import parse_source


def body_of(source, name="main"):
    fn = parse_source(source).function(name)
    assert fn is not None
    return fn.body


def test_binary_expression_nests_to_the_right() -> None:
    (ret,) = body_of("fn main(){return 1+2*3;}")
    assert isinstance(ret, A.Return)
    expr = ret.expr
    assert isinstance(expr, A.BinaryExpr)
    assert expr.lhs.int_lit.text == "1"
    assert expr.op.type is T.PLUS
    assert isinstance(expr.rhs, A.BinaryExpr)
    assert expr.rhs.lhs.int_lit.text == "2"
    assert expr.rhs.op.type is T.STAR
    assert isinstance(expr.rhs.rhs, A.PrimaryExpr)
    assert expr.rhs.rhs.int_lit.text == "3"


def test_chained_subtraction_is_right_nested() -> None:
    (stmt,) = body_of("fn main(){ a - b - c; }")
    assert A.dump_expr(stmt.expr) == "(a - (b - c))"


def test_all_statement_forms() -> None:
    body = body_of("fn main() { let x = 1; print(x); x + 1; return x; }")
    assert [type(s) for s in body] == [A.Let, A.Print, A.ExprStmt, A.Return]
    assert body[0].ident.text == "x"
    assert body[1].expr.ident.text == "x"


def test_primary_holds_exactly_one_token() -> None:
    (let,) = body_of("fn main() { let y = 7; }")
    assert let.expr.int_lit.text == "7"
    assert let.expr.ident is None


def test_empty_function_body() -> None:
    program = parse_source("fn helper() {} fn main() {}")
    assert [f.name_text for f in program.functions] == ["helper", "main"]
    assert program.functions[1].body == ()


def test_dump_program() -> None:
    program = parse_source("fn main() { let x = 2; print(x * 3 + 1); return 0; }")
    assert A.dump(program) == (
        "fn main\n"
        "  let x = 2\n"
        "  print (x * (3 + 1))\n"
        "  return 0"
    )


def test_parse_primary_returns_none_without_consuming() -> None:
    parser = Parser(tokenize(";", color=False))
    assert parser.parse_primary() is None
    assert parser.current == 0


def expect_error(source):
    with pytest.raises(ParseError) as exc:
        parse_source(source)
    return exc.value


def test_missing_main_function() -> None:
    err = expect_error("fn helper() { return 1; } fn other() { print(2); }")
    assert err.kind is ParseErrorKind.MISSING_MAIN_FUNCTION
    assert err.message == "Program must have a 'main' function"
    assert err.line is None


def test_empty_program_has_no_main() -> None:
    assert expect_error("").kind is ParseErrorKind.MISSING_MAIN_FUNCTION


def test_top_level_statement_rejected() -> None:
    err = expect_error("let x = 1;\nfn main() {}")
    assert err.kind is ParseErrorKind.TOP_LEVEL_NOT_ALLOWED
    assert (err.line, err.column) == (1, 1)
    assert "top-level statements not allowed" in err.message


@pytest.mark.parametrize("source, stmt", [
    ("fn main() { let x = 1 }", "let"),
    ("fn main() { print(1) }", "print"),
    ("fn main() { return 1 }", "return"),
    ("fn main() { 1 + 2 }", "expression"),
])
def test_missing_semicolon_names_statement_kind(source, stmt) -> None:
    err = expect_error(source)
    assert err.kind is ParseErrorKind.EXPECTED_TOKEN
    assert err.expected is T.SEMICOLON
    assert err.message == f"Expected semicolon after {stmt}, got '}}'"


def test_parameters_are_rejected() -> None:
    err = expect_error("fn main(a) {}")
    assert err.kind is ParseErrorKind.EXPECTED_TOKEN
    assert err.expected is T.RIGHT_PAREN
    assert err.message == "Expected ')' (parameters not yet supported), got identifier"
    assert (err.line, err.column) == (1, 9)


def test_let_requires_identifier_and_equals() -> None:
    err = expect_error("fn main() { let 5 = 1; }")
    assert err.message == "Expected identifier after 'let', got integer literal"
    err = expect_error("fn main() { let x 1; }")
    assert err.message == "Expected '=' after identifier, got integer literal"


def test_expected_expression() -> None:
    err = expect_error("fn main() { return ; }")
    assert err.kind is ParseErrorKind.EXPECTED_EXPRESSION
    assert (err.line, err.column) == (1, 20)


def test_operator_without_right_operand() -> None:
    err = expect_error("fn main() { return 1 + ; }")
    assert err.kind is ParseErrorKind.EXPECTED_EXPRESSION


def test_unterminated_function_body() -> None:
    err = expect_error("fn main() { let x = 1;")
    assert err.kind is ParseErrorKind.UNEXPECTED_EOF
    assert err.expected is T.RIGHT_BRACE
    assert err.message == "Expected '}' to end function body at end of input"


def test_expression_cut_off_at_end_of_input() -> None:
    err = expect_error("fn main() { return")
    assert err.kind is ParseErrorKind.UNEXPECTED_EOF
    assert err.message == "Expected expression at end of input"


def test_first_error_wins() -> None:
    err = expect_error("fn main() { let = 1; print 2; }")
    assert err.message.startswith("Expected identifier after 'let'")


def test_parse_error_rendering() -> None:
    source = "fn main() {\n  print(1)\n}"
    tokens = tokenize(source, color=False)
    with pytest.raises(ParseError) as exc:
        Parser(tokens, source, "x.hk", color=False).parse()
    assert exc.value.rendered == (
        "Error: Expected semicolon after print, got '}' in x.hk\n"
        "  2 |   print(1)\n"
        "  3 | }\n"
        "      ^"
    )


def test_token_list_must_end_with_eof() -> None:
    with pytest.raises(ValueError):
        Parser([])
