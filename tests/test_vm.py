import pytest

from husk.driver import compile_source
from husk.ir import Module
from husk_runtime.vm import HuskVM, VMError, sdiv, wrap_i32

from conftest import run_source


def test_right_associative_arithmetic_evaluates_to_seven() -> None:
    assert run_source("fn main(){return 1+2*3;}") == (7, "")


def test_chained_subtraction_groups_right() -> None:
    # 10 - (4 - 3), not (10 - 4) - 3
    assert run_source("fn main(){return 10-4-3;}")[0] == 9


def test_print_writes_decimal_lines() -> None:
    code, out = run_source("fn main() { let x = 6; let y = x * 7; print(y); print(x); }")
    assert code == 0
    assert out == "42\n6\n"


def test_division_truncates_toward_zero() -> None:
    assert sdiv(7, 2) == 3
    assert sdiv(-7, 2) == -3
    assert sdiv(7, -2) == -3
    assert sdiv(-7, -2) == 3
    assert run_source("fn main() { return 0 - 7 / 2; }")[0] == -3


def test_division_by_zero_faults() -> None:
    with pytest.raises(VMError, match="division by zero"):
        run_source("fn main() { let z = 0; return 1 / z; }")


def test_arithmetic_wraps_at_32_bits() -> None:
    assert wrap_i32(2 ** 31) == -(2 ** 31)
    assert run_source("fn main() { return 2147483647 + 1; }")[0] == -(2 ** 31)
    assert run_source("fn main() { return 65536 * 65536; }")[0] == 0


def test_statements_after_return_do_not_run() -> None:
    assert run_source("fn main() { return 5; print(1); }") == (5, "")


def test_only_main_runs() -> None:
    assert run_source("fn helper() { print(99); } fn main() { print(1); }") == (0, "1\n")


def test_missing_main() -> None:
    with pytest.raises(VMError):
        HuskVM(Module("empty")).run_main()


def test_default_output_goes_to_stdout(capsys) -> None:
    HuskVM(compile_source("fn main() { print(3); }")).run_main()
    assert capsys.readouterr().out == "3\n"
