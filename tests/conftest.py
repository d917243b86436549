"""Shared helpers for the husk test suite."""

import pytest

from husk.driver import compile_source
from husk.lexer import tokenize
from husk.parser import parse
from husk_runtime.vm import HuskVM


def parse_source(source):
    return parse(tokenize(source, color=False), source, color=False)


def run_source(source):
    """Compile and execute; return (exit code, printed text)."""
    out = []
    module = compile_source(source)
    code = HuskVM(module, output_callback=out.append).run_main()
    return code, "".join(out)


@pytest.fixture
def tmp_source(tmp_path):
    def write(text, name="prog.hk"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return write
