from __future__ import annotations
import sys
from typing import Callable, Dict, List, Optional
from husk.ir import OpCode, Module, IRFunction, Const, Temp, Global, Slot, Operand


class VMError(Exception):
    """Raised when the program faults at run time (e.g. division by zero)."""
    pass


def wrap_i32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def sdiv(a: int, b: int) -> int:
    if b == 0:
        raise VMError("integer division by zero")
    # truncate toward zero, as C and LLVM sdiv do
    q = abs(a) // abs(b)
    return wrap_i32(q if (a < 0) == (b < 0) else -q)


def format_printf(fmt: str, args: List[int]) -> str:
    # The only format the compiler emits is "%d\n"
    if fmt.count("%d") != len(args):
        raise VMError(f"printf: format {fmt!r} does not match {len(args)} argument(s)")
    out = fmt
    for v in args:
        out = out.replace("%d", str(v), 1)
    return out


class HuskVM:
    def __init__(self, module: Module, output_callback: Optional[Callable[[str], None]] = None):
        self.module = module
        self.functions: Dict[str, IRFunction] = {f.name: f for f in module.functions}
        self.strings: Dict[str, str] = {s.name: s.value for s in module.strings}
        self._output_callback = output_callback

    def _output(self, text: str):
        """Output text via callback or stdout."""
        if self._output_callback:
            self._output_callback(text)
        else:
            sys.stdout.write(text)

    def run_main(self) -> int:
        if "main" not in self.functions:
            raise VMError("No 'main' function defined")
        return self.run(self.functions["main"])

    def run(self, fn: IRFunction) -> int:
        locals_: List[int] = [0] * len(fn.slots)
        temps: Dict[str, int] = {}

        def value(v: Optional[Operand]) -> int:
            if isinstance(v, Const):
                return wrap_i32(v.value)
            if isinstance(v, Temp):
                return temps[v.name]
            raise VMError(f"expected an integer operand, got {v!r}")

        for ins in fn.instrs:
            op = ins.op
            if op is OpCode.LOAD:
                assert isinstance(ins.a, Slot)
                temps[ins.dest.name] = locals_[ins.a.index]

            elif op is OpCode.STORE:
                assert isinstance(ins.b, Slot)
                locals_[ins.b.index] = value(ins.a)

            elif op is OpCode.ADD:
                temps[ins.dest.name] = wrap_i32(value(ins.a) + value(ins.b))

            elif op is OpCode.SUB:
                temps[ins.dest.name] = wrap_i32(value(ins.a) - value(ins.b))

            elif op is OpCode.MUL:
                temps[ins.dest.name] = wrap_i32(value(ins.a) * value(ins.b))

            elif op is OpCode.SDIV:
                temps[ins.dest.name] = sdiv(value(ins.a), value(ins.b))

            elif op is OpCode.CALL:
                temps[ins.dest.name] = self._call(ins.a, list(ins.args), value)

            elif op is OpCode.RET:
                return value(ins.a)

            else:
                raise VMError(f"Unknown opcode {op}")

        # lowering always terminates the entry block
        raise VMError(f"function '{fn.name}' fell off the end of its entry block")

    def _call(self, callee: Optional[Operand], args: List[Operand], value: Callable[[Operand], int]) -> int:
        if not isinstance(callee, Global) or callee.name != "printf":
            raise VMError(f"call to unknown function {callee}")
        if not args or not isinstance(args[0], Global) or args[0].name not in self.strings:
            raise VMError("printf: missing format string")
        text = format_printf(self.strings[args[0].name], [value(a) for a in args[1:]])
        self._output(text)
        return len(text)
