"""
Bridge from a lowered husk Module to LLVM IR via llvmlite.

Every husk function becomes `define i32 @name()` with one `entry` block.
Slots turn into `alloca i32` at the top of that block, arithmetic maps onto
add/sub/mul/sdiv and `print` calls the variadic C `printf` with a private
"%d\\n" constant.
"""
from __future__ import annotations
import logging
from typing import Dict

from llvmlite import ir, binding as llvm

from .ir import OpCode, Module, IRFunction, Const, Temp, Global, Slot, StringConstant

logger = logging.getLogger(__name__)

int32 = ir.IntType(32)
int8 = ir.IntType(8)


class CodeGenLLVM:
    def __init__(self, triple: str = ""):
        self.triple = triple
        self.module: ir.Module = ir.Module(name="Husk")
        self.globals: Dict[str, ir.GlobalValue] = {}

    def generate(self, module: Module) -> ir.Module:
        self.module = ir.Module(name=module.name)
        if self.triple:
            self.module.triple = self.triple
        self.globals = {}
        for s in module.strings:
            self.globals[s.name] = self._string_constant(s)
        for ext in module.externs:
            # Only pointer parameters are needed for printf-style externs
            params = [ir.PointerType(int8) if p == "ptr" else int32 for p in ext.params]
            fnty = ir.FunctionType(int32, params, var_arg=ext.variadic)
            self.globals[ext.name] = ir.Function(self.module, fnty, name=ext.name)
        for fn in module.functions:
            fnty = ir.FunctionType(int32, [])
            self.globals[fn.name] = ir.Function(self.module, fnty, name=fn.name)
        for fn in module.functions:
            self._emit_function(fn)
        logger.debug("llvm: emitted %d function(s)", len(module.functions))
        return self.module

    def _string_constant(self, s: StringConstant) -> ir.GlobalVariable:
        data = bytearray(s.value.encode("utf-8")) + b"\0"
        arrty = ir.ArrayType(int8, len(data))
        gvar = ir.GlobalVariable(self.module, arrty, name=s.name)
        gvar.linkage = "private"
        gvar.global_constant = True
        gvar.initializer = ir.Constant(arrty, data)
        return gvar

    def _emit_function(self, fn: IRFunction):
        llfn = self.globals[fn.name]
        block = llfn.append_basic_block(name=fn.entry.label)
        builder = ir.IRBuilder(block)
        allocas: Dict[Slot, ir.Value] = {}
        for name, slot in fn.slots.items():
            allocas[slot] = builder.alloca(int32, name=name)
        temps: Dict[Temp, ir.Value] = {}

        def value(v) -> ir.Value:
            if isinstance(v, Const):
                return ir.Constant(int32, v.value)
            if isinstance(v, Temp):
                return temps[v]
            if isinstance(v, Global):
                g = self.globals[v.name]
                if isinstance(g, ir.GlobalVariable):
                    # decay [N x i8]* to i8*
                    return builder.bitcast(g, ir.PointerType(int8))
                return g
            raise TypeError(f"not a value operand: {v!r}")

        for ins in fn.instrs:
            op = ins.op
            if op is OpCode.LOAD:
                temps[ins.dest] = builder.load(allocas[ins.a], name=ins.dest.name)
            elif op is OpCode.STORE:
                builder.store(value(ins.a), allocas[ins.b])
            elif op is OpCode.ADD:
                temps[ins.dest] = builder.add(value(ins.a), value(ins.b), name=ins.dest.name)
            elif op is OpCode.SUB:
                temps[ins.dest] = builder.sub(value(ins.a), value(ins.b), name=ins.dest.name)
            elif op is OpCode.MUL:
                temps[ins.dest] = builder.mul(value(ins.a), value(ins.b), name=ins.dest.name)
            elif op is OpCode.SDIV:
                temps[ins.dest] = builder.sdiv(value(ins.a), value(ins.b), name=ins.dest.name)
            elif op is OpCode.CALL:
                callee = self.globals[ins.a.name]
                args = [value(a) for a in ins.args]
                temps[ins.dest] = builder.call(callee, args, name=ins.dest.name)
            elif op is OpCode.RET:
                builder.ret(value(ins.a))
            else:
                raise RuntimeError(f"Unknown opcode {op}")


def emit_llvm(module: Module, triple: str = "") -> str:
    return str(CodeGenLLVM(triple).generate(module))


def verify(text: str) -> None:
    """Parse and verify textual IR; raises RuntimeError from llvmlite on failure."""
    llvm.initialize_native_target()
    llvm.initialize_native_asmprinter()
    mod = llvm.parse_assembly(text)
    mod.verify()
