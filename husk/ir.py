from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional, Tuple, Union

# A linear, single-block-per-function IR over 32-bit signed integers.
# Locals live in named slots; every other value is a constant or a temporary.

I32_MIN = -(2 ** 31)
I32_MAX = 2 ** 31 - 1


class OpCode(Enum):
    LOAD = auto()    # dest = load slot(a)
    STORE = auto()   # store value(a) -> slot(b)
    ADD = auto()     # dest = a + b
    SUB = auto()     # dest = a - b
    MUL = auto()     # dest = a * b
    SDIV = auto()    # dest = a / b, truncating; divisor 0 is undefined
    CALL = auto()    # dest = call extern(a) with args
    RET = auto()     # return value(a)


ARITHMETIC = (OpCode.ADD, OpCode.SUB, OpCode.MUL, OpCode.SDIV)


@dataclass(frozen=True)
class Const:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Temp:
    name: str

    def __str__(self) -> str:
        return f"%{self.name}"


@dataclass(frozen=True)
class Slot:
    name: str
    index: int

    def __str__(self) -> str:
        return f"[{self.name}]"


@dataclass(frozen=True)
class Global:
    name: str

    def __str__(self) -> str:
        return f"@{self.name}"


Value = Union[Const, Temp]
Operand = Union[Const, Temp, Slot, Global]


@dataclass(frozen=True)
class Instr:
    op: OpCode
    dest: Optional[Temp] = None
    a: Optional[Operand] = None
    b: Optional[Operand] = None
    args: Tuple[Operand, ...] = ()

    def __str__(self) -> str:
        name = self.op.name.lower()
        if self.op is OpCode.STORE:
            return f"store {self.a}, {self.b}"
        if self.op is OpCode.RET:
            return f"ret {self.a}"
        if self.op is OpCode.CALL:
            body = f"call {self.a}({', '.join(str(x) for x in self.args)})"
        elif self.op is OpCode.LOAD:
            body = f"load {self.a}"
        else:
            body = f"{name} {self.a}, {self.b}"
        return f"{self.dest} = {body}" if self.dest is not None else body


@dataclass
class BasicBlock:
    label: str
    instrs: List[Instr] = field(default_factory=list)

    @property
    def terminated(self) -> bool:
        return bool(self.instrs) and self.instrs[-1].op is OpCode.RET


@dataclass
class IRFunction:
    name: str
    entry: BasicBlock = field(default_factory=lambda: BasicBlock("entry"))
    # variable name -> slot, in declaration order
    slots: Dict[str, Slot] = field(default_factory=dict)

    @property
    def instrs(self) -> List[Instr]:
        return self.entry.instrs


@dataclass(frozen=True)
class ExternDecl:
    name: str
    params: Tuple[str, ...]
    ret: str = "i32"
    variadic: bool = False


@dataclass(frozen=True)
class StringConstant:
    name: str
    value: str


@dataclass
class Module:
    name: str
    functions: List[IRFunction] = field(default_factory=list)
    externs: List[ExternDecl] = field(default_factory=list)
    strings: List[StringConstant] = field(default_factory=list)

    def function(self, name: str) -> Optional[IRFunction]:
        for fn in self.functions:
            if fn.name == name:
                return fn
        return None

    def extern(self, name: str) -> Optional[ExternDecl]:
        for ext in self.externs:
            if ext.name == name:
                return ext
        return None

    def string(self, name: str) -> Optional[StringConstant]:
        for s in self.strings:
            if s.name == name:
                return s
        return None


def format_module(module: Module) -> str:
    out: List[str] = [f"; module {module.name}"]
    for s in module.strings:
        out.append(f"@{s.name} = {s.value!r}")
    for ext in module.externs:
        params = list(ext.params) + (["..."] if ext.variadic else [])
        out.append(f"declare {ext.ret} @{ext.name}({', '.join(params)})")
    for fn in module.functions:
        out.append("")
        out.append(f"fn {fn.name}() -> i32")
        if fn.slots:
            out.append(f"  slots: {', '.join(fn.slots)}")
        out.append(f"  {fn.entry.label}:")
        for ins in fn.instrs:
            out.append(f"    {ins}")
    return "\n".join(out) + "\n"
