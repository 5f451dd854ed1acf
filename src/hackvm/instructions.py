'''
dataclases de instrucciones VM (variante cerrada) y segmentos
'''

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

# ---- Segmentos y operaciones ----

class Segment(Enum):
    """Segmento lógico de memoria referenciado por push/pop."""
    CONSTANT = "constant"
    LOCAL = "local"
    ARGUMENT = "argument"
    THIS = "this"
    THAT = "that"
    TEMP = "temp"
    POINTER = "pointer"
    STATIC = "static"

    @classmethod
    def from_name(cls, token: str) -> "Segment":
        """Devuelve el segmento por su nombre en el código VM o lanza ValueError."""
        try:
            return cls(token)
        except ValueError:
            raise ValueError(f"Segmento inválido: {token}") from None

class ArithOp(Enum):
    ADD = "add"
    SUB = "sub"
    NEG = "neg"
    EQ = "eq"
    GT = "gt"
    LT = "lt"
    AND = "and"
    OR = "or"
    NOT = "not"

    @property
    def is_unary(self) -> bool:
        return self in (ArithOp.NEG, ArithOp.NOT)

    @property
    def is_comparison(self) -> bool:
        return self in (ArithOp.EQ, ArithOp.GT, ArithOp.LT)

    @property
    def is_binary(self) -> bool:
        return not (self.is_unary or self.is_comparison)

ARITH_KEYWORDS = frozenset(op.value for op in ArithOp)

# ---- Instrucciones ----

@dataclass(frozen=True)
class Arithmetic:
    """Operación aritmética/lógica sobre la cima de la pila."""
    op: ArithOp
    line: int = 0

@dataclass(frozen=True)
class Push:
    segment: Segment
    index: int
    line: int = 0

@dataclass(frozen=True)
class Pop:
    segment: Segment
    index: int
    line: int = 0

@dataclass(frozen=True)
class Label:
    """Definición de etiqueta (con ámbito de la función que la contiene)."""
    name: str
    line: int = 0

@dataclass(frozen=True)
class Goto:
    name: str
    line: int = 0

@dataclass(frozen=True)
class IfGoto:
    """Saca la cima de la pila y salta si es distinta de cero."""
    name: str
    line: int = 0

@dataclass(frozen=True)
class Function:
    name: str
    n_locals: int
    line: int = 0

@dataclass(frozen=True)
class Call:
    name: str
    n_args: int
    line: int = 0

@dataclass(frozen=True)
class Return:
    line: int = 0

@dataclass(frozen=True)
class Malformed:
    """Línea no reconocida; se conserva el texto para poder informarla."""
    text: str
    line: int = 0

Instruction = Union[Arithmetic, Push, Pop, Label, Goto, IfGoto,
                    Function, Call, Return, Malformed]

def source_text(ins: Instruction) -> str:
    """Texto VM canónico de la instrucción (para el comentario de salida)."""
    if isinstance(ins, Arithmetic):
        return ins.op.value
    if isinstance(ins, Push):
        return f"push {ins.segment.value} {ins.index}"
    if isinstance(ins, Pop):
        return f"pop {ins.segment.value} {ins.index}"
    if isinstance(ins, Label):
        return f"label {ins.name}"
    if isinstance(ins, Goto):
        return f"goto {ins.name}"
    if isinstance(ins, IfGoto):
        return f"if-goto {ins.name}"
    if isinstance(ins, Function):
        return f"function {ins.name} {ins.n_locals}"
    if isinstance(ins, Call):
        return f"call {ins.name} {ins.n_args}"
    if isinstance(ins, Return):
        return "return"
    if isinstance(ins, Malformed):
        return ins.text
    raise TypeError(f"Instrucción desconocida: {ins!r}")

def stack_delta(ins: Instruction) -> Optional[int]:
    """Variación neta declarada de la profundidad de pila.

    Para `call` es el efecto visto por el llamador una vez que el llamado
    retorna (se consumen n_args y queda el valor de retorno). `return` no
    tiene variación estática: devuelve None.
    """
    if isinstance(ins, Push):
        return 1
    if isinstance(ins, (Pop, IfGoto)):
        return -1
    if isinstance(ins, Arithmetic):
        return 0 if ins.op.is_unary else -1
    if isinstance(ins, (Label, Goto, Malformed)):
        return 0
    if isinstance(ins, Function):
        return ins.n_locals
    if isinstance(ins, Call):
        return 1 - ins.n_args
    if isinstance(ins, Return):
        return None
    raise TypeError(f"Instrucción desconocida: {ins!r}")
