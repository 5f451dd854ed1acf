'''
descripción de la máquina destino (Hack, 16 bits): símbolos, bases, tablas
'''

from __future__ import annotations
from typing import Dict, Optional

from .instructions import ArithOp, Segment

# Símbolos predefinidos del ensamblador
SP = "SP"
LCL = "LCL"
ARG = "ARG"
THIS = "THIS"
THAT = "THAT"
R13 = "R13"   # frame en return / dirección efectiva en pop
R14 = "R14"   # dirección de retorno en return

# Layout de la RAM
STACK_BASE = 256
TEMP_BASE = 5
TEMP_SIZE = 8

# Tamaño del bloque guardado por call: dirección de retorno + 4 punteros base
FRAME_SIZE = 5

# Una instrucción-A carga 15 bits
CONSTANT_BITS = 15
MAX_CONSTANT = (1 << CONSTANT_BITS) - 1

BOOTSTRAP_FUNCTION = "Sys.init"

# Segmentos direccionados a través de su puntero base
BASE_POINTERS: Dict[Segment, str] = {
    Segment.LOCAL: LCL,
    Segment.ARGUMENT: ARG,
    Segment.THIS: THIS,
    Segment.THAT: THAT,
}

# pointer 0/1 son alias directos de THIS/THAT
POINTER_ALIASES: Dict[int, str] = {0: THIS, 1: THAT}

# Orden en que call guarda los punteros del llamador
SAVED_POINTERS = (LCL, ARG, THIS, THAT)

# Tipo ALU: cálculo sobre D (segundo operando ya sacado) y M (primer operando)
BINARY_COMP: Dict[ArithOp, str] = {
    ArithOp.ADD: "D+M",
    ArithOp.SUB: "M-D",
    ArithOp.AND: "D&M",
    ArithOp.OR:  "D|M",
}

UNARY_COMP: Dict[ArithOp, str] = {
    ArithOp.NEG: "-M",
    ArithOp.NOT: "!M",
}

COMPARE_JUMP: Dict[ArithOp, str] = {
    ArithOp.EQ: "JEQ",
    ArithOp.GT: "JGT",
    ArithOp.LT: "JLT",
}

TRUE = -1
FALSE = 0

def static_symbol(module: str, index: int) -> str:
    """Nombre de la celda estática de (módulo, índice)."""
    return f"{module}.{index}"

def segment_limit(segment: Segment) -> Optional[int]:
    """Cantidad de celdas de los segmentos de tamaño fijo; None si no aplica."""
    if segment is Segment.TEMP:
        return TEMP_SIZE
    if segment is Segment.POINTER:
        return len(POINTER_ALIASES)
    return None

def is_loadable_constant(value: int) -> bool:
    return 0 <= value <= MAX_CONSTANT
