# src/hackvm/parser.py
from __future__ import annotations
from typing import List, Optional, Tuple

from .lexer import KEYWORDS, strip_comment, tokenize, is_integer, is_symbol
from .instructions import (
    ARITH_KEYWORDS, ArithOp, Segment, Instruction,
    Arithmetic, Push, Pop, Label, Goto, IfGoto, Function, Call, Return, Malformed,
)
from .hack import FRAME_SIZE, MAX_CONSTANT, is_loadable_constant, segment_limit
from .diagnostics import Diagnostic, error, warning

def _parse_int(tokens: List[str], pos: int, what: str) -> int:
    if len(tokens) <= pos:
        raise ValueError(f"Falta {what} en '{' '.join(tokens)}'")
    tok = tokens[pos]
    if not is_integer(tok):
        raise ValueError(f"{what} no es un entero: '{tok}'")
    return int(tok)

def _parse_name(tokens: List[str], pos: int, what: str) -> str:
    if len(tokens) <= pos:
        raise ValueError(f"Falta {what} en '{' '.join(tokens)}'")
    return tokens[pos]

def _parse_symbol(tokens: List[str], pos: int, what: str) -> str:
    name = _parse_name(tokens, pos, what)
    if not is_symbol(name):
        raise ValueError(f"Nombre inválido para {what}: '{name}'")
    return name

def _parse_segment_ref(tokens: List[str], *, is_pop: bool) -> Tuple[Segment, int]:
    seg = Segment.from_name(_parse_name(tokens, 1, "segmento"))
    index = _parse_int(tokens, 2, "índice")
    if index < 0:
        raise ValueError(f"Índice negativo: {index}")
    if seg is Segment.CONSTANT:
        if is_pop:
            raise ValueError("No se puede hacer pop sobre constant")
        if not is_loadable_constant(index):
            raise ValueError(f"Constante fuera de rango (0..{MAX_CONSTANT}): {index}")
    elif not is_loadable_constant(index):
        # el desplazamiento se carga con una instrucción-A
        raise ValueError(f"Índice fuera de rango para {seg.value} (0..{MAX_CONSTANT}): {index}")
    limit = segment_limit(seg)
    if limit is not None and index >= limit:
        raise ValueError(f"Índice fuera de rango para {seg.value} (0..{limit - 1}): {index}")
    return seg, index

def parse_line(tokens: List[str], lineno: int) -> Instruction:
    """Construye la instrucción de una línea ya tokenizada.

    Lanza ValueError si faltan operandos o un entero no se puede leer.
    """
    cmd = tokens[0]
    if cmd not in KEYWORDS and cmd not in ARITH_KEYWORDS:
        return Malformed(" ".join(tokens), line=lineno)
    if cmd == "push":
        seg, index = _parse_segment_ref(tokens, is_pop=False)
        return Push(seg, index, line=lineno)
    if cmd == "pop":
        seg, index = _parse_segment_ref(tokens, is_pop=True)
        return Pop(seg, index, line=lineno)
    if cmd == "label":
        return Label(_parse_symbol(tokens, 1, "etiqueta"), line=lineno)
    if cmd == "goto":
        return Goto(_parse_symbol(tokens, 1, "etiqueta"), line=lineno)
    if cmd == "if-goto":
        return IfGoto(_parse_symbol(tokens, 1, "etiqueta"), line=lineno)
    if cmd == "function":
        name = _parse_symbol(tokens, 1, "función")
        n = _parse_int(tokens, 2, "cantidad de locales")
        if n < 0:
            raise ValueError(f"Cantidad de locales negativa: {n}")
        return Function(name, n, line=lineno)
    if cmd == "call":
        name = _parse_symbol(tokens, 1, "función")
        n = _parse_int(tokens, 2, "cantidad de argumentos")
        if n < 0:
            raise ValueError(f"Cantidad de argumentos negativa: {n}")
        if not is_loadable_constant(n + FRAME_SIZE):
            raise ValueError(f"Cantidad de argumentos fuera de rango (0..{MAX_CONSTANT - FRAME_SIZE}): {n}")
        return Call(name, n, line=lineno)
    if cmd == "return":
        return Return(line=lineno)
    return Arithmetic(ArithOp(cmd), line=lineno)

def parse(text: str, *, module: Optional[str] = None) -> Tuple[List[Instruction], List[Diagnostic]]:
    """
    Devuelve (instructions, diagnostics) para el texto de un módulo VM.

    Reglas:
      - Comentarios: '//' hasta fin de línea; líneas vacías se ignoran.
      - El primer token elige el tipo de instrucción.
      - Un entero ausente o inválido es un error (fatal para el módulo).
      - Los nombres de etiqueta y función no pueden contener '$'.
      - Un comando desconocido produce Malformed y una advertencia.
    """
    instructions: List[Instruction] = []
    diags: List[Diagnostic] = []

    for lineno, raw in enumerate(text.splitlines(), start=1):
        core = strip_comment(raw)
        if not core:
            continue
        tokens = tokenize(core)
        try:
            ins = parse_line(tokens, lineno)
        except ValueError as ex:
            diags.append(error(str(ex), line=lineno, module=module))
            continue
        if isinstance(ins, Malformed):
            diags.append(warning(f"Instrucción no reconocida: '{ins.text}'", line=lineno,
                                 module=module, hint="se omite"))
        instructions.append(ins)

    return instructions, diags
