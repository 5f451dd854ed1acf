from __future__ import annotations
import re
from typing import List

COMMENT_MARKER = "//"

INT_RE = re.compile(r"^[+-]?\d+$")
# Nombres de etiqueta y función: sin "$", reservado para las etiquetas generadas
SYMBOL_RE = re.compile(r"^[A-Za-z_.:][A-Za-z0-9_.:]*$")

# Palabras clave de comando (las aritméticas viven en instructions.ArithOp)
KEYWORDS = frozenset({
    "push", "pop",
    "label", "goto", "if-goto",
    "function", "call", "return",
})

def strip_comment(line: str) -> str:
    """Remove everything from the first '//' and trim whitespace."""
    pos = line.find(COMMENT_MARKER)
    if pos != -1:
        line = line[:pos]
    return line.strip()

def tokenize(line: str) -> List[str]:
    """Split an already stripped line on whitespace."""
    return line.split()

def is_integer(token: str) -> bool:
    return bool(INT_RE.match(token.strip()))

def is_symbol(token: str) -> bool:
    return bool(SYMBOL_RE.match(token))
