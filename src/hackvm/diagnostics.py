'''
diagnósticos del traductor (módulo/línea, severidad, pista)
'''

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Optional, Literal

# Severidad de los diagnósticos (en español)
Severity = Literal["error", "advertencia"]

_SEV_TO_LABEL = {
    "error": "ERROR",
    "advertencia": "ADVERTENCIA",
}

@dataclass(frozen=True)
class Diagnostic:
    """Problema encontrado al traducir un módulo VM.

    Los errores hacen fallar la traducción del programa; las advertencias
    (p.ej. una instrucción no reconocida) sólo se informan.
    """
    severity: Severity
    message: str
    line: Optional[int] = None
    hint: Optional[str] = None
    module: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.severity == "error"

    def __str__(self) -> str:
        loc = ""
        if self.module is not None:
            loc += f"{self.module}:"
        if self.line is not None:
            loc += f"{self.line}"
        if loc:
            loc += ": "
        sev = _SEV_TO_LABEL.get(self.severity, str(self.severity).upper())
        core = f"{sev}: {self.message}"
        if self.hint:
            core += f"  (pista: {self.hint})"
        return loc + core

def error(message: str, *, line: int | None = None,
          module: str | None = None, hint: str | None = None) -> Diagnostic:
    return Diagnostic("error", message, line, hint, module)

def warning(message: str, *, line: int | None = None,
            module: str | None = None, hint: str | None = None) -> Diagnostic:
    return Diagnostic("advertencia", message, line, hint, module)

def has_errors(diags: Iterable[Diagnostic]) -> bool:
    """True si algún diagnóstico es fatal."""
    return any(d.is_error for d in diags)
