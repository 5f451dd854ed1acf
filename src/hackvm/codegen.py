# src/hackvm/codegen.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List

from .instructions import (
    Segment, Instruction, source_text,
    Arithmetic, Push, Pop, Label, Goto, IfGoto, Function, Call, Return, Malformed,
)
from .hack import (
    SP, LCL, ARG, R13, R14,
    STACK_BASE, TEMP_BASE, FRAME_SIZE, BOOTSTRAP_FUNCTION,
    BASE_POINTERS, POINTER_ALIASES, SAVED_POINTERS,
    BINARY_COMP, UNARY_COMP, COMPARE_JUMP, TRUE, FALSE,
    static_symbol,
)

# ---------------- Estado de la traducción ----------------

@dataclass
class TranslationContext:
    """Estado compartido por todo el programa mientras se genera código.

    - function: función abierta (vacío en ámbito global)
    - counter: contador único, nunca se reinicia entre módulos
    - module: módulo actual, sólo afecta a los nombres de static
    - lines: salida acumulada
    """
    function: str = ""
    counter: int = 0
    module: str = ""
    lines: List[str] = field(default_factory=list)
    comments: bool = True

    def emit(self, *lines: str) -> None:
        self.lines.extend(lines)

    def comment(self, text: str) -> None:
        if self.comments:
            self.lines.append(f"// {text}")

    def next_id(self) -> int:
        n = self.counter
        self.counter += 1
        return n

    def scoped(self, label: str) -> str:
        """Nombre de la etiqueta con el ámbito de la función abierta."""
        if self.function:
            return f"{self.function}${label}"
        return label

    def return_label(self) -> str:
        """<función>$ret$<n>; el segundo '$' no puede aparecer en una etiqueta de usuario."""
        return f"{self.function}$ret${self.next_id()}"

    def enter_module(self, name: str) -> None:
        self.module = name

# ---------------- Helpers de pila ----------------

def _push_d(ctx: TranslationContext) -> None:
    # *SP = D ; SP++
    ctx.emit(f"@{SP}", "A=M", "M=D", f"@{SP}", "M=M+1")

def _pop_d(ctx: TranslationContext) -> None:
    # SP-- ; D = *SP
    ctx.emit(f"@{SP}", "AM=M-1", "D=M")

def _push_symbol_address(ctx: TranslationContext, symbol: str) -> None:
    ctx.emit(f"@{symbol}", "D=A")
    _push_d(ctx)

def _push_symbol_value(ctx: TranslationContext, symbol: str) -> None:
    ctx.emit(f"@{symbol}", "D=M")
    _push_d(ctx)

# ---------------- Direccionamiento de segmentos ----------------

def _direct_symbol(ctx: TranslationContext, segment: Segment, index: int) -> str | None:
    """Símbolo de la celda para segmentos sin indirección; None si es indirecto."""
    if segment is Segment.STATIC:
        return static_symbol(ctx.module, index)
    if segment is Segment.POINTER:
        return POINTER_ALIASES[index]
    if segment is Segment.TEMP:
        return f"R{TEMP_BASE + index}"
    return None

def _address_to_a(segment: Segment, index: int, ctx: TranslationContext) -> None:
    # A = *BASE + index
    base = BASE_POINTERS[segment]
    ctx.emit(f"@{base}", "D=M", f"@{index}", "A=D+A")

def write_push(ins: Push, ctx: TranslationContext) -> None:
    seg, index = ins.segment, ins.index
    if seg is Segment.CONSTANT:
        ctx.emit(f"@{index}", "D=A")
    else:
        sym = _direct_symbol(ctx, seg, index)
        if sym is not None:
            ctx.emit(f"@{sym}", "D=M")
        else:
            _address_to_a(seg, index, ctx)
            ctx.emit("D=M")
    _push_d(ctx)

def write_pop(ins: Pop, ctx: TranslationContext) -> None:
    seg, index = ins.segment, ins.index
    if seg is Segment.CONSTANT:
        raise ValueError("No se puede hacer pop sobre constant")
    sym = _direct_symbol(ctx, seg, index)
    if sym is not None:
        _pop_d(ctx)
        ctx.emit(f"@{sym}", "M=D")
        return
    # la dirección efectiva se guarda en R13 antes de sacar el valor
    _address_to_a(seg, index, ctx)
    ctx.emit("D=A", f"@{R13}", "M=D")
    _pop_d(ctx)
    ctx.emit(f"@{R13}", "A=M", "M=D")

# ---------------- Aritmética ----------------

def write_arithmetic(ins: Arithmetic, ctx: TranslationContext) -> None:
    op = ins.op
    if op.is_unary:
        ctx.emit(f"@{SP}", "A=M-1", f"M={UNARY_COMP[op]}")
        return
    # D = y (cima), A apunta a x
    ctx.emit(f"@{SP}", "AM=M-1", "D=M", "A=A-1")
    if op.is_binary:
        ctx.emit(f"M={BINARY_COMP[op]}")
        return
    # el prefijo '$' las separa de cualquier etiqueta del programa
    label = f"$COMP_{ctx.next_id()}"
    ctx.emit(
        "D=M-D",
        f"@{label}_TRUE", f"D;{COMPARE_JUMP[op]}",
        f"@{SP}", "A=M-1", f"M={FALSE}",
        f"@{label}_END", "0;JMP",
        f"({label}_TRUE)",
        f"@{SP}", "A=M-1", f"M={TRUE}",
        f"({label}_END)",
    )

# ---------------- Flujo de control ----------------

def write_label(ins: Label, ctx: TranslationContext) -> None:
    ctx.emit(f"({ctx.scoped(ins.name)})")

def write_goto(ins: Goto, ctx: TranslationContext) -> None:
    ctx.emit(f"@{ctx.scoped(ins.name)}", "0;JMP")

def write_if_goto(ins: IfGoto, ctx: TranslationContext) -> None:
    _pop_d(ctx)
    ctx.emit(f"@{ctx.scoped(ins.name)}", "D;JNE")

# ---------------- Funciones ----------------

def write_function(ins: Function, ctx: TranslationContext) -> None:
    ctx.function = ins.name
    ctx.emit(f"({ins.name})")
    for _ in range(ins.n_locals):
        ctx.emit("@0", "D=A")
        _push_d(ctx)

def write_call(name: str, n_args: int, ctx: TranslationContext) -> None:
    ret = ctx.return_label()
    # 1-2) bloque guardado: retorno, LCL, ARG, THIS, THAT
    _push_symbol_address(ctx, ret)
    for ptr in SAVED_POINTERS:
        _push_symbol_value(ctx, ptr)
    # 3) ARG = SP - (n_args + 5)
    ctx.emit(f"@{SP}", "D=M", f"@{n_args + FRAME_SIZE}", "D=D-A", f"@{ARG}", "M=D")
    # 4) LCL = SP
    ctx.emit(f"@{SP}", "D=M", f"@{LCL}", "M=D")
    # 5-6) salto y punto de retorno
    ctx.emit(f"@{name}", "0;JMP", f"({ret})")

def write_return(ctx: TranslationContext) -> None:
    # R13 = FRAME = LCL
    ctx.emit(f"@{LCL}", "D=M", f"@{R13}", "M=D")
    # R14 = *(FRAME - 5)
    ctx.emit(f"@{FRAME_SIZE}", "A=D-A", "D=M", f"@{R14}", "M=D")
    # *ARG = pop()
    _pop_d(ctx)
    ctx.emit(f"@{ARG}", "A=M", "M=D")
    # SP = ARG + 1
    ctx.emit(f"@{ARG}", "D=M+1", f"@{SP}", "M=D")
    # THAT, THIS, ARG, LCL = *(FRAME - 1..4)
    for offset, ptr in enumerate(reversed(SAVED_POINTERS), start=1):
        ctx.emit(f"@{R13}", "D=M", f"@{offset}", "A=D-A", "D=M", f"@{ptr}", "M=D")
    ctx.emit(f"@{R14}", "A=M", "0;JMP")

# ---------------- Bootstrap y despacho ----------------

def write_bootstrap(ctx: TranslationContext) -> None:
    """SP = 256 y call Sys.init 0."""
    ctx.comment("bootstrap")
    ctx.emit(f"@{STACK_BASE}", "D=A", f"@{SP}", "M=D")
    ctx.comment(f"call {BOOTSTRAP_FUNCTION} 0")
    write_call(BOOTSTRAP_FUNCTION, 0, ctx)

def generate(ins: Instruction, ctx: TranslationContext) -> None:
    """Agrega a ctx.lines el código de una instrucción VM."""
    if isinstance(ins, Malformed):
        # ya informada por el parser; no genera código
        return
    ctx.comment(source_text(ins))
    if isinstance(ins, Arithmetic):
        write_arithmetic(ins, ctx)
    elif isinstance(ins, Push):
        write_push(ins, ctx)
    elif isinstance(ins, Pop):
        write_pop(ins, ctx)
    elif isinstance(ins, Label):
        write_label(ins, ctx)
    elif isinstance(ins, Goto):
        write_goto(ins, ctx)
    elif isinstance(ins, IfGoto):
        write_if_goto(ins, ctx)
    elif isinstance(ins, Function):
        write_function(ins, ctx)
    elif isinstance(ins, Call):
        write_call(ins.name, ins.n_args, ctx)
    elif isinstance(ins, Return):
        write_return(ctx)
    else:
        raise TypeError(f"Instrucción desconocida: {ins!r}")
