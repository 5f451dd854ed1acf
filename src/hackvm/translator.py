from __future__ import annotations
import argparse, os, sys
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .parser import parse
from .instructions import Function, Instruction
from .codegen import TranslationContext, generate, write_bootstrap
from .hack import BOOTSTRAP_FUNCTION
from .diagnostics import Diagnostic, has_errors, warning
from .writers import write_asm

VM_EXT = ".vm"
ASM_EXT = ".asm"

@dataclass(frozen=True)
class Module:
    """Módulo VM ya parseado; name es el stem del archivo (nombres de static)."""
    name: str
    instructions: List[Instruction]

@dataclass(frozen=True)
class TranslationResult:
    lines: List[str]
    diagnostics: List[Diagnostic]
    bootstrapped: bool

# ---------------- Carga y descubrimiento ----------------

def module_name(path: str) -> str:
    return os.path.splitext(os.path.basename(path))[0]

def load_module(path: str) -> Tuple[Module, List[Diagnostic]]:
    """Lee el archivo completo, lo cierra y lo parsea. OSError si no se puede abrir."""
    name = module_name(path)
    with open(path, "r", encoding="utf-8-sig") as f:
        text = f.read()
    instructions, diags = parse(text, module=name)
    return Module(name, instructions), diags

def discover_sources(path: str) -> List[str]:
    """Archivo .vm -> [path]; directorio -> sus .vm en orden lexicográfico."""
    if os.path.isdir(path):
        names = sorted(n for n in os.listdir(path)
                       if n.endswith(VM_EXT) and os.path.isfile(os.path.join(path, n)))
        return [os.path.join(path, n) for n in names]
    if path.endswith(VM_EXT):
        return [path]
    raise ValueError(f"Entrada inválida: {path} (se espera un archivo {VM_EXT} o un directorio)")

def output_path_for(path: str) -> str:
    """Archivo -> .asm hermano; directorio -> <dir>/<nombre_dir>.asm."""
    if os.path.isdir(path):
        # abspath resuelve "." y ".." al nombre real del directorio
        dirname = os.path.basename(os.path.abspath(path)) or "output"
        return os.path.join(path, dirname + ASM_EXT)
    return os.path.splitext(path)[0] + ASM_EXT

# ---------------- Traducción ----------------

def has_sys_init(modules: Sequence[Module]) -> bool:
    return any(isinstance(ins, Function) and ins.name == BOOTSTRAP_FUNCTION
               for m in modules for ins in m.instructions)

def translate_modules(modules: Sequence[Module], *, bootstrap: Optional[bool] = None,
                      comments: bool = True) -> TranslationResult:
    """Traduce los módulos en el orden dado a un único listado de ensamblador.

    bootstrap=None lo decide según exista una función Sys.init.
    """
    defines_entry = has_sys_init(modules)
    if bootstrap is None:
        bootstrap = defines_entry
    ctx = TranslationContext(comments=comments)
    diags: List[Diagnostic] = []
    if bootstrap and not defines_entry:
        diags.append(warning(f"Arranque forzado pero {BOOTSTRAP_FUNCTION} no está definida",
                             hint="el salto inicial no tendrá destino"))
    if bootstrap:
        write_bootstrap(ctx)
    for m in modules:
        ctx.enter_module(m.name)
        for ins in m.instructions:
            generate(ins, ctx)
    return TranslationResult(lines=ctx.lines, diagnostics=diags, bootstrapped=bootstrap)

def translate_text(text: str, *, module: str = "Main", bootstrap: Optional[bool] = None,
                   comments: bool = True) -> TranslationResult:
    """Parsea y traduce un único módulo en memoria.
    Si el parseo tiene errores no se genera código."""
    instructions, diags = parse(text, module=module)
    if has_errors(diags):
        return TranslationResult(lines=[], diagnostics=diags, bootstrapped=False)
    res = translate_modules([Module(module, instructions)], bootstrap=bootstrap, comments=comments)
    return TranslationResult(lines=res.lines, diagnostics=diags + res.diagnostics,
                             bootstrapped=res.bootstrapped)

# ---------------- CLI ----------------

_BOOTSTRAP_CHOICES = {"auto": None, "always": True, "never": False}

def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Hack VM to assembly translator")
    ap.add_argument("source", help="archivo .vm o directorio con módulos .vm")
    ap.add_argument("-o", "--output", help="archivo .asm de salida (por defecto según la entrada)")
    ap.add_argument("--no-comments", action="store_true",
                    help="no emitir el comentario con la instrucción VM original")
    ap.add_argument("--bootstrap", choices=sorted(_BOOTSTRAP_CHOICES), default="auto",
                    help="código de arranque: auto (si existe Sys.init), always o never")
    args = ap.parse_args(argv)

    try:
        sources = discover_sources(args.source)
    except (ValueError, OSError) as ex:
        print(f"ERROR: {ex}", file=sys.stderr)
        return 2
    if not sources:
        print(f"ERROR: no hay archivos {VM_EXT} en {args.source}", file=sys.stderr)
        return 2

    modules: List[Module] = []
    diags: List[Diagnostic] = []
    for path in sources:
        try:
            module, mdiags = load_module(path)
        except (OSError, UnicodeDecodeError) as ex:
            print(f"ERROR: no pude leer {path}: {ex}", file=sys.stderr)
            return 2
        modules.append(module)
        diags.extend(mdiags)

    for d in diags:
        print(d, file=sys.stderr)
    if has_errors(diags):
        return 1

    res = translate_modules(modules, bootstrap=_BOOTSTRAP_CHOICES[args.bootstrap],
                            comments=not args.no_comments)
    for d in res.diagnostics:
        print(d, file=sys.stderr)

    out_path = args.output or output_path_for(args.source)
    try:
        write_asm(res.lines, out_path)
    except OSError as ex:
        print(f"ERROR al escribir salida: {ex}", file=sys.stderr)
        return 3

    print(f"OK: {len(modules)} módulo(s), {len(res.lines)} líneas → {out_path}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
