import pytest
from src.hackvm.translator import translate_text

# Emulador mínimo de la CPU Hack para ejecutar el código generado en los tests.

WORD_MASK = 0xFFFF

def u16(x):
    return x & WORD_MASK

def s16(x):
    """Palabra de 16 bits como entero con signo (complemento a dos)."""
    x &= WORD_MASK
    return x - 0x10000 if x & 0x8000 else x


PREDEFINED = {"SP": 0, "LCL": 1, "ARG": 2, "THIS": 3, "THAT": 4,
              "SCREEN": 16384, "KBD": 24576}
PREDEFINED.update({f"R{i}": i for i in range(16)})

JUMPS = {
    "JGT": lambda v: v > 0,
    "JEQ": lambda v: v == 0,
    "JGE": lambda v: v >= 0,
    "JLT": lambda v: v < 0,
    "JNE": lambda v: v != 0,
    "JLE": lambda v: v <= 0,
    "JMP": lambda v: True,
}

class HackCPU:
    def __init__(self, lines, ram=None):
        self.program = []
        self.labels = {}
        for raw in lines:
            line = raw.split("//", 1)[0].strip()
            if not line:
                continue
            if line.startswith("(") and line.endswith(")"):
                name = line[1:-1]
                assert name not in self.labels, f"etiqueta duplicada: {name}"
                self.labels[name] = len(self.program)
                continue
            self.program.append(line)
        self.symbols = dict(PREDEFINED)
        self.symbols.update(self.labels)
        self._next_var = 16
        self.ram = [0] * 65536
        for addr, value in (ram or {}).items():
            self.ram[addr] = u16(value)
        self.a = 0
        self.d = 0
        self.pc = 0

    def _resolve(self, token):
        if token.isdigit():
            return int(token)
        if token not in self.symbols:
            self.symbols[token] = self._next_var
            self._next_var += 1
        return self.symbols[token]

    def _operand(self, ch):
        if ch == "1":
            return 1
        if ch == "0":
            return 0
        if ch == "A":
            return self.a
        if ch == "D":
            return self.d
        if ch == "M":
            return self.ram[self.a]
        raise AssertionError(f"operando inválido: {ch}")

    def _comp(self, comp):
        if len(comp) == 1:
            return self._operand(comp)
        if comp == "-1":
            return -1
        if len(comp) == 2:
            v = self._operand(comp[1])
            return ~v if comp[0] == "!" else -v
        x, op, y = self._operand(comp[0]), comp[1], self._operand(comp[2])
        if op == "+":
            return x + y
        if op == "-":
            return x - y
        if op == "&":
            return x & y
        if op == "|":
            return x | y
        raise AssertionError(f"cálculo inválido: {comp}")

    def step(self):
        ins = self.program[self.pc]
        if ins.startswith("@"):
            self.a = self._resolve(ins[1:])
            self.pc += 1
            return
        dest, rest = ins.split("=", 1) if "=" in ins else ("", ins)
        comp, jump = rest.split(";", 1) if ";" in rest else (rest, "")
        value = u16(self._comp(comp))
        old_a = self.a
        if "M" in dest:
            self.ram[old_a] = value
        if "D" in dest:
            self.d = value
        if "A" in dest:
            self.a = value
        if jump and JUMPS[jump](s16(value)):
            self.pc = old_a
            return
        self.pc += 1

    def run(self, *, until=None, max_steps=200_000):
        stop = self.labels[until] if until is not None else None
        for _ in range(max_steps):
            if self.pc >= len(self.program) or self.pc == stop:
                return self
            self.step()
        raise AssertionError("el programa no terminó")

    def peek(self, addr):
        return s16(self.ram[addr])

    def var(self, name):
        return self.peek(self.symbols[name])

    @property
    def sp(self):
        return self.ram[0]

    def top(self):
        return self.peek(self.sp - 1)


@pytest.fixture
def hack_cpu():
    return HackCPU


@pytest.fixture
def run_vm():
    """Traduce un módulo VM y lo ejecuta con SP=256 (o desde el arranque)."""
    def _run(src, *, ram=None, until=None, module="Main", bootstrap=None):
        res = translate_text(src, module=module, bootstrap=bootstrap)
        assert not [d for d in res.diagnostics if d.is_error]
        init = {0: 256, 1: 300, 2: 400, 3: 3000, 4: 3010}
        init.update(ram or {})
        return HackCPU(res.lines, ram=init).run(until=until)
    return _run
