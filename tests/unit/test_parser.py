from src.hackvm.parser import parse
from src.hackvm.instructions import (
    ArithOp, Segment,
    Arithmetic, Push, Pop, Label, Goto, IfGoto, Function, Call, Return, Malformed,
)

SRC = """
// Programa mínimo
function Main.main 2
    push constant 7     // constante
    pop local 1

    push argument 0
    add
label LOOP
    if-goto LOOP
    goto END
    call Math.multiply 2
return
"""

def test_parse_program_min():
    ins, diags = parse(SRC, module="Main")
    assert not diags
    kinds = [type(i).__name__ for i in ins]
    assert kinds == ["Function", "Push", "Pop", "Push", "Arithmetic", "Label",
                     "IfGoto", "Goto", "Call", "Return"]
    assert ins[0] == Function("Main.main", 2, line=3)
    assert ins[1] == Push(Segment.CONSTANT, 7, line=4)
    assert ins[2] == Pop(Segment.LOCAL, 1, line=5)
    assert ins[4] == Arithmetic(ArithOp.ADD, line=8)
    assert ins[5] == Label("LOOP", line=9)
    assert ins[6] == IfGoto("LOOP", line=10)
    assert ins[7] == Goto("END", line=11)
    assert ins[8] == Call("Math.multiply", 2, line=12)
    assert ins[9] == Return(line=13)

def test_all_arithmetic_keywords():
    ins, diags = parse("add\nsub\nneg\neq\ngt\nlt\nand\nor\nnot\n")
    assert not diags
    assert [i.op for i in ins] == list(ArithOp)

def test_all_segments():
    src = "\n".join(f"push {s.value} 1" for s in Segment)
    ins, diags = parse(src)
    assert not diags
    assert [i.segment for i in ins] == list(Segment)

def test_unknown_command_is_malformed_warning():
    ins, diags = parse("push constant 1\nfoo bar\nadd\n", module="Main")
    assert ins[1] == Malformed("foo bar", line=2)
    assert len(diags) == 1
    assert diags[0].severity == "advertencia"
    assert "foo bar" in diags[0].message
    assert diags[0].module == "Main" and diags[0].line == 2

def test_keywords_are_case_sensitive():
    ins, diags = parse("ADD\n")
    assert isinstance(ins[0], Malformed)

def test_bad_integer_is_error():
    ins, diags = parse("push constant x\n", module="Main")
    assert not ins
    assert diags[0].severity == "error"
    assert "no es un entero" in diags[0].message

def test_missing_operands_are_errors():
    _, diags = parse("push local\nfunction Foo\ncall Bar\nlabel\n")
    assert len(diags) == 4
    assert all(d.severity == "error" for d in diags)

def test_invalid_segment_and_ranges():
    src = "push heap 0\npop constant 1\npush constant 32768\npush temp 8\npop pointer 2\npush local -1\n"
    _, diags = parse(src)
    assert [d.line for d in diags] == [1, 2, 3, 4, 5, 6]
    assert "Segmento inválido" in diags[0].message

def test_extra_tokens_are_ignored():
    ins, diags = parse("push constant 3 extra\nreturn now\n")
    assert not diags
    assert ins == [Push(Segment.CONSTANT, 3, line=1), Return(line=2)]

def test_blank_and_comment_lines_are_skipped():
    ins, diags = parse("\n   \n// solo comentario\n\t// otro\n")
    assert ins == [] and diags == []

def test_dollar_is_rejected_in_names():
    src = "label COMP$0\ngoto a$b\nif-goto $ret$0\nfunction F$ret 0\ncall $COMP_1_TRUE 0\n"
    ins, diags = parse(src)
    assert not ins
    assert [d.line for d in diags] == [1, 2, 3, 4, 5]
    assert all(d.is_error and "Nombre inválido" in d.message for d in diags)

def test_names_like_generated_labels_without_dollar_are_accepted():
    ins, diags = parse("label COMP_0_TRUE\ngoto ret\n")
    assert not diags
    assert ins == [Label("COMP_0_TRUE", line=1), Goto("ret", line=2)]

def test_indices_must_fit_in_a_instruction():
    src = "push local 40000\npop static 32768\npush argument 32768\npop that 99999\n"
    ins, diags = parse(src)
    assert not ins
    assert [d.line for d in diags] == [1, 2, 3, 4]
    assert all("fuera de rango" in d.message for d in diags)
    ins, diags = parse("push this 32767\npop static 32767\n")
    assert not diags and len(ins) == 2

def test_call_argument_count_bound():
    _, diags = parse("call F 32763\n")
    assert len(diags) == 1 and "fuera de rango" in diags[0].message
    ins, diags = parse("call F 32762\n")
    assert not diags
    assert ins == [Call("F", 32762, line=1)]
