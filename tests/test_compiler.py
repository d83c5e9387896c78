import logging

import pytest

from mashc import CompilerErrorListener, Executable, MashCompiler, MashError, MashSyntaxError
from mashc.cli import main

SOURCE = """\
# A small mash program.
val x = 1_000
var total = { val y = x * 2; y + 1 }
native def print(s)
def twice(n) = n * 2
total = twice(total)
print(total)
"""


def test_compile_to_text():
    exe = MashCompiler(label_base=3).compile(SOURCE, "demo.mash")
    assert isinstance(exe, Executable)
    assert exe.origin == "demo.mash"

    lines = exe.code.split("\n")
    assert lines[0].startswith(" ; Generated by mash compiler ver. 1.0.1")
    assert lines[-1].split()[0] == "exit"
    assert '@2,8,"demo.mash"' in lines[1]


def test_compile_without_debug():
    exe = MashCompiler(label_base=3).compile(SOURCE, "demo.mash", debug=False)
    assert "@" not in exe.code
    assert "call L3-0" in exe.code
    assert "calln print" in exe.code


def test_labels_unique_per_compiler():
    compiler = MashCompiler(label_base=1)
    first = compiler.compile_to_asm("def f() = 1", "a.mash")
    second = compiler.compile_to_asm("def f() = 1", "b.mash")
    assert [i.label for i in first.instructions if i.label] == ["L1-0", "L1-1"]
    assert [i.label for i in second.instructions if i.label] == ["L1-2", "L1-3"]


def test_unexpected_token():
    with pytest.raises(MashSyntaxError) as e:
        MashCompiler().compile_to_asm("val = 1", "bad.mash")
    err = e.value
    assert (err.line, err.column) == (1, 4)
    assert str(err).splitlines() == [
        "Mash error in 'bad.mash' at line 1 - unexpected input '='.",
        "  |-- Line:  val = 1",
        "  +-- Error: ----^--",
    ]


@pytest.mark.parametrize("src", ["val val = 1", "var true = 1", "def native() = 1"])
def test_keywords_are_reserved(src):
    with pytest.raises(MashSyntaxError):
        MashCompiler().compile_to_asm(src, "kw.mash")


def test_unexpected_end_of_input():
    with pytest.raises(MashSyntaxError) as e:
        MashCompiler().compile_to_asm("val x = ", "eof.mash")
    assert "unexpected end of input." in str(e.value)
    assert str(e.value).splitlines()[-1] == "  +-- Error: -------^"


def test_unexpected_character():
    with pytest.raises(MashSyntaxError) as e:
        MashCompiler().compile_to_asm("val x = 1\nval y = $", "chr.mash")
    assert (e.value.line, e.value.column) == (2, 8)
    assert "unexpected character '$'." in str(e.value)


def test_error_listener():
    listener = CompilerErrorListener("a b c", "l.mash")
    with pytest.raises(MashSyntaxError) as e:
        listener.syntax_error(1, 2, "mismatched input 'b' expecting X")
    assert str(e.value).splitlines()[0] == "Mash error in 'l.mash' at line 1 - mismatched input 'b'."
    assert str(e.value).splitlines()[2] == "  +-- Error: ---^-"


def test_error_listener_markers_are_case_sensitive():
    listener = CompilerErrorListener("a b c", "l.mash")
    with pytest.raises(MashSyntaxError) as e:
        listener.syntax_error(1, 2, "Mismatched input 'b' expecting X")
    assert str(e.value).splitlines()[2] == "  +-- Error: --^--"


def test_failure_is_logged(caplog):
    with caplog.at_level(logging.INFO, logger="mashc.compiler"):
        with pytest.raises(MashError):
            MashCompiler().compile_to_asm("y", "log.mash")
    assert "compilation of 'log.mash' failed [E003]" in caplog.text


def test_cli_stdout(tmp_path, capsys):
    src = tmp_path / "prog.mash"
    src.write_text("val x = 1 + 2\n")
    assert main([str(src), "--no-debug", "--label-base", "5"]) == 0

    out, err = capsys.readouterr()
    assert "Compiling..." in err
    ops = [line.split()[0] for line in out.splitlines()[1:]]
    assert ops == ["push", "push", "add", "pop", "exit"]


def test_cli_output_file(tmp_path, capsys):
    src = tmp_path / "prog.mash"
    out_file = tmp_path / "prog.asm"
    src.write_text("1")
    assert main([str(src), "-o", str(out_file)]) == 0
    assert f'@1,0,"{src}"' in out_file.read_text()


def test_cli_reports_errors(tmp_path, capsys):
    src = tmp_path / "bad.mash"
    src.write_text("val x = 1\nval x = 2\n")
    assert main([str(src)]) == 1

    _, err = capsys.readouterr()
    assert f"Mash error in '{src}' at line 2 - duplicate 'x' declaration." in err
    assert "[E002]" in err


def test_cli_missing_file(tmp_path, capsys):
    missing = tmp_path / "missing.mash"
    assert main([str(missing)]) == 1

    out, err = capsys.readouterr()
    assert out == ""
    assert f"mashc: cannot read '{missing}'" in err
