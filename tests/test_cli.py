import pytest

from cwasm.cli import EXIT_FAILURE, check_input_file, main, output_path, usage
from cwasm.encoder import assemble
from cwasm.lines import read_source
from cwasm.op import COREWAR_EXEC_MAGIC
from cwasm.parser import AsmError, parse_source

VALID = '.name "champ"\n.comment "just a test"\n\nlive %1\n'


def write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


def test_usage_text():
    text = usage()
    assert text.startswith("USAGE\n./asm file_name[.s]\nDESCRIPTION\n")
    assert text.endswith(" file_name.cor, an executable in the Virtual Machine.\n")


def test_output_path():
    assert output_path("champ.s") == "champ.cor"
    assert output_path("x.asm") == "x.a.cor"


def test_check_input_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        check_input_file(tmp_path / "nothing.s")


def test_check_input_file_directory(tmp_path):
    with pytest.raises(IsADirectoryError):
        check_input_file(tmp_path)


def test_check_input_file_empty(tmp_path):
    path = write(tmp_path / "empty.s", "")
    with pytest.raises(AsmError) as info:
        check_input_file(path)
    assert info.value.message == "asm, empty.s: The file is empty."


def test_main_wrong_argument_count(capsys):
    assert main([]) == EXIT_FAILURE
    assert main(["a.s", "b.s"]) == EXIT_FAILURE
    assert capsys.readouterr().err == "Look at ./asm -h.\n" * 2


def test_main_help(capsys):
    assert main(["-h"]) == 0
    assert capsys.readouterr().out == usage()


def test_main_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nothing.s")]) == EXIT_FAILURE
    assert capsys.readouterr().err == "Error in function open: No such file or directory.\n"


def test_main_directory(tmp_path, capsys):
    assert main([str(tmp_path)]) == EXIT_FAILURE
    assert capsys.readouterr().err == "asm: Error in function read: Is a directory.\n"


def test_main_empty_file(tmp_path, capsys):
    path = write(tmp_path / "empty.s", "")
    assert main([str(path)]) == EXIT_FAILURE
    assert capsys.readouterr().out == "asm, empty.s: The file is empty.\n"


def test_main_writes_cor_in_working_directory(tmp_path, monkeypatch):
    source = write(tmp_path / "src" / "champ.s", VALID)
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    monkeypatch.chdir(out_dir)
    assert main([str(source)]) == 0
    data = (out_dir / "champ.cor").read_bytes()
    assert data == assemble(parse_source("champ.s", read_source(source)))
    assert int.from_bytes(data[:4], "big") == COREWAR_EXEC_MAGIC
    assert not (tmp_path / "src" / "champ.cor").exists()


def test_main_reports_parse_error(tmp_path, monkeypatch, capsys):
    source = write(tmp_path / "bad.s", '.name "a"\n.comment "b"\nfoo r1\n')
    monkeypatch.chdir(tmp_path)
    assert main([str(source)]) == EXIT_FAILURE
    assert capsys.readouterr().out == "asm, bad.s, line 3: Invalid instruction.\n"
    assert not (tmp_path / "bad.cor").exists()