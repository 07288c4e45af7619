import pytest

from cwasm.lines import split_source
from cwasm.op import DIR_SIZE, IND_SIZE, ArgType
from cwasm.parser import AsmError, ParsedProgram, Parser, parse_source

HEADER = '.name "zork"\n.comment "just a basic living prog"\n'

ZORK = HEADER + (
    "\n"
    "l2:\tsti r1, %:loop, %1\n"
    "\tand r1, %0, r1\n"
    "loop:\tlive %1\n"
    "\tzjmp %:loop\n"
)


def rows_of(text):
    return split_source(text.splitlines())


def parse(text, name="champ.s"):
    return parse_source(name, rows_of(text))


def parse_error(text):
    with pytest.raises(AsmError) as info:
        parse(text)
    return info.value


def test_zork_parses_with_labels_and_size():
    program = parse(ZORK)
    assert isinstance(program, ParsedProgram)
    assert program.labels == ("l2:", "loop:")
    assert program.prog_size == 23
    assert program.file_name == "champ.s"


def test_header_rows_are_merged():
    program = parse(ZORK)
    assert program.rows[0] == (".name", '"zork"')
    assert program.rows[1] == (".comment", '"just a basic living prog"')
    assert program.rows[program.end_header - 1][0] == ".comment"


def test_parse_source_matches_parser():
    rows = rows_of(ZORK)
    assert parse_source("champ.s", rows) == Parser("champ.s", rows).parse()


def test_input_rows_are_not_mutated():
    rows = rows_of(ZORK)
    snapshot = [list(row) for row in rows]
    parse_source("champ.s", rows)
    assert rows == snapshot


def test_comment_lines_before_header_are_skipped():
    program = parse("# a champion\n\n" + ZORK)
    assert program.rows[program.end_header - 1][0] == ".comment"
    assert program.labels == ("l2:", "loop:")


def test_missing_name_is_invalid_instruction():
    error = parse_error('.comment "x"\n.name "y"\n')
    assert error.message == "asm, champ.s, line 1: Invalid instruction."
    assert error.line == 1
    assert error.newline


def test_name_without_value():
    error = parse_error('.name\n.comment "x"\n')
    assert error.message.endswith("No name specified.")


def test_comment_without_value():
    error = parse_error('.name "x"\n.comment\n')
    assert error.message.endswith("No comment specified.")
    assert error.line == 2


def test_trailing_text_after_quote_is_syntax_error():
    error = parse_error('.name "x"\n.comment "abc" extra\n')
    assert error.message.endswith("Syntax error.")


def test_trailing_comment_after_quote_is_allowed():
    program = parse('.name "x"\n.comment "abc" # note\n')
    assert program.rows[1][0] == ".comment"


def test_program_name_too_long():
    error = parse_error('.name "' + "a" * 130 + '"\n.comment "x"\n')
    assert error.message == "asm: champ.s: line 1: The program name is too long."
    assert not error.newline


def test_no_header_at_all():
    with pytest.raises(AsmError):
        parse_source("champ.s", [[" "], ["# only a comment"]])


def test_invalid_label_name():
    error = parse_error(HEADER + "Bad: live %1\n")
    assert error.message.endswith("Invalid label name.")
    assert error.line == 3


def test_duplicate_label():
    error = parse_error(HEADER + "loop: live %1\nloop: live %1\n")
    assert "Multiple definition of the same label." in error.message
    assert error.line == 4


def test_unknown_mnemonic():
    error = parse_error(HEADER + "jump %1\n")
    assert error.message.endswith("Invalid instruction.")


@pytest.mark.parametrize("register", ["r17", "r0", "r", "rx"])
def test_invalid_register(register):
    error = parse_error(HEADER + f"aff {register}\n")
    assert error.message.endswith("Invalid register number.")


@pytest.mark.parametrize("line", ["zjmp %:nowhere", "ld :nowhere, r1"])
def test_undefined_label(line):
    error = parse_error(HEADER + line + "\n")
    assert error.message.endswith("Undefined label.")


def test_too_many_arguments():
    error = parse_error(HEADER + "live %1 %2\n")
    assert error.message.endswith("Too many arguments given to the instruction.")


@pytest.mark.parametrize("line", ["ld r1, r2", "add r1, r2", "live %abc"])
def test_invalid_argument(line):
    error = parse_error(HEADER + line + "\n")
    assert error.message.endswith(
        "The argument given to the instruction is invalid.")


def test_instruction_with_trailing_comment():
    program = parse(HEADER + "live %1 # stay alive\n")
    assert program.prog_size == 1 + DIR_SIZE


def test_label_alone_on_a_line():
    program = parse(HEADER + "start:\nzjmp %:start\n")
    assert program.labels == ("start:",)
    assert program.prog_size == 1 + IND_SIZE


def test_is_label_is_a_prefix_match():
    parser = Parser("champ.s", rows_of(ZORK))
    assert not parser.is_label("loop")
    parser.parse()
    assert parser.is_label("loop")
    assert parser.is_label("loopy")
    assert not parser.is_label("loo")


def test_recognize_argument_kinds_and_sizes():
    parser = Parser("champ.s", rows_of(ZORK))
    parser.parse()
    before = parser.prog_size
    assert parser.recognize_argument("%5", "live") == ArgType.DIR
    assert parser.prog_size == before + DIR_SIZE
    assert parser.recognize_argument("%:loop", "zjmp") == ArgType.DIR
    assert parser.prog_size == before + DIR_SIZE + IND_SIZE
    assert parser.recognize_argument(":loop", "ld") == ArgType.IND
    assert parser.recognize_argument("42", "ld") == ArgType.IND
    assert parser.recognize_argument("r16", "aff") == ArgType.REG


def test_recognize_argument_unknown_token():
    parser = Parser("champ.s", rows_of(ZORK))
    parser.parse()
    before = parser.prog_size
    assert parser.recognize_argument("%abc", "live") is None
    assert parser.prog_size == before


def test_recognize_argument_bad_register_raises():
    parser = Parser("champ.s", rows_of(ZORK))
    parser.parse()
    with pytest.raises(AsmError) as info:
        parser.recognize_argument("r99", "aff")
    assert info.value.message == "Invalid register number."
    assert info.value.line is None