"""Checking assembly source rows: header, labels and instructions."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from cwasm.lines import is_label_name, merge_header_tokens, valid_quoted
from cwasm.op import (
    COMMENT_CHAR,
    COMMENT_CMD_STRING,
    COMMENT_LENGTH,
    DIR_SIZE,
    DIRECT_CHAR,
    IND_SIZE,
    LABEL_CHAR,
    NAME_CMD_STRING,
    PROG_NAME_LENGTH,
    REG_NUMBER,
    ArgType,
    OpSpec,
    find_op,
    is_short_direct,
    needs_coding_byte,
)
from cwasm.text import clean_str, get_number, is_digit, prefix_matches

_INVALID_ARGUMENT = "The argument given to the instruction is invalid."
_INVALID_INSTRUCTION = "Invalid instruction."
_UNDEFINED_LABEL = "Undefined label."
_INVALID_REGISTER = "Invalid register number."
_TOO_MANY_ARGUMENTS = "Too many arguments given to the instruction."
_INVALID_LABEL_NAME = "Invalid label name."
_DUPLICATE_LABEL = "Multiple definition of the same label."
_SYNTAX_ERROR = "Syntax error."


class AsmError(Exception):
    """An error found in the assembly source.

    ``message`` is the text to show the user, ``line`` the 1-based source line
    when one is known, and ``newline`` whether the message ends a line.
    """

    def __init__(self, message: str, *, line: int | None = None,
                 newline: bool = True) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.newline = newline


@dataclass(frozen=True)
class ParsedProgram:
    """A source that passed every check, ready to be encoded."""

    file_name: str
    rows: tuple[tuple[str, ...], ...]
    end_header: int
    labels: tuple[str, ...]
    prog_size: int


def _skipped(row: Sequence[str]) -> bool:
    return row[0][:1] in (COMMENT_CHAR, " ")


def _is_label(text: str, labels: Iterable[str]) -> bool:
    return any(prefix_matches(text, label, len(label) - 1) for label in labels)


def _classify(token: str, labels: Iterable[str]) -> ArgType | None:
    """Tell what kind of argument ``token`` is, or None if it is none."""
    labels = tuple(labels)
    if token.startswith("r"):
        rest = token[1:]
        if is_digit(rest) and 1 <= get_number(rest) <= REG_NUMBER:
            return ArgType.REG
        raise AsmError(_INVALID_REGISTER)
    second = token[1:2]
    if token.startswith(DIRECT_CHAR):
        if (second == LABEL_CHAR and _is_label(token[2:], labels)) \
                or is_digit(token[1:]):
            return ArgType.DIR
        if second == LABEL_CHAR:
            raise AsmError(_UNDEFINED_LABEL)
    if (token.startswith(LABEL_CHAR) and _is_label(token[1:], labels)) \
            or is_digit(token):
        return ArgType.IND
    if token.startswith(LABEL_CHAR) and not _is_label(token[2:], labels):
        raise AsmError(_UNDEFINED_LABEL)
    return None


def _argument_size(kind: ArgType, mnemonic: str) -> int:
    if kind == ArgType.DIR:
        return IND_SIZE if is_short_direct(mnemonic) else DIR_SIZE
    if kind == ArgType.IND:
        return IND_SIZE
    return 1


def _byte_length(text: str) -> int:
    return len(text.encode("utf-8", "surrogateescape"))


class Parser:
    """Validates token rows and measures the program they describe."""

    def __init__(self, file_name: str, rows: Iterable[Sequence[str]]) -> None:
        self.file_name = file_name
        self.rows: list[list[str]] = [list(row) for row in rows]
        self.labels: tuple[str, ...] = ()
        self.end_header = 0
        self.prog_size = 0

    def parse(self) -> ParsedProgram:
        """Check the whole source; raise AsmError at the first problem."""
        self._check_header()
        self._collect_labels()
        self._check_instructions()
        return ParsedProgram(
            file_name=self.file_name,
            rows=tuple(tuple(row) for row in self.rows),
            end_header=self.end_header,
            labels=self.labels,
            prog_size=self.prog_size,
        )

    def is_label(self, text: str) -> bool:
        """Tell whether ``text`` starts with the name of a known label."""
        return _is_label(text, self.labels)

    def recognize_argument(self, token: str, mnemonic: str) -> ArgType | None:
        """Classify an argument of ``mnemonic`` and count its encoded size.

        Returns None for a token that is no argument at all; raises AsmError
        for a bad register or an undefined label.
        """
        kind = _classify(token, self.labels)
        if kind is not None:
            self.prog_size += _argument_size(kind, mnemonic)
        return kind

    def _error(self, index: int, reason: str) -> AsmError:
        return AsmError(f"asm, {self.file_name}, line {index + 1}: {reason}",
                        line=index + 1)

    def _next_content(self, start: int) -> int:
        for index in range(start, len(self.rows)):
            if not _skipped(self.rows[index]):
                return index
        raise self._error(len(self.rows), _INVALID_INSTRUCTION)

    def _check_directive(self, index: int, command: str, what: str) -> None:
        row = self.rows[index]
        row[0] = clean_str(row[0], " \t")
        if row[0] != command:
            raise self._error(index, _INVALID_INSTRUCTION)
        if len(row) == 1:
            raise self._error(index, f"No {what} specified.")
        if not valid_quoted(row[1]):
            raise self._error(index, _SYNTAX_ERROR)

    def _too_long(self, index: int, what: str) -> AsmError:
        return AsmError(
            f"asm: {self.file_name}: line {index + 1}: The {what} is too long.",
            line=index + 1, newline=False)

    def _check_header(self) -> None:
        name = self._next_content(0)
        comment = self._next_content(name + 1)
        self.rows[name] = merge_header_tokens(self.rows[name])
        self.rows[comment] = merge_header_tokens(self.rows[comment])
        self._check_directive(name, NAME_CMD_STRING, "name")
        self._check_directive(comment, COMMENT_CMD_STRING, "comment")
        if _byte_length(self.rows[name][1]) > PROG_NAME_LENGTH:
            raise self._too_long(name, "program name")
        if _byte_length(self.rows[comment][1]) > COMMENT_LENGTH:
            raise self._too_long(comment, "comment")
        self.end_header = comment + 1

    def _collect_labels(self) -> None:
        for index, row in enumerate(self.rows):
            if _skipped(row):
                continue
            row[0] = clean_str(row[0], " \t")
            if row[0].endswith(LABEL_CHAR) and not is_label_name(row[0]):
                raise self._error(index, _INVALID_LABEL_NAME)
        labels: list[str] = []
        for index, row in enumerate(self.rows):
            token = row[0]
            if token in labels:
                raise self._error(index, _DUPLICATE_LABEL)
            if token.endswith(LABEL_CHAR) and is_label_name(token):
                labels.append(token)
        self.labels = tuple(labels)

    def _check_instructions(self) -> None:
        for index in range(self.end_header, len(self.rows)):
            row = self.rows[index]
            if _skipped(row):
                continue
            try:
                self._check_line(row)
            except AsmError as exc:
                raise self._error(index, exc.message) from None

    def _check_line(self, row: list[str]) -> None:
        if self.is_label(row[0]):
            if len(row) == 1:
                return
            self._check_instruction(row, 1)
        else:
            self._check_instruction(row, 0)

    def _check_instruction(self, row: list[str], begin: int) -> None:
        row[begin] = clean_str(row[begin], " \t")
        op = find_op(row[begin])
        if op is None:
            raise AsmError(_INVALID_INSTRUCTION)
        if needs_coding_byte(op.mnemonic):
            self.prog_size += 1
        if len(row) - (1 + begin) > op.nbr_args \
                and not row[op.nbr_args + 1].startswith(COMMENT_CHAR):
            raise AsmError(_TOO_MANY_ARGUMENTS)
        self._check_params(row, op, begin)
        self.prog_size += 1

    def _check_params(self, row: list[str], op: OpSpec, begin: int) -> None:
        end = op.nbr_args + 1 + begin
        if len(row) != end and (
                len(row) < end or not row[end].startswith(COMMENT_CHAR)):
            raise AsmError(_INVALID_ARGUMENT)
        for allowed, index in zip(op.types, range(begin + 1, end)):
            row[index] = clean_str(row[index], ",")
            kind = self.recognize_argument(row[index], row[begin])
            if kind is None or not kind & allowed:
                raise AsmError(_INVALID_ARGUMENT)


def parse_source(file_name: str, rows: Iterable[Sequence[str]]) -> ParsedProgram:
    """Check the token rows of ``file_name`` and return the parsed program."""
    return Parser(file_name, rows).parse()