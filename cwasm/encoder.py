"""Encoding a checked assembly program into the binary champion format."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from itertools import takewhile

from cwasm.op import (
    COMMENT_CHAR,
    COMMENT_CMD_STRING,
    DIR_SIZE,
    DIRECT_CHAR,
    IND_SIZE,
    LABEL_CHAR,
    NAME_CMD_STRING,
    ArgType,
    OpSpec,
    find_op,
    is_short_direct,
    needs_coding_byte,
    pack_header,
)
from cwasm.parser import ParsedProgram, Parser
from cwasm.text import get_number

_VALUE_SIZES = (1, 2, 4)
_LABEL_ARG_SIZE = 2
# A backward jump of ``d`` bytes is stored as this minus ``d``.
_BACKWARD_BASE = 65535 + 2
_PROG_SIZE_MASK = 0xFFFF


def to_big_endian(value: int, size: int) -> bytes:
    """Encode ``value`` on ``size`` bytes, most significant first, wrapping it."""
    if size not in _VALUE_SIZES:
        raise ValueError(f"unsupported value size: {size}")
    return (value & ((1 << (8 * size)) - 1)).to_bytes(size, "big")


def arg_size(arg_type: ArgType | None, mnemonic: str) -> int:
    """Return the number of bytes an argument of ``arg_type`` takes."""
    if arg_type == ArgType.DIR:
        return IND_SIZE if is_short_direct(mnemonic) else DIR_SIZE
    if arg_type == ArgType.IND:
        return IND_SIZE
    return 1


@dataclass
class Slot:
    """One piece of encoded output: an opcode, a coding byte, a value or a label."""

    opcode: int | None = None
    coding_byte: int | None = None
    value: int | None = None
    size: int = 0
    label: str | None = None
    definition: str | None = None

    @property
    def width(self) -> int:
        """Number of bytes the slot takes in the program."""
        marker = self.opcode is not None or self.coding_byte is not None
        return int(marker) + self.size

    def encode(self) -> bytes:
        """Return the bytes the slot writes."""
        out = bytearray()
        if self.opcode is not None:
            out.append(self.opcode & 0xFF)
        if self.coding_byte is not None:
            out.append(self.coding_byte & 0xFF)
        if self.value is not None:
            out += to_big_endian(self.value, self.size)
        return bytes(out)


def _argument_slot(token: str, size: int) -> Slot:
    if token.startswith(LABEL_CHAR):
        return Slot(value=0, size=_LABEL_ARG_SIZE, label=token[1:])
    if token[1:2] == LABEL_CHAR:
        return Slot(value=0, size=_LABEL_ARG_SIZE, label=token[2:])
    number = get_number(token[1:] if token.startswith(DIRECT_CHAR) else token)
    return Slot(value=number, size=size)


def _distance(slots: Sequence[Slot], begin: int, arrival: int) -> int:
    if begin <= arrival:
        return sum(slot.width for slot in slots[begin:arrival])
    travelled = sum(slot.width for slot in slots[arrival + 1:begin + 1])
    return _BACKWARD_BASE - travelled


class _Layout:
    """Lays out the instructions of a program as a list of slots."""

    def __init__(self, program: ParsedProgram) -> None:
        self._checker = Parser(program.file_name, program.rows)
        self._checker.labels = program.labels
        self.slots: list[Slot] = []
        self.size = 0
        for row in program.rows[program.end_header:]:
            if row[0][:1] in (COMMENT_CHAR, " "):
                continue
            self._add_row(row)
        self._resolve_labels()

    def _add_row(self, row: Sequence[str]) -> None:
        if not self._checker.is_label(row[0]):
            self._add_instruction(row)
            return
        self.slots.append(Slot(definition=row[0]))
        if len(row) == 1 or row[1].startswith(COMMENT_CHAR):
            return
        self._add_instruction(row[1:])

    def _add_instruction(self, tokens: Sequence[str]) -> None:
        op = find_op(tokens[0])
        if op is None:
            return
        self.slots.append(Slot(opcode=op.code))
        self.size += 1
        if needs_coding_byte(op.mnemonic):
            self.slots.append(Slot(coding_byte=self._coding_byte(tokens, op)))
            self.size += 1
        for token in takewhile(lambda t: not t.startswith(COMMENT_CHAR), tokens[1:]):
            kind = self._checker.recognize_argument(token, tokens[0])
            size = arg_size(kind, tokens[0])
            self.slots.append(_argument_slot(token, size))
            self.size += size

    def _coding_byte(self, tokens: Sequence[str], op: OpSpec) -> int:
        mnemonic = tokens[0]
        if op.nbr_args == 1:
            kind = self._checker.recognize_argument(tokens[1], mnemonic)
            return (int(kind or 0) << 6) & 0xFF
        value = 0
        arguments = takewhile(lambda t: not t.startswith(COMMENT_CHAR), tokens[1:])
        for position, token in enumerate(arguments):
            code = int(self._checker.recognize_argument(token, mnemonic) or 0)
            if code == ArgType.IND:
                code = 3
            value |= code << (6 - 2 * position)
        return value & 0xFF

    def _resolve_labels(self) -> None:
        current = 0
        for index, slot in enumerate(self.slots):
            if slot.opcode is not None:
                current = index
            if slot.label is None:
                continue
            wanted = slot.label + LABEL_CHAR
            for target, other in enumerate(self.slots):
                if other.definition == wanted:
                    slot.value = _distance(self.slots, current, target)


def _quoted(text: str) -> str:
    start = text.find('"')
    if start == -1:
        return ""
    end = text.find('"', start + 1)
    return text[start + 1:] if end == -1 else text[start + 1:end]


def _header_strings(rows: Sequence[Sequence[str]]) -> tuple[str, str]:
    name_row = next((i for i, row in enumerate(rows) if row[0] == NAME_CMD_STRING), None)
    if name_row is None:
        raise ValueError("program has no name")
    comment_row = next((i for i in range(name_row, len(rows))
                        if rows[i][0] == COMMENT_CMD_STRING), None)
    if comment_row is None:
        raise ValueError("program has no comment")
    return _quoted(rows[name_row][1]), _quoted(rows[comment_row][1])


def assemble(program: ParsedProgram) -> bytes:
    """Return the compiled champion: the header followed by the program bytes."""
    layout = _Layout(program)
    body = b"".join(slot.encode() for slot in layout.slots)
    name, comment = _header_strings(program.rows)
    return pack_header(name, comment, layout.size & _PROG_SIZE_MASK) + body