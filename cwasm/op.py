"""Instruction set, assembler constants and the executable header layout."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntFlag

MEM_SIZE = 6 * 1024
IDX_MOD = 512
MAX_ARGS_NUMBER = 4
COMMENT_CHAR = "#"
LABEL_CHAR = ":"
DIRECT_CHAR = "%"
SEPARATOR_CHAR = ","
LABEL_CHARS = "abcdefghijklmnopqrstuvwxyz_0123456789"
NAME_CMD_STRING = ".name"
COMMENT_CMD_STRING = ".comment"
REG_NUMBER = 16
IND_SIZE = 2
DIR_SIZE = 4
REG_SIZE = DIR_SIZE
PROG_NAME_LENGTH = 128
COMMENT_LENGTH = 2048
COREWAR_EXEC_MAGIC = 0xEA83F3
CYCLE_TO_DIE = 1536
CYCLE_DELTA = 5
NBR_LIVE = 40


class ArgType(IntFlag):
    """Kinds of argument an instruction accepts."""

    REG = 1
    DIR = 2
    IND = 4
    LAB = 8


@dataclass(frozen=True)
class OpSpec:
    """Description of one instruction of the virtual machine."""

    mnemonic: str
    nbr_args: int
    types: tuple[ArgType, ...]
    code: int
    nbr_cycles: int
    comment: str


_R, _D, _I = ArgType.REG, ArgType.DIR, ArgType.IND

OP_TAB: tuple[OpSpec, ...] = (
    OpSpec("live", 1, (_D,), 1, 10, "alive"),
    OpSpec("ld", 2, (_D | _I, _R), 2, 5, "load"),
    OpSpec("st", 2, (_R, _I | _R), 3, 5, "store"),
    OpSpec("add", 3, (_R, _R, _R), 4, 10, "addition"),
    OpSpec("sub", 3, (_R, _R, _R), 5, 10, "soustraction"),
    OpSpec("and", 3, (_R | _D | _I, _R | _I | _D, _R), 6, 6,
           "et (and  r1, r2, r3   r1&r2 -> r3"),
    OpSpec("or", 3, (_R | _I | _D, _R | _I | _D, _R), 7, 6,
           "ou  (or   r1, r2, r3   r1 | r2 -> r3"),
    OpSpec("xor", 3, (_R | _I | _D, _R | _I | _D, _R), 8, 6,
           "ou (xor  r1, r2, r3   r1^r2 -> r3"),
    OpSpec("zjmp", 1, (_D,), 9, 20, "jump if zero"),
    OpSpec("ldi", 3, (_R | _D | _I, _D | _R, _R), 10, 25, "load index"),
    OpSpec("sti", 3, (_R, _R | _D | _I, _D | _R), 11, 25, "store index"),
    OpSpec("fork", 1, (_D,), 12, 800, "fork"),
    OpSpec("lld", 2, (_D | _I, _R), 13, 10, "long load"),
    OpSpec("lldi", 3, (_R | _D | _I, _D | _R, _R), 14, 50, "long load index"),
    OpSpec("lfork", 1, (_D,), 15, 1000, "long fork"),
    OpSpec("aff", 1, (_R,), 16, 2, "aff"),
)

_BY_MNEMONIC = {op.mnemonic: op for op in OP_TAB}

_NO_CODING_BYTE = frozenset({"live", "zjmp", "fork", "lfork"})
_SHORT_DIRECT = frozenset({"zjmp", "ldi", "sti", "fork", "lfork", "lldi"})

# magic, name[129], padding, prog_size, comment[2049], padding
_HEADER = struct.Struct(f">I{PROG_NAME_LENGTH + 1}s3xI{COMMENT_LENGTH + 1}s3x")
HEADER_SIZE = _HEADER.size


def find_op(mnemonic: str) -> OpSpec | None:
    """Return the instruction named ``mnemonic``, or None if there is none."""
    return _BY_MNEMONIC.get(mnemonic)


def needs_coding_byte(mnemonic: str) -> bool:
    """Tell whether the instruction is followed by an argument coding byte."""
    return mnemonic not in _NO_CODING_BYTE


def is_short_direct(mnemonic: str) -> bool:
    """Tell whether the instruction encodes direct values on two bytes."""
    return mnemonic in _SHORT_DIRECT


def _encode_field(text: str, limit: int, what: str) -> bytes:
    data = text.encode("utf-8", "surrogateescape")
    if len(data) > limit:
        raise ValueError(f"{what} is longer than {limit} bytes")
    return data


def pack_header(name: str, comment: str, prog_size: int) -> bytes:
    """Build the binary header that starts a compiled champion."""
    if not 0 <= prog_size <= 0xFFFFFFFF:
        raise ValueError("program size does not fit in 32 bits")
    return _HEADER.pack(
        COREWAR_EXEC_MAGIC,
        _encode_field(name, PROG_NAME_LENGTH, "program name"),
        prog_size,
        _encode_field(comment, COMMENT_LENGTH, "comment"),
    )