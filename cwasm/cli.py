"""Command line entry point of the assembler."""

from __future__ import annotations

import errno
import os
import stat
import sys
from collections.abc import Sequence
from pathlib import Path

from cwasm.encoder import assemble
from cwasm.lines import read_source
from cwasm.parser import AsmError, parse_source
from cwasm.text import split_words

EXIT_FAILURE = 84
OUTPUT_SUFFIX = ".cor"

_USAGE = (
    "USAGE\n"
    "./asm file_name[.s]\n"
    "DESCRIPTION\n"
    "file_name file in assembly language to be converted into\n"
    " file_name.cor, an executable in the Virtual Machine.\n"
)
_WRONG_ARGUMENTS = "Look at ./asm -h.\n"
_OPEN_ERROR = "Error in function open: No such file or directory.\n"
_DIRECTORY_ERROR = "asm: Error in function read: Is a directory.\n"


def _base_name(path: str | os.PathLike[str]) -> str:
    text = os.fspath(path)
    parts = split_words(text, "/")
    return parts[-1] if parts else text


def usage() -> str:
    """Return the help text."""
    return _USAGE


def check_input_file(path: str | os.PathLike[str]) -> None:
    """Make sure ``path`` is a regular, non-empty file.

    Raises OSError if it cannot be opened, IsADirectoryError if it is not a
    regular file, and AsmError if it is empty.
    """
    fd = os.open(path, os.O_RDONLY)
    try:
        info = os.fstat(fd)
        if not stat.S_ISREG(info.st_mode):
            raise IsADirectoryError(errno.EISDIR, "Is a directory", os.fspath(path))
        empty = not os.read(fd, 1)
    finally:
        os.close(fd)
    if empty:
        raise AsmError(f"asm, {_base_name(path)}: The file is empty.")


def output_path(file_name: str) -> str:
    """Name of the compiled file: the source name minus two characters, plus .cor."""
    return file_name[:max(len(file_name) - 2, 0)] + OUTPUT_SUFFIX


def _report(error: AsmError) -> None:
    sys.stdout.write(error.message + ("\n" if error.newline else ""))


def main(argv: Sequence[str] | None = None) -> int:
    """Assemble the one file named on the command line into a .cor file."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        sys.stderr.write(_WRONG_ARGUMENTS)
        return EXIT_FAILURE
    path = args[0]
    if path == "-h":
        sys.stdout.write(usage())
        return 0
    try:
        check_input_file(path)
    except IsADirectoryError:
        sys.stderr.write(_DIRECTORY_ERROR)
        return EXIT_FAILURE
    except OSError:
        sys.stderr.write(_OPEN_ERROR)
        return EXIT_FAILURE
    except AsmError as exc:
        _report(exc)
        return EXIT_FAILURE
    file_name = _base_name(path)
    try:
        data = assemble(parse_source(file_name, read_source(path)))
    except AsmError as exc:
        _report(exc)
        return EXIT_FAILURE
    Path(output_path(file_name)).write_bytes(data)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())