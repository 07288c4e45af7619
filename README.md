# cwasm

`cwasm` is an assembler for Corewar champions. It reads a champion written
in the Corewar assembly language (a `.s` file) and writes the matching
bytecode file (`.cor`) for the virtual machine.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Usage

```
cwasm champion.s
```

This writes `champion.cor` into the current directory. The output name is
the base name of the input with its last two characters replaced by `.cor`.
`cwasm -h` prints the usage text.

The exit status is 0 on success and 84 on any error:

- wrong number of arguments: `Look at ./asm -h.` on standard error;
- a file that cannot be opened, or that is not a regular file: a message on
  standard error;
- an empty file, or an error in the source: a message on standard output,
  with the file name and, for source errors, the line number, for example:

```
asm, champion.s, line 7: Undefined label.
```

## Source format

A champion starts with a header (comment lines and blank lines may come
before and between):

```
.name "zork"
.comment "just a basic living prog"
```

The name may be at most 128 bytes long and the comment at most 2048.
Instructions follow, one per line, optionally preceded by a label:

```
l2:     sti r1, %:live, %1
        and r1, %0, r1
live:   live %1
        zjmp %:live
```

- Registers are written `r1` to `r16`.
- Direct values start with `%` (`%42`, `%:label`).
- Indirect values are plain numbers or `:label`.
- Label names use the characters `abcdefghijklmnopqrstuvwxyz_0123456789`
  and end with `:`; a label may be defined only once.
- `#` starts a comment.

The sixteen instructions are `live`, `ld`, `st`, `add`, `sub`, `and`, `or`,
`xor`, `zjmp`, `ldi`, `sti`, `fork`, `lld`, `lldi`, `lfork` and `aff`.
`live`, `zjmp`, `fork` and `lfork` have no argument coding byte;
`zjmp`, `ldi`, `sti`, `fork`, `lfork` and `lldi` encode direct values on
two bytes, the others on four. Label references are encoded on two bytes.

## Library use

```python
from cwasm.lines import read_source
from cwasm.parser import parse_source, AsmError
from cwasm.encoder import assemble

rows = read_source("champion.s")
try:
    program = parse_source("champion.s", rows)
except AsmError as error:
    print(error)
else:
    data = assemble(program)
```

- `cwasm.lines.read_source(path)` reads a file into rows of tokens;
  `split_source(lines)` does the same for lines already in memory.
- `cwasm.parser.parse_source(file_name, rows)` (or `Parser(file_name, rows).parse()`)
  checks the header, labels and instructions and returns a `ParsedProgram`.
  Problems raise `AsmError`, whose `message` is the text shown to the user
  and `line` the 1-based source line.
- `cwasm.encoder.assemble(program)` returns the complete `.cor` contents as
  `bytes`: the header (magic number `0xea83f3`, program name, program size,
  comment) followed by the encoded instructions.
- `cwasm.op` holds the instruction table (`OP_TAB`, `find_op`, `OpSpec`,
  `ArgType`) and `pack_header(name, comment, prog_size)`.
- `cwasm.cli.main(argv=None)` is the command above.

## What it does not do

`cwasm` only assembles. It has no virtual machine to run champions and no
disassembler for `.cor` files.