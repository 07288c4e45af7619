"""Assembler for Corewar champions: turns .s sources into .cor bytecode."""

__version__ = "0.1.0"