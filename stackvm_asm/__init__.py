"""
StackVM Assembler - A two-pass assembler for the StackVM virtual machine.

This package translates StackVM assembly text into a binary image of 32-bit
instruction words.
"""

__version__ = "1.0.0"

from .assembler import Assembler
from .errors import AssemblerError, ParseError, EncodingError, SymbolError

__all__ = ["Assembler", "AssemblerError", "ParseError", "EncodingError", "SymbolError"]
