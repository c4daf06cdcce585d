"""
Assembly source file parser.

Handles comment stripping, label extraction, and splitting instruction lines
into a mnemonic and its operands. Both assembler passes consume the same
parsed lines, so classification happens exactly once.
"""

import re
from typing import List, Optional
from dataclasses import dataclass, field

from .errors import ParseError, MalformedIntegerLiteralError


@dataclass
class ParsedLine:
    """
    Represents a parsed line of assembly.

    Attributes:
        line_num: Original line number in source file (1-based)
        label: Label defined on this line (if any)
        mnemonic: Lower-cased instruction mnemonic (if any)
        operands: Whitespace-separated operand tokens
        operand_text: Everything after the mnemonic, unsplit
        original: Original line text
    """

    line_num: int
    label: Optional[str] = None
    mnemonic: Optional[str] = None
    operands: List[str] = field(default_factory=list)
    operand_text: str = ""
    original: str = ""

    @property
    def is_empty(self) -> bool:
        return self.label is None and self.mnemonic is None


# One optional sign, then a prefixed hex/binary or plain decimal number
_INTEGER = re.compile(
    r"^([+-]?)(?:0[xX]([0-9a-fA-F]+)|0[bB]([01]+)|([0-9]+))$"
)


def strip_comments(line: str) -> str:
    """Remove everything from the first ``#`` onwards."""
    hash_pos = line.find("#")
    if hash_pos >= 0:
        return line[:hash_pos]
    return line


def parse_integer(value_str: str) -> int:
    """
    Parse an integer literal.

    Supports:
    - Decimal: 123, -45
    - Hexadecimal: 0x1A, 0X1a
    - Binary: 0b1010

    Returns:
        Integer value
    """
    value_str = value_str.strip()

    if not value_str:
        raise MalformedIntegerLiteralError("Empty integer literal")

    match = _INTEGER.match(value_str)
    if not match:
        raise MalformedIntegerLiteralError(f"Invalid integer literal: {value_str}")

    sign, hex_digits, bin_digits, dec_digits = match.groups()
    if hex_digits is not None:
        result = int(hex_digits, 16)
    elif bin_digits is not None:
        result = int(bin_digits, 2)
    else:
        result = int(dec_digits, 10)

    return -result if sign == "-" else result


def looks_like_integer(token: str) -> bool:
    """True if the token should be read as a number rather than a label name."""
    return bool(token) and (token[0].isdigit() or token[0] in "+-")


def parse_line(line: str, line_num: int) -> ParsedLine:
    """
    Parse a single line of assembly.

    Returns:
        ParsedLine object containing parsed components
    """
    result = ParsedLine(line_num=line_num, original=line)

    line = strip_comments(line).strip()
    if not line:
        return result

    if line.endswith(":"):
        name = line[:-1].rstrip()
        if not name or re.search(r"\s", name):
            raise ParseError(f"Invalid label name: '{name}'", line_num, result.original)
        result.label = name
        return result

    parts = line.split(None, 1)
    result.mnemonic = parts[0].lower()
    if len(parts) > 1:
        result.operand_text = parts[1].strip()
        result.operands = result.operand_text.split()

    return result


class Parser:
    """
    Assembly file parser.

    Provides methods to parse entire files or strings into ParsedLine lists.
    """

    def __init__(self):
        self.lines: List[ParsedLine] = []

    def parse_file(self, filepath: str) -> List[ParsedLine]:
        """
        Parse an assembly file.

        Args:
            filepath: Path to the assembly file

        Returns:
            List of ParsedLine objects
        """
        with open(filepath, "rb") as f:
            raw = f.read()

        try:
            content = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            line_num = raw.count(b"\n", 0, e.start) + 1
            raise ParseError(
                f"Source is not valid UTF-8 (byte 0x{raw[e.start]:02X})", line_num
            ) from None

        return self.parse_string(content)

    def parse_string(self, content: str) -> List[ParsedLine]:
        """
        Parse assembly source from a string.

        Blank and comment-only lines are dropped; line numbers refer to the
        original text.

        Args:
            content: Assembly source code string

        Returns:
            List of ParsedLine objects
        """
        self.lines = []

        for i, line in enumerate(content.splitlines(), start=1):
            parsed = parse_line(line, i)
            if not parsed.is_empty:
                self.lines.append(parsed)

        return self.lines
