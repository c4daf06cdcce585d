"""
Pseudo-instruction expansion.

``stpush "text"`` pushes a string onto the stack as a run of PUSH words,
three characters per word. The string is padded with 0x01 bytes to a
multiple of three and reversed, so the first word pushed holds the end of
the string and the last word pushed holds its beginning. Every word except
the first carries a continuation flag in bit 24.
"""

import re
from typing import List

from .errors import MalformedPseudoInstructionError
from .instructions import Push


STPUSH = "stpush"

CHARS_PER_WORD = 3
PAD_CHAR = "\x01"
CONTINUATION_FLAG = 1 << 24

ESCAPES = {
    '"': '"',
    "\\": "\\",
    "n": "\n",
}

_QUOTED = re.compile(r'^"(.*)"$')
_ESCAPE = re.compile(r'\\(["\\n])')


def is_pseudo_instruction(mnemonic: str) -> bool:
    """Check if a mnemonic is a pseudo-instruction."""
    return mnemonic.lower() == STPUSH


def unescape(text: str) -> str:
    """Substitute the \\", \\\\ and \\n escapes; other backslashes stay as-is."""
    # Single scan: an escaped backslash never pairs with the next char, so
    # source \\n is a backslash then n. Chained str.replace calls would
    # turn it into a newline instead.
    return _ESCAPE.sub(lambda m: ESCAPES[m.group(1)], text)


def extract_string(operand_text: str) -> str:
    """
    Pull the string literal out of a stpush operand.

    Args:
        operand_text: Everything after the mnemonic on the source line

    Returns:
        The unescaped string

    Raises:
        MalformedPseudoInstructionError: If the operand is not a quoted string
    """
    match = _QUOTED.match(operand_text.strip())
    if not match:
        raise MalformedPseudoInstructionError(
            "stpush requires a double-quoted string argument"
        )
    return unescape(match.group(1))


def word_count(text: str) -> int:
    """Number of PUSH words needed for a string (at least one)."""
    return max(1, -(-len(text) // CHARS_PER_WORD))


def pack_string(text: str) -> List[int]:
    """
    Pack a string into 28-bit push literals.

    Returns:
        Literal values in emission order
    """
    padded = text
    if not padded or len(padded) % CHARS_PER_WORD:
        padded += PAD_CHAR * (CHARS_PER_WORD - len(padded) % CHARS_PER_WORD)
    reversed_text = padded[::-1]

    values = []
    for index in range(0, len(reversed_text), CHARS_PER_WORD):
        chunk = reversed_text[index:index + CHARS_PER_WORD]
        value = 0
        for char in chunk:
            value = (value << 8) | (ord(char) & 0xFF)
        if index:
            value |= CONTINUATION_FLAG
        values.append(value)

    return values


def get_pseudo_instruction_count(mnemonic: str, operand_text: str) -> int:
    """
    Get the number of real instructions a pseudo-instruction expands to.

    This is needed for address calculation in the first pass.
    """
    if not is_pseudo_instruction(mnemonic):
        return 1
    return word_count(extract_string(operand_text))


def expand_pseudo(mnemonic: str, operand_text: str) -> List[Push]:
    """
    Expand a pseudo-instruction into real instructions.

    Raises:
        MalformedPseudoInstructionError: If the operand is not a quoted string
    """
    return [Push(value) for value in pack_string(extract_string(operand_text))]
