"""
StackVM instruction encoder.

Encodes instruction values into 32-bit machine words. The opcode lives in
bits 31-28 and the remaining 28 bits are laid out per opcode. Operand values
are masked to their field widths; out-of-range values are truncated rather
than rejected.
"""

from typing import Callable, Dict

from .instructions import (
    Instruction,
    Exit,
    Swap,
    Nop,
    Input,
    StInput,
    Debug,
    Pop,
    BinaryArithmetic,
    UnaryArithmetic,
    StringPrint,
    Call,
    Return,
    Goto,
    BinaryIf,
    UnaryIf,
    Dup,
    Print,
    Dump,
    Push,
    OP_MISC,
    OP_POP,
    OP_BINARY_ARITH,
    OP_UNARY_ARITH,
    OP_STPRINT,
    OP_CALL,
    OP_RETURN,
    OP_GOTO,
    OP_BINARY_IF,
    OP_UNARY_IF,
    OP_DUP,
    OP_PRINT,
    OP_DUMP,
    OP_PUSH,
    MISC_EXIT,
    MISC_SWAP,
    MISC_NOP,
    MISC_INPUT,
    MISC_STINPUT,
    MISC_DEBUG,
)
from .errors import EncodingError


# Offset fields that must stay word-aligned drop their low two bits
OFFSET_28 = 0x0FFFFFFF
ALIGNED_OFFSET_28 = 0x0FFFFFFC
ALIGNED_OFFSET_25 = 0x01FFFFFC


def mask(value: int, bits: int) -> int:
    """Truncate a (possibly negative) value to an unsigned field of ``bits`` bits."""
    return value & ((1 << bits) - 1)


def opcode_word(opcode: int, sub: int = 0) -> int:
    """
    Build the fixed part of a word.

    Format: [opcode(4) | sub(4) | 0(24)]
    """
    return (mask(opcode, 4) << 28) | (mask(sub, 4) << 24)


def encode_exit(instr: Exit) -> int:
    """Format: [0(4) | 0(4) | 0(16) | code(8)]"""
    return opcode_word(OP_MISC, MISC_EXIT) | mask(instr.code, 8)


def encode_swap(instr: Swap) -> int:
    """
    Encode a SWAP instruction.

    Format: [0(4) | 1(4) | source/4(12) | dest/4(12)]

    Offsets are given in bytes; only word offsets are addressable so the
    low two bits are shifted out.
    """
    source = mask(instr.source >> 2, 12)
    dest = mask(instr.dest >> 2, 12)
    return opcode_word(OP_MISC, MISC_SWAP) | (source << 12) | dest


def encode_nop(instr: Nop) -> int:
    return opcode_word(OP_MISC, MISC_NOP)


def encode_input(instr: Input) -> int:
    return opcode_word(OP_MISC, MISC_INPUT)


def encode_stinput(instr: StInput) -> int:
    """Format: [0(4) | 5(4) | max_chars(24)]"""
    return opcode_word(OP_MISC, MISC_STINPUT) | mask(instr.max_chars, 24)


def encode_debug(instr: Debug) -> int:
    """Format: [0(4) | 15(4) | value(24)]"""
    return opcode_word(OP_MISC, MISC_DEBUG) | mask(instr.value, 24)


def encode_pop(instr: Pop) -> int:
    """Format: [1(4) | 0(2) | offset(26)]"""
    return opcode_word(OP_POP) | mask(instr.offset, 26)


def encode_binary_arithmetic(instr: BinaryArithmetic) -> int:
    """Format: [2(4) | op(4) | 0(24)]"""
    return opcode_word(OP_BINARY_ARITH, instr.op)


def encode_unary_arithmetic(instr: UnaryArithmetic) -> int:
    """Format: [3(4) | op(4) | 0(24)]"""
    return opcode_word(OP_UNARY_ARITH, instr.op)


def encode_string_print(instr: StringPrint) -> int:
    """Format: [4(4) | offset[27:2](26) | 0(2)]"""
    return opcode_word(OP_STPRINT) | (instr.offset & ALIGNED_OFFSET_28)


def encode_call(instr: Call) -> int:
    """Format: [5(4) | offset(28)]"""
    return opcode_word(OP_CALL) | (instr.offset & OFFSET_28)


def encode_return(instr: Return) -> int:
    """Format: [6(4) | offset(28)]"""
    return opcode_word(OP_RETURN) | (instr.offset & OFFSET_28)


def encode_goto(instr: Goto) -> int:
    """Format: [7(4) | offset(28)]"""
    return opcode_word(OP_GOTO) | (instr.offset & OFFSET_28)


def encode_binary_if(instr: BinaryIf) -> int:
    """
    Encode a binary conditional branch.

    Format: [8(4) | cond(3) | offset[24:2](23) | 0(2)]

    The branch offset must be a multiple of 4, bits 1-0 are always cleared.
    """
    condition = mask(instr.condition, 3)
    return opcode_word(OP_BINARY_IF) | (condition << 25) | (instr.offset & ALIGNED_OFFSET_25)


def encode_unary_if(instr: UnaryIf) -> int:
    """
    Encode a unary conditional branch.

    Format: [9(4) | 0(1) | cond(2) | offset[24:2](23) | 0(2)]
    """
    condition = mask(instr.condition, 2)
    return opcode_word(OP_UNARY_IF) | (condition << 25) | (instr.offset & ALIGNED_OFFSET_25)


def encode_dup(instr: Dup) -> int:
    """Format: [12(4) | offset(28)]"""
    return opcode_word(OP_DUP) | (instr.offset & OFFSET_28)


def encode_print(instr: Print) -> int:
    """Format: [13(4) | offset[27:2](26) | fmt(2)]"""
    return opcode_word(OP_PRINT) | (instr.offset & ALIGNED_OFFSET_28) | mask(instr.fmt, 2)


def encode_dump(instr: Dump) -> int:
    return opcode_word(OP_DUMP)


def encode_push(instr: Push) -> int:
    """Format: [15(4) | value(28)]"""
    return opcode_word(OP_PUSH) | mask(instr.value, 28)


ENCODERS: Dict[type, Callable] = {
    Exit: encode_exit,
    Swap: encode_swap,
    Nop: encode_nop,
    Input: encode_input,
    StInput: encode_stinput,
    Debug: encode_debug,
    Pop: encode_pop,
    BinaryArithmetic: encode_binary_arithmetic,
    UnaryArithmetic: encode_unary_arithmetic,
    StringPrint: encode_string_print,
    Call: encode_call,
    Return: encode_return,
    Goto: encode_goto,
    BinaryIf: encode_binary_if,
    UnaryIf: encode_unary_if,
    Dup: encode_dup,
    Print: encode_print,
    Dump: encode_dump,
    Push: encode_push,
}

NOP_WORD = encode_nop(Nop())


def encode_instruction(instr: Instruction) -> int:
    """
    Encode an instruction into a 32-bit word.

    Args:
        instr: Instruction value

    Returns:
        32-bit encoded instruction (unsigned)
    """
    encoder = ENCODERS.get(type(instr))
    if encoder is None:
        raise EncodingError(f"Cannot encode {type(instr).__name__}")
    return encoder(instr)
