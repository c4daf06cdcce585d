"""
Tests for the instruction encoder.
"""

import pytest

from stackvm_asm.encoder import encode_instruction, mask, NOP_WORD, ENCODERS
from stackvm_asm.errors import EncodingError
from stackvm_asm.instructions import (
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
    BINARY_OPS,
    build_instruction,
    is_valid_instruction,
)


class TestMask:
    """Tests for the field masking helper."""

    def test_positive_value_unchanged(self):
        assert mask(0x2A, 8) == 0x2A

    def test_wide_value_truncated(self):
        assert mask(0x1FF, 8) == 0xFF

    def test_negative_value_twos_complement(self):
        assert mask(-1, 4) == 0xF
        assert mask(-4, 28) == 0x0FFFFFFC


class TestMiscEncoding:
    """Tests for opcode 0 (exit/swap/nop/input/stinput/debug)."""

    def test_exit(self):
        assert encode_instruction(Exit(0)) == 0x00000000
        assert encode_instruction(Exit(7)) == 0x00000007

    def test_exit_code_truncated_to_byte(self):
        assert encode_instruction(Exit(300)) == 0x0000002C

    def test_swap_default(self):
        """Default swap exchanges the top two slots (4 and 0)."""
        assert encode_instruction(Swap()) == 0x01001000

    def test_swap_offsets_are_word_indexed(self):
        assert encode_instruction(Swap(8, 12)) == 0x01002003

    def test_nop(self):
        assert encode_instruction(Nop()) == 0x02000000
        assert NOP_WORD == 0x02000000

    def test_input(self):
        assert encode_instruction(Input()) == 0x04000000

    def test_stinput_default(self):
        assert encode_instruction(StInput()) == 0x05FFFFFF

    def test_stinput_limit(self):
        assert encode_instruction(StInput(10)) == 0x0500000A

    def test_debug(self):
        assert encode_instruction(Debug(7)) == 0x0F000007


class TestStackEncoding:
    """Tests for pop, dup and push."""

    def test_pop_default(self):
        assert encode_instruction(Pop()) == 0x10000004

    def test_pop_negative_truncated(self):
        assert encode_instruction(Pop(-4)) == 0x13FFFFFC

    def test_dup(self):
        assert encode_instruction(Dup(1)) == 0xC0000001

    def test_push(self):
        assert encode_instruction(Push(5)) == 0xF0000005

    def test_push_negative(self):
        assert encode_instruction(Push(-1)) == 0xFFFFFFFF

    def test_push_wide_value_truncated(self):
        assert encode_instruction(Push(0x12345678)) == 0xF2345678


class TestArithmeticEncoding:
    """Tests for binary and unary arithmetic."""

    @pytest.mark.parametrize("name,expected", [
        ("add", 0x20000000),
        ("sub", 0x21000000),
        ("div", 0x23000000),
        ("lsl", 0x28000000),
        ("lsr", 0x29000000),
        ("asr", 0x2B000000),
    ])
    def test_binary(self, name, expected):
        assert encode_instruction(BinaryArithmetic(BINARY_OPS[name])) == expected

    def test_unary(self):
        assert encode_instruction(UnaryArithmetic(0)) == 0x30000000
        assert encode_instruction(UnaryArithmetic(1)) == 0x31000000


class TestControlFlowEncoding:
    """Tests for call/return/goto and conditional branches."""

    def test_call_forward(self):
        assert encode_instruction(Call(12)) == 0x5000000C

    def test_call_backward(self):
        assert encode_instruction(Call(-4)) == 0x5FFFFFFC

    def test_return(self):
        assert encode_instruction(Return(3)) == 0x60000003

    def test_goto(self):
        assert encode_instruction(Goto(12)) == 0x7000000C
        assert encode_instruction(Goto(-8)) == 0x7FFFFFF8

    def test_binary_if_forward(self):
        """ifgt (3) with offset 8."""
        assert encode_instruction(BinaryIf(3, 8)) == 0x86000008

    def test_binary_if_backward(self):
        assert encode_instruction(BinaryIf(0, -8)) == 0x81FFFFF8

    def test_binary_if_clears_low_bits(self):
        assert encode_instruction(BinaryIf(0, 7)) == 0x80000004

    def test_unary_if(self):
        """ifnz (1) with offset 12."""
        assert encode_instruction(UnaryIf(1, 12)) == 0x9200000C

    def test_unary_if_condition_truncated(self):
        assert encode_instruction(UnaryIf(5, 0)) == 0x92000000


class TestPrintEncoding:
    """Tests for stprint, print and dump."""

    def test_stprint(self):
        assert encode_instruction(StringPrint(8)) == 0x40000008

    def test_stprint_negative(self):
        assert encode_instruction(StringPrint(-8)) == 0x4FFFFFF8

    def test_print_hex(self):
        assert encode_instruction(Print(8, 1)) == 0xD0000009

    def test_print_clears_offset_low_bits(self):
        assert encode_instruction(Print(5, 3)) == 0xD0000007

    def test_dump(self):
        assert encode_instruction(Dump()) == 0xE0000000


class TestEncoderProperties:
    """General encoder behaviour."""

    def test_every_shape_has_an_encoder(self):
        assert len(ENCODERS) == 19

    def test_deterministic(self):
        instr = BinaryIf(2, -64)
        assert encode_instruction(instr) == encode_instruction(BinaryIf(2, -64))

    def test_words_fit_in_32_bits(self):
        for instr in [Push(-1), Call(-4), Goto(-1 << 40), Pop(-1), Print(-1, -1)]:
            assert 0 <= encode_instruction(instr) <= 0xFFFFFFFF

    def test_unknown_type_raises(self):
        with pytest.raises(EncodingError, match="Cannot encode"):
            encode_instruction(object())


class TestBuildInstruction:
    """Tests for mnemonic -> instruction construction."""

    def test_selector_mnemonics(self):
        assert build_instruction("xor", []) == BinaryArithmetic(7)
        assert build_instruction("not", []) == UnaryArithmetic(1)
        assert build_instruction("ifle", [16]) == BinaryIf(4, 16)
        assert build_instruction("ifpl", [-4]) == UnaryIf(3, -4)
        assert build_instruction("printb", [4]) == Print(4, 2)

    def test_plain_mnemonics(self):
        assert build_instruction("swap", [8, 4]) == Swap(8, 4)
        assert build_instruction("push", [42]) == Push(42)
        assert build_instruction("dump", []) == Dump()

    def test_is_valid_instruction(self):
        assert is_valid_instruction("PUSH")
        assert is_valid_instruction("ifge")
        assert not is_valid_instruction("stpush")
        assert not is_valid_instruction("jump")
