"""
Main assembler implementation.

Two-pass assembler for StackVM assembly to a binary image.
"""

from typing import List, Tuple

from .parser import Parser, ParsedLine, parse_integer, looks_like_integer
from .instructions import Instruction, get_mnemonic, is_valid_instruction, build_instruction
from .pseudo import is_pseudo_instruction, expand_pseudo, get_pseudo_instruction_count
from .encoder import encode_instruction
from .symbols import LabelTable
from .profile import TargetProfile, DEFAULT_PROFILE
from .writer import WORD_SIZE, build_image, write_image
from .errors import (
    AssemblerError,
    UnknownMnemonicError,
    MissingOperandError,
    OperandCountError,
    EmptyProgramError,
)


class Assembler:
    """
    Two-pass StackVM assembler.

    Pass 1: Collect labels and compute addresses
    Pass 2: Build instructions with resolved labels

    Both passes go through the same line walk so that the program counter
    advances identically in each.
    """

    def __init__(self, verbose: bool = False, profile: TargetProfile = DEFAULT_PROFILE):
        """
        Initialize the assembler.

        Args:
            verbose: If True, print detailed assembly information
            profile: Output image layout
        """
        self.verbose = verbose
        self.profile = profile
        self.parser = Parser()
        self.symbols = LabelTable()
        self.instructions: List[Instruction] = []
        self.source_map: List[Tuple[int, str, int]] = []  # (addr, source, line_num)

    def log(self, message: str) -> None:
        """Print message if verbose mode is enabled."""
        if self.verbose:
            print(message)

    def assemble_file(self, input_path: str, output_path: str = None) -> List[Instruction]:
        """
        Assemble a source file, optionally writing the binary image.

        The image is only written once assembly has fully succeeded.

        Args:
            input_path: Path to input assembly file
            output_path: Path to output binary (optional)

        Returns:
            List of instructions in emission order
        """
        self.log(f"Assembling: {input_path}")
        lines = self.parser.parse_file(input_path)
        self._assemble(lines)

        if output_path:
            write_image(output_path, self.to_binary())
            self.log(f"Output written to: {output_path}")

        return self.instructions

    def assemble_string(self, source: str) -> List[Instruction]:
        """
        Assemble from a string.

        Args:
            source: Assembly source code

        Returns:
            List of instructions in emission order
        """
        lines = self.parser.parse_string(source)
        return self._assemble(lines)

    def _assemble(self, lines: List[ParsedLine]) -> List[Instruction]:
        self.symbols = LabelTable()
        self.instructions = []
        self.source_map = []

        symbols = self._pass1(lines)
        instructions, source_map = self._pass2(lines, symbols)

        if not instructions:
            raise EmptyProgramError("No instructions to assemble")

        self.symbols = symbols
        self.instructions = instructions
        self.source_map = source_map
        return self.instructions

    def _pass1(self, lines: List[ParsedLine]) -> LabelTable:
        """
        First pass: Collect labels and compute addresses.
        """
        self.log("\n=== Pass 1: Collecting labels ===")
        symbols = LabelTable()
        size, _, _ = self._walk(lines, symbols, emit=False)
        self.log(f"  Total symbols: {len(symbols)}")
        self.log(f"  Program size: {size} bytes")
        return symbols

    def _pass2(
        self, lines: List[ParsedLine], symbols: LabelTable
    ) -> Tuple[List[Instruction], List[Tuple[int, str, int]]]:
        """
        Second pass: Build instructions with resolved labels.
        """
        self.log("\n=== Pass 2: Encoding instructions ===")
        _, instructions, source_map = self._walk(lines, symbols, emit=True)
        self.log(f"\n  Total instructions: {len(instructions)}")
        return instructions, source_map

    def _walk(self, lines: List[ParsedLine], symbols: LabelTable, emit: bool):
        """
        Walk the parsed lines, advancing the program counter.

        Args:
            lines: Parsed source lines
            symbols: Label table; written when ``emit`` is False, read otherwise
            emit: False records labels, True builds instructions

        Returns:
            Tuple of (final pc, instructions, source map)
        """
        pc = 0
        instructions: List[Instruction] = []
        source_map: List[Tuple[int, str, int]] = []

        for line in lines:
            try:
                if line.label is not None:
                    if not emit:
                        symbols.define(line.label, pc, line.line_num, line.original)
                        self.log(f"  Label '{line.label}' at 0x{pc:04X}")
                    continue

                count = self._instruction_count(line)

                if emit:
                    built = self._build(line, pc, symbols)
                    if len(built) != count:
                        raise AssemblerError(
                            f"{line.mnemonic} produced {len(built)} words, "
                            f"pass 1 reserved {count}"
                        )
                    source = line.original.strip()
                    for index, instr in enumerate(built):
                        address = pc + index * WORD_SIZE
                        instructions.append(instr)
                        source_map.append((address, source, line.line_num))
                        self.log(
                            f"  0x{address:04X}: {encode_instruction(instr):08X}  "
                            f"{type(instr).__name__:<16} {source}"
                        )

                pc += count * WORD_SIZE

            except AssemblerError as e:
                if e.line_num is not None:
                    raise
                raise type(e)(str(e), line.line_num, line.original) from None

        return pc, instructions, source_map

    def _instruction_count(self, line: ParsedLine) -> int:
        """Number of words a source line occupies in the output."""
        if is_pseudo_instruction(line.mnemonic):
            return get_pseudo_instruction_count(line.mnemonic, line.operand_text)
        if not is_valid_instruction(line.mnemonic):
            raise UnknownMnemonicError(f"Unknown instruction: {line.mnemonic}")
        return 1

    def _build(self, line: ParsedLine, pc: int, symbols: LabelTable) -> List[Instruction]:
        """
        Build the instructions for a single source line.

        Args:
            line: Parsed instruction line
            pc: Address of the first word this line produces
            symbols: Completed label table

        Returns:
            Instructions for this line
        """
        mnemonic = line.mnemonic

        if is_pseudo_instruction(mnemonic):
            return expand_pseudo(mnemonic, line.operand_text)

        info = get_mnemonic(mnemonic)
        operands = line.operands

        if len(operands) > info.max_operands:
            raise OperandCountError(
                f"{mnemonic} takes at most {info.max_operands} operand(s), got {len(operands)}"
            )

        values = []
        for index, default in enumerate(info.defaults):
            if index < len(operands):
                values.append(
                    self._resolve_operand(operands[index], pc, symbols, info.relative)
                )
            elif default is None:
                raise MissingOperandError(f"{mnemonic} requires a target label")
            else:
                values.append(default)

        return [build_instruction(mnemonic, values)]

    def _resolve_operand(
        self, token: str, pc: int, symbols: LabelTable, relative: bool
    ) -> int:
        """
        Resolve an integer literal or label reference.

        Label references become ``target - pc`` for control-flow instructions
        and the label's absolute address everywhere else. Integer literals are
        used as given. A defined label wins over an integer reading.
        """
        if token not in symbols and looks_like_integer(token):
            return parse_integer(token)

        target = symbols.resolve(token)
        if relative:
            return target - pc
        return target

    @property
    def encoded(self) -> List[int]:
        """Encoded 32-bit words for the last assembled program."""
        return [encode_instruction(instr) for instr in self.instructions]

    def to_binary(self) -> bytes:
        """Build the binary image (header, words, padding)."""
        return build_image(self.encoded, self.profile)

    def get_hex_string(self) -> str:
        """
        Get assembled instructions as a hex string.

        Returns:
            String with one hex instruction per line
        """
        return "\n".join(f"{word:08x}" for word in self.encoded)

    def get_listing(self) -> str:
        """
        Get an assembly listing showing addresses, encodings, and source.

        Returns:
            Formatted listing string
        """
        lines = []
        lines.append("Address   Code       Source")
        lines.append("-" * 60)

        for (addr, source, line_num), word in zip(self.source_map, self.encoded):
            lines.append(f"0x{addr:04X}:   {word:08X}   {source}")

        return "\n".join(lines)
