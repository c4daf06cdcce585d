"""
StackVM instruction definitions.

Every instruction the virtual machine understands is modelled as a small
frozen dataclass carrying only the operand fields its encoding needs. The
set of shapes is closed; ``Instruction`` is the union of all of them.

Operand values are stored as given by the source (possibly negative or too
wide). Masking to field widths happens in the encoder.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Type, Union


# =============================================================================
# Opcodes (bits 31-28)
# =============================================================================

OP_MISC = 0x0
OP_POP = 0x1
OP_BINARY_ARITH = 0x2
OP_UNARY_ARITH = 0x3
OP_STPRINT = 0x4
OP_CALL = 0x5
OP_RETURN = 0x6
OP_GOTO = 0x7
OP_BINARY_IF = 0x8
OP_UNARY_IF = 0x9
OP_DUP = 0xC
OP_PRINT = 0xD
OP_DUMP = 0xE
OP_PUSH = 0xF

# Sub-opcodes for OP_MISC (bits 27-24)
MISC_EXIT = 0
MISC_SWAP = 1
MISC_NOP = 2
MISC_INPUT = 4
MISC_STINPUT = 5
MISC_DEBUG = 15


# =============================================================================
# Instruction shapes
# =============================================================================


@dataclass(frozen=True)
class Exit:
    code: int = 0


@dataclass(frozen=True)
class Swap:
    """Swap two stack slots; both offsets are byte offsets (multiples of 4)."""

    source: int = 4
    dest: int = 0


@dataclass(frozen=True)
class Nop:
    pass


@dataclass(frozen=True)
class Input:
    pass


@dataclass(frozen=True)
class StInput:
    max_chars: int = 0xFFFFFF


@dataclass(frozen=True)
class Debug:
    value: int = 0


@dataclass(frozen=True)
class Pop:
    offset: int = 4


@dataclass(frozen=True)
class BinaryArithmetic:
    op: int


@dataclass(frozen=True)
class UnaryArithmetic:
    op: int


@dataclass(frozen=True)
class StringPrint:
    offset: int = 0


@dataclass(frozen=True)
class Call:
    """Call a subroutine; ``offset`` is relative to the call's own address."""

    offset: int


@dataclass(frozen=True)
class Return:
    offset: int = 0


@dataclass(frozen=True)
class Goto:
    """Unconditional jump; ``offset`` is relative to the goto's own address."""

    offset: int


@dataclass(frozen=True)
class BinaryIf:
    """
    Compare the two top-of-stack values and branch.

    Attributes:
        condition: 3-bit condition code (see BINARY_CONDITIONS)
        offset: PC-relative branch offset in bytes
    """

    condition: int
    offset: int


@dataclass(frozen=True)
class UnaryIf:
    """
    Test the top-of-stack value and branch.

    Attributes:
        condition: 2-bit condition code (see UNARY_CONDITIONS)
        offset: PC-relative branch offset in bytes
    """

    condition: int
    offset: int


@dataclass(frozen=True)
class Dup:
    offset: int = 0


@dataclass(frozen=True)
class Print:
    """
    Print a stack value.

    Attributes:
        offset: Stack offset of the value in bytes
        fmt: Output format code (see PRINT_FORMATS)
    """

    offset: int = 0
    fmt: int = 0


@dataclass(frozen=True)
class Dump:
    pass


@dataclass(frozen=True)
class Push:
    """Push a 28-bit literal; also used for label addresses and packed strings."""

    value: int = 0


Instruction = Union[
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
]


# =============================================================================
# Selector tables
# =============================================================================

BINARY_OPS = {
    "add": 0,
    "sub": 1,
    "mul": 2,
    "div": 3,
    "rem": 4,
    "and": 5,
    "or": 6,
    "xor": 7,
    "lsl": 8,
    "lsr": 9,
    "asr": 11,
}

UNARY_OPS = {
    "neg": 0,
    "not": 1,
}

BINARY_CONDITIONS = {
    "ifeq": 0,
    "ifne": 1,
    "iflt": 2,
    "ifgt": 3,
    "ifle": 4,
    "ifge": 5,
}

UNARY_CONDITIONS = {
    "ifez": 0,
    "ifnz": 1,
    "ifmi": 2,
    "ifpl": 3,
}

PRINT_FORMATS = {
    "print": 0,   # decimal
    "printh": 1,  # hexadecimal
    "printb": 2,  # binary
    "printo": 3,  # octal
}


# =============================================================================
# Mnemonic catalogue
# =============================================================================


@dataclass(frozen=True)
class Mnemonic:
    """
    How a source mnemonic maps onto an instruction shape.

    Attributes:
        kind: Instruction class produced
        defaults: Default for each operand in order; None marks a required operand
        relative: True if the last operand is a PC-relative branch target
        selector: Fixed sub-op / condition / format code baked into the mnemonic
    """

    kind: Type
    defaults: Tuple[Optional[int], ...] = ()
    relative: bool = False
    selector: Optional[int] = None

    @property
    def max_operands(self) -> int:
        return len(self.defaults)


MNEMONICS: Dict[str, Mnemonic] = {
    "exit": Mnemonic(Exit, defaults=(0,)),
    "swap": Mnemonic(Swap, defaults=(4, 0)),
    "nop": Mnemonic(Nop),
    "input": Mnemonic(Input),
    "stinput": Mnemonic(StInput, defaults=(0xFFFFFF,)),
    "debug": Mnemonic(Debug, defaults=(0,)),
    "pop": Mnemonic(Pop, defaults=(4,)),
    "stprint": Mnemonic(StringPrint, defaults=(0,)),
    "call": Mnemonic(Call, defaults=(None,), relative=True),
    "return": Mnemonic(Return, defaults=(0,)),
    "goto": Mnemonic(Goto, defaults=(None,), relative=True),
    "dup": Mnemonic(Dup, defaults=(0,)),
    "dump": Mnemonic(Dump),
    "push": Mnemonic(Push, defaults=(0,)),
}
MNEMONICS.update(
    {name: Mnemonic(BinaryArithmetic, selector=op) for name, op in BINARY_OPS.items()}
)
MNEMONICS.update(
    {name: Mnemonic(UnaryArithmetic, selector=op) for name, op in UNARY_OPS.items()}
)
MNEMONICS.update(
    {
        name: Mnemonic(BinaryIf, defaults=(None,), relative=True, selector=cond)
        for name, cond in BINARY_CONDITIONS.items()
    }
)
MNEMONICS.update(
    {
        name: Mnemonic(UnaryIf, defaults=(None,), relative=True, selector=cond)
        for name, cond in UNARY_CONDITIONS.items()
    }
)
MNEMONICS.update(
    {name: Mnemonic(Print, defaults=(0,), selector=fmt) for name, fmt in PRINT_FORMATS.items()}
)


def get_mnemonic(mnemonic: str) -> Optional[Mnemonic]:
    """
    Look up a mnemonic definition.

    Args:
        mnemonic: Instruction mnemonic (case-insensitive)

    Returns:
        Mnemonic object if found, None otherwise
    """
    return MNEMONICS.get(mnemonic.lower())


def is_valid_instruction(mnemonic: str) -> bool:
    """Check if a mnemonic is a primitive instruction."""
    return mnemonic.lower() in MNEMONICS


def build_instruction(mnemonic: str, values: List[int]) -> Instruction:
    """
    Construct the instruction value for a mnemonic from resolved operands.

    Args:
        mnemonic: Known instruction mnemonic
        values: One integer per operand slot, defaults already applied

    Returns:
        Instruction value
    """
    info = MNEMONICS[mnemonic.lower()]
    if info.selector is None:
        return info.kind(*values)
    if info.kind is Print:
        return Print(values[0], info.selector)
    return info.kind(info.selector, *values)
