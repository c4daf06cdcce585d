"""
Custom exception types for the StackVM assembler.
"""


class AssemblerError(Exception):
    """Base exception for assembler errors."""

    def __init__(self, message: str, line_num: int = None, line_text: str = None):
        self.line_num = line_num
        self.line_text = line_text
        if line_num is not None:
            if line_text:
                message = f"Line {line_num}: {message}\n  {line_text.strip()}"
            else:
                message = f"Line {line_num}: {message}"
        super().__init__(message)


class ParseError(AssemblerError):
    """Exception raised for parsing errors."""

    pass


class UnknownMnemonicError(ParseError):
    """Raised when an instruction line starts with an unrecognised mnemonic."""

    pass


class MalformedPseudoInstructionError(ParseError):
    """Raised when stpush is missing its quoted string argument."""

    pass


class MalformedIntegerLiteralError(ParseError):
    """Raised when a numeric operand cannot be parsed."""

    pass


class MissingOperandError(ParseError):
    """Raised when a control-flow instruction has no target."""

    pass


class OperandCountError(ParseError):
    """Raised when an instruction is given more operands than it accepts."""

    pass


class EncodingError(AssemblerError):
    """Exception raised for instruction encoding errors."""

    pass


class SymbolError(AssemblerError):
    """Exception raised for symbol/label errors."""

    pass


class DuplicateLabelError(SymbolError):
    pass


class UndefinedLabelError(SymbolError):
    pass


class EmptyProgramError(AssemblerError):
    """Raised when a source file produces no instructions."""

    pass


class ProfileError(AssemblerError):
    """Raised when a target profile file is invalid."""

    pass
