"""
Label table.

Maps label names (case-sensitive) to byte addresses in the instruction
stream. Filled during the first pass and only read during the second.
"""

from typing import Dict, ItemsView, Iterator

from .errors import DuplicateLabelError, UndefinedLabelError


class LabelTable:
    """Label name -> program counter mapping."""

    def __init__(self):
        self._labels: Dict[str, int] = {}

    def define(self, name: str, pc: int, line_num: int = None, line_text: str = None) -> None:
        """
        Record a label at the given address.

        Raises:
            DuplicateLabelError: If the name is already defined
        """
        if name in self._labels:
            raise DuplicateLabelError(
                f"Duplicate label '{name}' (first defined at 0x{self._labels[name]:04X})",
                line_num,
                line_text,
            )
        self._labels[name] = pc

    def resolve(self, name: str, line_num: int = None, line_text: str = None) -> int:
        """
        Look up the address of a label.

        Raises:
            UndefinedLabelError: If the name was never defined
        """
        try:
            return self._labels[name]
        except KeyError:
            raise UndefinedLabelError(f"Undefined label '{name}'", line_num, line_text) from None

    def items(self) -> ItemsView[str, int]:
        return self._labels.items()

    def __contains__(self, name: str) -> bool:
        return name in self._labels

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)
