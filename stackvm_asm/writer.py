"""
Binary image writer.

Image layout: magic header, then one 4-byte word per instruction in source
order, padded with NOP words up to the profile's alignment.
"""

from typing import List

from .encoder import NOP_WORD
from .profile import TargetProfile, DEFAULT_PROFILE


WORD_SIZE = 4


def padding_count(count: int, alignment: int = 4) -> int:
    """Number of NOP words needed to bring ``count`` up to a multiple of ``alignment``."""
    return (alignment - count % alignment) % alignment


def pad_words(words: List[int], alignment: int = 4) -> List[int]:
    """Return a copy of ``words`` with NOP padding appended."""
    return list(words) + [NOP_WORD] * padding_count(len(words), alignment)


def build_image(words: List[int], profile: TargetProfile = DEFAULT_PROFILE) -> bytes:
    """
    Serialize encoded instructions into a complete image.

    Args:
        words: Encoded 32-bit instructions
        profile: Target profile (header, byte order, alignment)

    Returns:
        Image bytes
    """
    image = bytearray(profile.magic)
    for word in pad_words(words, profile.alignment):
        image += (word & 0xFFFFFFFF).to_bytes(WORD_SIZE, profile.byte_order)
    return bytes(image)


def write_image(output_path: str, image: bytes) -> None:
    """
    Write a finished image to disk.

    Args:
        output_path: Path to output file
        image: Bytes returned by build_image
    """
    with open(output_path, "wb") as f:
        f.write(image)
