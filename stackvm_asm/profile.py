"""
Target profile loader.

Parses and validates YAML files describing the output image layout for a
StackVM build: magic header, word byte order and instruction alignment.
The defaults match the reference virtual machine.
"""

from dataclasses import dataclass
from typing import Any, Tuple

import yaml

from .errors import ProfileError


VALID_BYTE_ORDERS = {'little', 'big'}


@dataclass(frozen=True)
class TargetProfile:
    """
    Output layout for an assembled image.

    Attributes:
        name: Profile name
        magic: Header bytes written before the first instruction
        byte_order: Byte order of each instruction word
        alignment: Instruction count is padded to a multiple of this
        description: Free-form text
    """

    name: str = 'stackvm'
    magic: Tuple[int, ...] = (0xDE, 0xAD, 0xBE, 0xEF)
    byte_order: str = 'little'
    alignment: int = 4
    description: str = ''


DEFAULT_PROFILE = TargetProfile()


def parse_profile(yaml_content: str) -> TargetProfile:
    """
    Parse and validate a YAML target profile.

    Args:
        yaml_content: Raw YAML string content

    Returns:
        Validated TargetProfile

    Raises:
        ProfileError: If the profile is invalid
    """
    try:
        data = yaml.safe_load(yaml_content)
    except yaml.YAMLError as e:
        raise ProfileError(f"Invalid YAML syntax: {e}")

    if not isinstance(data, dict):
        raise ProfileError("Profile must be a YAML mapping/dictionary")

    if 'name' not in data:
        raise ProfileError("Missing required field 'name'")
    if not isinstance(data['name'], str) or not data['name']:
        raise ProfileError("'name' must be a non-empty string")

    magic = DEFAULT_PROFILE.magic
    if 'magic' in data:
        magic = _parse_magic(data['magic'])

    byte_order = data.get('byte_order', DEFAULT_PROFILE.byte_order)
    if byte_order not in VALID_BYTE_ORDERS:
        raise ProfileError(
            f"'byte_order' must be one of {sorted(VALID_BYTE_ORDERS)}, got '{byte_order}'"
        )

    alignment = data.get('alignment', DEFAULT_PROFILE.alignment)
    _require_positive_int(alignment, 'alignment')

    description = data.get('description', '')
    if not isinstance(description, str):
        raise ProfileError("'description' must be a string")

    return TargetProfile(
        name=data['name'],
        magic=magic,
        byte_order=byte_order,
        alignment=alignment,
        description=description,
    )


def load_profile(path: str) -> TargetProfile:
    """Read and parse a profile file."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()
    except OSError as e:
        raise ProfileError(f"Cannot read profile '{path}': {e.strerror}")
    return parse_profile(content)


def _parse_magic(value: Any) -> Tuple[int, ...]:
    """Accept a 32-bit integer (written big-end first) or a list of byte values."""
    if isinstance(value, bool):
        raise ProfileError("'magic' must be an integer or a list of bytes")

    if isinstance(value, int):
        if not 0 <= value <= 0xFFFFFFFF:
            raise ProfileError("'magic' integer must fit in 32 bits")
        return tuple(value.to_bytes(4, 'big'))

    if isinstance(value, list):
        for i, byte in enumerate(value):
            if isinstance(byte, bool) or not isinstance(byte, int) or not 0 <= byte <= 0xFF:
                raise ProfileError(f"magic[{i}] must be a byte value (0-255)")
        return tuple(value)

    raise ProfileError("'magic' must be an integer or a list of bytes")


def _require_positive_int(value: Any, field_path: str) -> None:
    """Validate that a value is a positive integer."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ProfileError(f"{field_path} must be a positive integer")


def get_profile_summary(profile: TargetProfile) -> dict:
    """
    Get a summary of the profile for display.

    Args:
        profile: Validated profile

    Returns:
        Summary dictionary with key info
    """
    return {
        'name': profile.name,
        'description': profile.description,
        'magic': ' '.join(f"{b:02X}" for b in profile.magic),
        'byte_order': profile.byte_order,
        'alignment': profile.alignment,
    }
