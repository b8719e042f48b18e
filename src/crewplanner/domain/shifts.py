"""Shift blocks, shift codes and their fixed durations.

A day is split into three coarse blocks (open, middle, close). Each block
can be worked as a full shift or a half shift, giving six fine-grained
codes plus ``OFF``. Durations are fixed; the full-shift hours already
include the unpaid break.
"""

from enum import Enum
from typing import Optional


class ShiftBlock(Enum):
    """Coarse shift category for a day."""

    OPEN = "open"
    MIDDLE = "middle"
    CLOSE = "close"

    @property
    def letter(self) -> str:
        """Single-letter prefix used by shift codes (O, M or C)."""
        return _BLOCK_LETTERS[self]


class ShiftCode(Enum):
    """Fine-grained shift identifier combining block and duration."""

    O_F = "O_F"  # 08:00-17:00, 1h break
    O_H = "O_H"  # 08:00-12:00
    M_F = "M_F"  # 11:00-20:00, 1h break
    M_H = "M_H"  # 11:00-15:00
    C_F = "C_F"  # 12:30-21:30, 1h break
    C_H = "C_H"  # 17:30-21:30
    OFF = "OFF"

    @property
    def is_half(self) -> bool:
        return self.value.endswith("_H")

    @property
    def is_full(self) -> bool:
        return self.value.endswith("_F")


_BLOCK_LETTERS = {
    ShiftBlock.OPEN: "O",
    ShiftBlock.MIDDLE: "M",
    ShiftBlock.CLOSE: "C",
}

# Canonical block order used wherever blocks are enumerated.
BLOCK_ORDER: tuple[ShiftBlock, ...] = (
    ShiftBlock.OPEN,
    ShiftBlock.MIDDLE,
    ShiftBlock.CLOSE,
)

FULL_UNIT = 1.0
HALF_UNIT = 0.5

# A middle slot is mandatory once a day's target headcount reaches this.
MIDDLE_REQUIRED_FROM = 3


def parse_block(value) -> ShiftBlock:
    """Coerce a block name ("open"), letter ("O") or ShiftBlock to ShiftBlock.

    Raises:
        ValueError: If the value names no block.
    """
    if isinstance(value, ShiftBlock):
        return value
    text = str(value).strip()
    for block, letter in _BLOCK_LETTERS.items():
        if text.lower() == block.value or text.upper() == letter:
            return block
    raise ValueError(f"Unknown shift block: {value!r}")


class ShiftModel:
    """Static table mapping blocks to codes, units and hours.

    The engine and the reporting helpers take a ShiftModel so that the
    table is looked up in one place.

    Example:
        >>> model = ShiftModel()
        >>> model.code_for(ShiftBlock.MIDDLE, half=True)
        <ShiftCode.M_H: 'M_H'>
        >>> model.hours_of(ShiftBlock.MIDDLE, 0.5)
        4.0
    """

    SHIFT_HOURS: dict[ShiftCode, float] = {
        ShiftCode.O_F: 8.0,
        ShiftCode.O_H: 4.0,
        ShiftCode.M_F: 8.0,
        ShiftCode.M_H: 4.0,
        ShiftCode.C_F: 8.0,
        ShiftCode.C_H: 4.0,
        ShiftCode.OFF: 0.0,
    }

    def block_of(self, code: ShiftCode) -> Optional[ShiftBlock]:
        """Block a code belongs to, or None for OFF."""
        if code is ShiftCode.OFF:
            return None
        letter = code.value[0]
        for block, block_letter in _BLOCK_LETTERS.items():
            if block_letter == letter:
                return block
        return None

    def code_for(self, block: ShiftBlock, half: bool = False) -> ShiftCode:
        """Code for working ``block`` as a full or half shift."""
        suffix = "H" if half else "F"
        return ShiftCode(f"{block.letter}_{suffix}")

    def codes_for(self, block: ShiftBlock) -> tuple[ShiftCode, ShiftCode]:
        """Full and half codes for a block, in that order."""
        return self.code_for(block, half=False), self.code_for(block, half=True)

    def unit_of(self, code: ShiftCode) -> float:
        """Workload unit of a code: 1.0 full, 0.5 half, 0.0 off."""
        if code is ShiftCode.OFF:
            return 0.0
        return HALF_UNIT if code.is_half else FULL_UNIT

    def hours_of_code(self, code: ShiftCode) -> float:
        return self.SHIFT_HOURS[code]

    def hours_of(self, block: ShiftBlock, unit: float) -> float:
        """Hours worked for an assignment of ``unit`` in ``block``."""
        return self.SHIFT_HOURS[self.code_for(block, half=unit == HALF_UNIT)]
