"""
Slot identifiers for the Teamsheet selection engine.

A slot is either a named place in the formation or a numbered place on the
substitutes bench. Both serialise to a string key ("DC", "sub-3") which is
what the UI and the flat records carry.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ..utils.constants import SUBSTITUTE_SLOT_PREFIX

# Every position code a slot or position label may use
POSITION_CODES = (
    "GK",
    "DL", "DCL", "DC", "DCR", "DR",
    "WBL", "WBR",
    "DM", "DML", "DMR",
    "ML", "MCL", "MC", "MCR", "MR",
    "AML", "AMC", "AMR",
    "STL", "STC", "STR", "ST",
)

POSITION_NAMES = {
    "GK": "Goalkeeper",
    "DL": "Left Back",
    "DCL": "Centre Back (Left)",
    "DC": "Centre Back",
    "DCR": "Centre Back (Right)",
    "DR": "Right Back",
    "WBL": "Left Wing Back",
    "WBR": "Right Wing Back",
    "DM": "Defensive Midfielder",
    "DML": "Defensive Midfielder (Left)",
    "DMR": "Defensive Midfielder (Right)",
    "ML": "Left Midfielder",
    "MCL": "Centre Midfielder (Left)",
    "MC": "Centre Midfielder",
    "MCR": "Centre Midfielder (Right)",
    "MR": "Right Midfielder",
    "AML": "Left Attacking Midfielder",
    "AMC": "Attacking Midfielder",
    "AMR": "Right Attacking Midfielder",
    "STL": "Striker (Left)",
    "STC": "Centre Forward",
    "STR": "Striker (Right)",
    "ST": "Striker",
}


@dataclass(frozen=True, order=True)
class PositionSlot:
    """A place in the formation, named by its position code."""
    code: str

    kind = "position"

    @property
    def key(self) -> str:
        return self.code

    @property
    def label(self) -> str:
        return self.code

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True, order=True)
class SubstituteSlot:
    """A numbered place on the substitutes bench (1-based)."""
    index: int

    kind = "substitute"

    @property
    def key(self) -> str:
        return f"{SUBSTITUTE_SLOT_PREFIX}{self.index}"

    @property
    def label(self) -> str:
        return self.key

    def __str__(self) -> str:
        return self.key


Slot = Union[PositionSlot, SubstituteSlot]


def is_position_code(code: str) -> bool:
    return code in POSITION_CODES


def is_substitute_label(label: str) -> bool:
    return str(label).strip().lower().startswith(SUBSTITUTE_SLOT_PREFIX)


def parse_slot(value: Union[str, Slot]) -> Slot:
    """
    Turn a slot key into a slot.

    Position codes are matched case-insensitively ("dc" -> DC). Substitute
    keys must be "sub-<n>" with n >= 1.

    Args:
        value: Slot key or an existing slot

    Returns:
        PositionSlot or SubstituteSlot

    Raises:
        ValueError: If the key names neither a known position nor a substitute slot
    """
    if isinstance(value, (PositionSlot, SubstituteSlot)):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Slot key must be a string, got {type(value).__name__}")

    cleaned = value.strip()
    if is_substitute_label(cleaned):
        number = cleaned[len(SUBSTITUTE_SLOT_PREFIX):]
        if not number.isdigit() or int(number) < 1:
            raise ValueError(f"Invalid substitute slot: '{value}'")
        return SubstituteSlot(int(number))

    code = cleaned.upper()
    if not is_position_code(code):
        raise ValueError(f"Unknown position code: '{value}'")
    return PositionSlot(code)


def slot_sort_key(slot: Slot):
    """Formation slots in formation order, then substitutes by number."""
    if isinstance(slot, PositionSlot):
        return (0, POSITION_CODES.index(slot.code), 0)
    return (1, 0, slot.index)
