"""Formation layouts for the Teamsheet selection engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .slot import PositionSlot


class FixtureFormat(Enum):
    """Match formats a fixture can be played in."""
    FIVE_A_SIDE = "5-a-side"
    SEVEN_A_SIDE = "7-a-side"
    NINE_A_SIDE = "9-a-side"
    ELEVEN_A_SIDE = "11-a-side"

    @classmethod
    def parse(cls, value: Optional[str]) -> "FixtureFormat":
        """Unknown or missing formats fall back to 7-a-side."""
        for fmt in cls:
            if fmt.value == value:
                return fmt
        return cls.SEVEN_A_SIDE


# Default position layout per format
DEFAULT_LAYOUTS: Dict[FixtureFormat, Tuple[str, ...]] = {
    FixtureFormat.FIVE_A_SIDE: ("GK", "DL", "DR", "STC", "STR"),
    FixtureFormat.SEVEN_A_SIDE: ("GK", "DL", "DC", "DR", "MC", "STL", "STC"),
    FixtureFormat.NINE_A_SIDE: ("GK", "DL", "DCL", "DCR", "DR", "MC", "AMC", "STL", "STC"),
    FixtureFormat.ELEVEN_A_SIDE: ("GK", "DL", "DCL", "DCR", "DR", "ML", "MC", "MR", "AML", "STC", "AMR"),
}


@dataclass(frozen=True)
class FormationTemplate:
    """A named set of position codes for one format."""
    name: str
    fixture_format: FixtureFormat
    positions: Tuple[str, ...]

    def slots(self) -> List[PositionSlot]:
        return [PositionSlot(code) for code in self.positions]

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "format": self.fixture_format.value,
            "positions": list(self.positions),
        }


class FormationTemplates:
    """Pre-defined formation templates for each fixture format."""

    _TEMPLATES: Dict[FixtureFormat, Dict[str, Tuple[str, ...]]] = {
        FixtureFormat.SEVEN_A_SIDE: {
            "1-1-3-1": ("GK", "DC", "DM", "ML", "MC", "MR", "STC"),
            "2-3-1": ("GK", "DL", "DR", "ML", "MC", "MR", "STC"),
            "3-2-1": ("GK", "DL", "DC", "DR", "MCL", "MCR", "STC"),
            "2-1-2-1": ("GK", "DL", "DR", "DM", "AML", "AMR", "STC"),
        },
        FixtureFormat.NINE_A_SIDE: {
            "3-2-3": ("GK", "DL", "DC", "DR", "MCL", "MCR", "AML", "STC", "AMR"),
            "2-4-2": ("GK", "DCL", "DCR", "ML", "MCL", "MCR", "MR", "STL", "STR"),
            "3-3-2": ("GK", "DL", "DC", "DR", "ML", "MC", "MR", "STL", "STR"),
            "3-1-3-1": ("GK", "DL", "DC", "DR", "DM", "ML", "MC", "MR", "STC"),
        },
        FixtureFormat.ELEVEN_A_SIDE: {
            "4-4-2": ("GK", "DL", "DCL", "DCR", "DR", "ML", "MCL", "MCR", "MR", "STL", "STR"),
            "4-3-3": ("GK", "DL", "DCL", "DCR", "DR", "DM", "MCL", "MCR", "AML", "STC", "AMR"),
            "3-5-2": ("GK", "DCL", "DC", "DCR", "ML", "MCL", "MC", "MCR", "MR", "STL", "STR"),
            "4-2-3-1": ("GK", "DL", "DCL", "DCR", "DR", "DML", "DMR", "AML", "AMC", "AMR", "STC"),
        },
    }

    @staticmethod
    def default_slots(fixture_format: Optional[str]) -> List[PositionSlot]:
        """Default slot layout for a format string such as "7-a-side"."""
        fmt = FixtureFormat.parse(fixture_format)
        return [PositionSlot(code) for code in DEFAULT_LAYOUTS[fmt]]

    @staticmethod
    def get_templates(fixture_format: Optional[str]) -> List[FormationTemplate]:
        """All templates for a format; formats without templates get their default layout."""
        fmt = FixtureFormat.parse(fixture_format)
        named = FormationTemplates._TEMPLATES.get(fmt)
        if not named:
            return [FormationTemplate("Default", fmt, DEFAULT_LAYOUTS[fmt])]
        return [FormationTemplate(name, fmt, positions) for name, positions in named.items()]

    @staticmethod
    def get_template(fixture_format: Optional[str], name: str) -> Optional[FormationTemplate]:
        for template in FormationTemplates.get_templates(fixture_format):
            if template.name == name:
                return template
        return None
