"""
Player model for the Teamsheet selection engine.

Players are owned by the external roster provider; the engine only reads them.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Player:
    """
    Read-only roster entry.

    Attributes:
        id: Unique player identifier from the roster provider
        display_name: Name shown on the team sheet
        squad_number: Shirt number, if the club assigns one
    """
    id: str
    display_name: str
    squad_number: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "display_name": self.display_name,
            "squad_number": self.squad_number,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        """Create from dictionary; accepts the roster table's `name` column too."""
        number = data.get("squad_number")
        return cls(
            id=str(data["id"]),
            display_name=data.get("display_name") or data.get("name") or "",
            squad_number=int(number) if number is not None else None,
        )
