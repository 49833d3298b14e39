"""Participant and roster models."""

from dataclasses import dataclass
from enum import Enum


class Position(str, Enum):
    """Playing positions."""

    FORWARD = "forward"
    DEFENSE = "defense"
    GOALIE = "goalie"


class Team(str, Enum):
    """Team a participant plays for in the current session."""

    RED = "red"
    BLUE = "blue"
    UNASSIGNED = "unassigned"


@dataclass(frozen=True)
class RosterEntry:
    """A known player, independent of any session."""

    id: int
    name: str
    position: Position

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "position": self.position.value}


@dataclass(frozen=True)
class Participant:
    """A player signed up for the current session."""

    id: int
    name: str
    position: Position
    team: Team = Team.UNASSIGNED

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "position": self.position.value,
            "team": self.team.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Participant":
        """Build a participant from its JSON form.

        Raises:
            ValueError: If a field is missing or has an unknown value
        """
        try:
            return cls(
                id=int(data["id"]),
                name=str(data["name"]),
                position=Position(data["position"]),
                team=Team(data.get("team") or Team.UNASSIGNED.value),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Invalid participant payload: {data!r}") from e
